"""
Shortener Edge — Stream Wrappers
==================================

What:  Small decorators over the two ASGI byte channels.
How:   Every response writer exposes the same capability (headers, a status
       write, a byte write, close) and holds a reference to the next writer in
       the chain. Chains are composed explicitly by the caller:

           CompressingWriter → ByteCountingWriter → SendWriter(send)

       Closing the head of a chain closes every writer behind it.

       On the inbound side, DecompressingReader turns a gzip-encoded request
       body into plain bytes and exposes an ASGI `receive` adapter for the
       application it wraps.
"""

import gzip
import io
import logging
import zlib
from typing import AsyncGenerator, Optional, Protocol

from starlette.datastructures import MutableHeaders
from starlette.requests import ClientDisconnect
from starlette.types import Message, Receive, Send

from shortener.exceptions import DecompressionError

logger = logging.getLogger(__name__)

GZIP_MAGIC = b"\x1f\x8b"
GZIP_HEADER_SIZE = 10
GZIP_METHOD_DEFLATE = 8

# wbits for zlib streams that carry a gzip header and trailer
_GZIP_WBITS = 16 + zlib.MAX_WBITS


class ResponseWriter(Protocol):
    """The capability every response wrapper implements and forwards to."""

    @property
    def headers(self) -> MutableHeaders: ...

    async def write_status(self, status_code: int) -> None: ...

    async def write(self, data: bytes) -> int: ...

    async def close(self) -> None: ...


# ══════════════════════════════════════════════════════════════════════════
# Response writers
# ══════════════════════════════════════════════════════════════════════════


class SendWriter:
    """
    Terminal writer: turns status/byte writes into ASGI messages.

    The status line and headers go out with the first write_status() call (or
    implicitly as 200 on the first body write). Later status writes are
    ignored, the same way a committed HTTP response cannot change its status.
    close() sends the final, empty body message.
    """

    def __init__(self, send: Send, headers: Optional[MutableHeaders] = None):
        self._send = send
        self._headers = headers if headers is not None else MutableHeaders()
        self.status_code: Optional[int] = None
        self._closed = False

    @property
    def headers(self) -> MutableHeaders:
        return self._headers

    async def write_status(self, status_code: int) -> None:
        if self.status_code is not None:
            logger.debug(
                "Ignoring status %d: response already started with %d",
                status_code,
                self.status_code,
            )
            return
        self.status_code = status_code
        await self._send(
            {
                "type": "http.response.start",
                "status": status_code,
                "headers": self._headers.raw,
            }
        )

    async def write(self, data: bytes) -> int:
        if self.status_code is None:
            await self.write_status(200)
        if data:
            await self._send({"type": "http.response.body", "body": data, "more_body": True})
        return len(data)

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self.status_code is None:
            await self.write_status(200)
        await self._send({"type": "http.response.body", "body": b"", "more_body": False})


class ByteCountingWriter:
    """Forwards writes unchanged and counts the bytes the next writer accepted."""

    def __init__(self, writer: ResponseWriter):
        self._writer = writer
        self.size = 0

    @property
    def headers(self) -> MutableHeaders:
        return self._writer.headers

    async def write_status(self, status_code: int) -> None:
        await self._writer.write_status(status_code)

    async def write(self, data: bytes) -> int:
        n = await self._writer.write(data)
        self.size += n
        return n

    async def close(self) -> None:
        await self._writer.close()


class CompressingWriter:
    """
    Gzip-compresses everything written to it before handing it on.

    Status handling:
        A status below 300 also sets `Content-Encoding: gzip` (and drops any
        Content-Length, which described the uncompressed body). Any other
        status is forwarded without touching the headers.

    Why the gate: redirects and errors are never worth compressing, and a
    compressed body without its Content-Encoding header would reach the
    client as garbage. Keeping the header decision next to the compressor
    means the two can never disagree.

    Flushing:
        Bytes leave the compressor as the gzip stream produces them. The
        final block and the gzip trailer are only written by close().

    write() returns the number of uncompressed bytes consumed.
    """

    def __init__(self, writer: ResponseWriter, compresslevel: int = 6):
        self._writer = writer
        self._buffer = io.BytesIO()
        self._gzip = gzip.GzipFile(mode="wb", fileobj=self._buffer, compresslevel=compresslevel)
        self._status_written = False
        self._closed = False

    @property
    def headers(self) -> MutableHeaders:
        return self._writer.headers

    async def write_status(self, status_code: int) -> None:
        self._status_written = True
        if status_code < 300:
            self.headers["Content-Encoding"] = "gzip"
            # Why: the old length described the uncompressed body
            if "content-length" in self.headers:
                del self.headers["content-length"]
        await self._writer.write_status(status_code)

    async def write(self, data: bytes) -> int:
        if not self._status_written:
            await self.write_status(200)
        self._gzip.write(data)
        await self._flush_buffer()
        return len(data)

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self._gzip.close()
            await self._flush_buffer()
        finally:
            await self._writer.close()

    async def _flush_buffer(self) -> None:
        chunk = self._buffer.getvalue()
        if chunk:
            self._buffer.seek(0)
            self._buffer.truncate()
            await self._writer.write(chunk)


# ══════════════════════════════════════════════════════════════════════════
# Request reader
# ══════════════════════════════════════════════════════════════════════════


async def iter_request_body(receive: Receive) -> AsyncGenerator[bytes, None]:
    """Yield the non-empty body chunks of an ASGI request."""
    more_body = True
    while more_body:
        message = await receive()
        if message["type"] == "http.disconnect":
            raise ClientDisconnect()
        more_body = message.get("more_body", False)
        body = message.get("body", b"")
        if body:
            yield body


class DecompressingReader:
    """
    Streams the decompressed content of a gzip-encoded body.

    Use `open()` / `from_receive()` rather than the constructor: they read far
    enough to validate the gzip header, so a malformed body is rejected before
    any application code sees it.

    When:  Only for requests that declare `Content-Encoding: gzip`; plain
           bodies never pass through a reader.

    Behavior:
        - read() returns the next decompressed chunk, b"" once the body ends
        - concatenated gzip members are decoded back to back
        - corrupt or truncated data raises DecompressionError from read()
        - close() releases the decompressor and closes the source stream,
          re-raising the first error either step produced
    """

    def __init__(
        self,
        source: AsyncGenerator[bytes, None],
        pending: bytes = b"",
        receive: Optional[Receive] = None,
    ):
        self._source = source
        self._pending = pending
        self._receive = receive
        self._decompressor = zlib.decompressobj(_GZIP_WBITS)
        self._eof = False
        self._body_sent = False
        self._closed = False

    @classmethod
    async def open(
        cls,
        source: AsyncGenerator[bytes, None],
        receive: Optional[Receive] = None,
    ) -> "DecompressingReader":
        """
        Validate the gzip header at the start of `source` and return a reader.

        Raises:
            DecompressionError: the body is shorter than a gzip header, has the
                wrong magic bytes or an unknown compression method. `source`
                is closed before the error is raised.
        """
        header = b""
        try:
            while len(header) < GZIP_HEADER_SIZE:
                try:
                    header += await source.__anext__()
                except StopAsyncIteration:
                    break
        except Exception:
            await source.aclose()
            raise

        if (
            len(header) < GZIP_HEADER_SIZE
            or header[:2] != GZIP_MAGIC
            or header[2] != GZIP_METHOD_DEFLATE
        ):
            await source.aclose()
            raise DecompressionError(
                "Invalid gzip header",
                context={"received": header[:GZIP_HEADER_SIZE].hex()},
            )
        return cls(source, pending=header, receive=receive)

    @classmethod
    async def from_receive(cls, receive: Receive) -> "DecompressingReader":
        return await cls.open(iter_request_body(receive), receive=receive)

    async def read(self) -> bytes:
        if self._closed:
            raise ValueError("read from a closed DecompressingReader")
        while not self._eof:
            if self._pending:
                data, self._pending = self._pending, b""
            else:
                try:
                    data = await self._source.__anext__()
                except StopAsyncIteration:
                    self._finish()
                    break
            out = self._decompress(data)
            if out:
                return out
        return b""

    async def receive(self) -> Message:
        """ASGI receive callable serving the decompressed body."""
        if self._body_sent:
            if self._receive is not None:
                return await self._receive()
            return {"type": "http.disconnect"}
        chunk = await self.read()
        if not chunk:
            self._body_sent = True
        return {"type": "http.request", "body": chunk, "more_body": bool(chunk)}

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        first_error: Optional[Exception] = None

        try:
            self._release_decompressor()
        except Exception as e:
            first_error = e

        try:
            await self._source.aclose()
        except Exception as e:
            if first_error is None:
                first_error = e

        if first_error is not None:
            raise first_error

    def _decompress(self, data: bytes) -> bytes:
        try:
            out = self._decompressor.decompress(data)
            # A new member may start right after the previous trailer
            while self._decompressor.eof and self._decompressor.unused_data:
                rest = self._decompressor.unused_data
                self._decompressor = zlib.decompressobj(_GZIP_WBITS)
                out += self._decompressor.decompress(rest)
        except zlib.error as e:
            self._eof = True
            raise DecompressionError("Corrupt gzip stream", context={"error": str(e)}) from e
        return out

    def _finish(self) -> None:
        self._eof = True
        if not self._decompressor.eof:
            raise DecompressionError("Unexpected end of gzip stream")

    def _release_decompressor(self) -> None:
        self._decompressor = None
