"""
Shortener Edge — Gzip Compression Middleware
==============================================

What:  Decodes gzip request bodies and gzip-encodes large text responses.
How:   Pure ASGI middleware.
Why:   Short URLs are tiny, so most responses go out uncompressed; only large
       JSON or HTML bodies gain more from gzip than they cost in CPU.
When:  Inside RequestLoggingMiddleware, so the access log sees wire bytes.

Inbound:
    Content-Encoding: gzip → the body is wrapped in a DecompressingReader
    before the application runs. A malformed gzip header is answered with a
    bare 400 and the application is never called.

Outbound:
    The decision to compress depends on the final size of the response, so
    the application's response is buffered in full. Once the application has
    returned, the response is replayed through

        CompressingWriter → ByteCountingWriter → SendWriter(send)   (gzip)
        ByteCountingWriter → SendWriter(send)                      (identity)

    A response is gzip-encoded only when ALL of these hold:
        - status < 300
        - body is larger than GZIP_MIN_SIZE bytes
        - Accept-Encoding mentions gzip
        - Content-Type contains one of GZIP_CONTENT_TYPES

Both wrappers are released on every exit path through an AsyncExitStack.
"""

import logging
from contextlib import AsyncExitStack
from typing import Optional

from starlette.datastructures import Headers, MutableHeaders
from starlette.responses import Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from shortener.exceptions import DecompressionError
from shortener.streams import (
    ByteCountingWriter,
    CompressingWriter,
    DecompressingReader,
    ResponseWriter,
    SendWriter,
)

logger = logging.getLogger(__name__)

# Responses must be strictly larger than this to be compressed
GZIP_MIN_SIZE = 1400

# Matched as case-insensitive substrings of the response Content-Type
GZIP_CONTENT_TYPES = ("application/json", "text/html")


def should_compress(size: int, accept_encoding: str, content_type: str) -> bool:
    """Gzip decision for a finished response of `size` bytes."""
    if size <= GZIP_MIN_SIZE:
        return False
    if "gzip" not in accept_encoding.lower():
        return False
    content_type = content_type.lower()
    return any(allowed in content_type for allowed in GZIP_CONTENT_TYPES)


class BufferedResponse:
    """ASGI send callable that keeps the whole response instead of sending it."""

    def __init__(self) -> None:
        self.status_code: Optional[int] = None
        self.headers = MutableHeaders()
        self.body = bytearray()

    async def __call__(self, message: Message) -> None:
        if message["type"] == "http.response.start":
            self.status_code = message["status"]
            self.headers = MutableHeaders(raw=list(message.get("headers", [])))
        elif message["type"] == "http.response.body":
            self.body.extend(message.get("body", b""))


class CompressionMiddleware:
    """Gzip request decoding and size-gated gzip response encoding."""

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_headers = Headers(scope=scope)

        async with AsyncExitStack() as stack:
            if "gzip" in request_headers.get("content-encoding", "").lower():
                try:
                    reader = await DecompressingReader.from_receive(receive)
                except DecompressionError as e:
                    logger.warning("Rejecting request body: %s | Context: %s", e.message, e.context)
                    await Response(status_code=400)(scope, receive, send)
                    return
                stack.push_async_callback(reader.close)
                scope = _strip_body_encoding(scope)
                receive = reader.receive

            # Why buffer: the size rule needs the final body length, which a
            # streamed response only reveals after its first bytes are sent
            response = BufferedResponse()
            await self.app(scope, receive, response)

            compress = (response.status_code or 200) < 300 and should_compress(
                len(response.body),
                request_headers.get("accept-encoding", ""),
                response.headers.get("content-type", ""),
            )

            counter = ByteCountingWriter(SendWriter(send, headers=response.headers))
            writer: ResponseWriter = CompressingWriter(counter) if compress else counter
            stack.push_async_callback(writer.close)

            if response.status_code is not None:
                await writer.write_status(response.status_code)
            if response.body:
                await writer.write(bytes(response.body))

        if compress:
            logger.debug(
                "Compressed %s response: %d → %d bytes",
                response.headers.get("content-type", ""),
                len(response.body),
                counter.size,
            )


def _strip_body_encoding(scope: Scope) -> Scope:
    """Copy of `scope` whose headers describe the decoded body."""
    scope = dict(scope)
    headers = MutableHeaders(scope=scope)
    del headers["content-encoding"]
    del headers["content-length"]
    return scope
