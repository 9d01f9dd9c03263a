"""
Shortener Edge — Request Logging Middleware
=============================================

What:  One structured access-log record per HTTP request.
How:   Pure ASGI middleware. The ASGI `send` channel is wrapped by a
       ResponseRecorder that notes the status of `http.response.start` and
       counts every body byte that is forwarded. When the application returns
       (or raises), the record is emitted with:

    {
        "uri": "/api/shorten?x=1",   raw request target
        "method": "POST",
        "status": 201,               0 if no response was started
        "size": 42,                  bytes written to the transport
        "duration": 0.0031           seconds, entry to application return
    }

The logger is injected at construction (default: "shortener.access"), so
tests can attach their own handler to it.

Why pure ASGI (not BaseHTTPMiddleware): the recorder sits on `send` itself,
so `size` is what the client actually received, after compression.
"""

import logging
import time
from dataclasses import dataclass
from typing import Optional

from starlette.types import ASGIApp, Message, Receive, Scope, Send

ACCESS_LOGGER_NAME = "shortener.access"


@dataclass
class ResponseMetadata:
    status: int = 0
    size: int = 0
    duration: float = 0.0


class ResponseRecorder:
    """Forwards ASGI response messages and records status and body size."""

    def __init__(self, send: Send, metadata: ResponseMetadata):
        self._send = send
        self.metadata = metadata

    async def __call__(self, message: Message) -> None:
        await self._send(message)
        if message["type"] == "http.response.start":
            self.metadata.status = message["status"]
        elif message["type"] == "http.response.body":
            self.metadata.size += len(message.get("body", b""))


class RequestLoggingMiddleware:
    """
    Logs method, URI, status, size and duration of every HTTP request.

    Log level follows the status:
        5xx → ERROR
        4xx → WARNING
        everything else (including 0) → INFO
    """

    def __init__(self, app: ASGIApp, logger: Optional[logging.Logger] = None) -> None:
        self.app = app
        self.logger = logger or logging.getLogger(ACCESS_LOGGER_NAME)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start_time = time.perf_counter()
        metadata = ResponseMetadata()
        try:
            await self.app(scope, receive, ResponseRecorder(send, metadata))
        finally:
            metadata.duration = time.perf_counter() - start_time
            self._log(scope, metadata)

    def _log(self, scope: Scope, metadata: ResponseMetadata) -> None:
        uri = _request_uri(scope)
        method = scope.get("method", "")

        if metadata.status >= 500:
            log_level = logging.ERROR
        elif metadata.status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        # Why: a broken log sink must not turn a served request into a 500
        try:
            self.logger.log(
                log_level,
                "%s %s %d %dB %.1fms",
                method,
                uri,
                metadata.status,
                metadata.size,
                metadata.duration * 1000,
                extra={
                    "uri": uri,
                    "method": method,
                    "status": metadata.status,
                    "size": metadata.size,
                    "duration": metadata.duration,
                },
            )
        except Exception:
            pass


def _request_uri(scope: Scope) -> str:
    raw_path = scope.get("raw_path") or scope.get("path", "").encode("utf-8")
    uri = raw_path.decode("latin-1")
    query_string = scope.get("query_string", b"")
    if query_string:
        uri += "?" + query_string.decode("latin-1")
    return uri
