"""
Shortener Edge — Custom Exception Hierarchy
=============================================

What:  Application-specific exceptions raised by routes, services, the gzip
       reader and the database probe.
How:   Each exception carries a message and an optional context dict. The
       handlers registered in main.py turn them into bare status responses;
       message and context are logged server-side and never returned.

Exception Hierarchy:
    ShortenerError (base)            → 400 Bad Request, empty body
    ├── InvalidURLError                 not an absolute URL
    ├── InvalidRequestError             unreadable body, undecodable JSON
    ├── DecompressionError              malformed inbound gzip stream
    ├── NotFoundError                   unknown short code
    └── DatabaseUnavailableError     → 500 Internal Server Error, empty body

Status mapping is coarse: every client-side or domain failure is
a 400, regardless of cause.
"""

from typing import Any, Dict, Optional


class ShortenerError(Exception):
    """
    Base exception for all shortener edge errors.

    Attributes:
        message:  Human-readable description (logged, never sent to clients)
        context:  Additional debug info (logged only)
    """

    def __init__(
        self,
        message: str = "Request could not be processed",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class InvalidURLError(ShortenerError):
    """Raised when a submitted URL is missing its scheme or host."""

    def __init__(self, url: str, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        ctx["url"] = url
        super().__init__(message=f"'{url}' is not an absolute URL", context=ctx)
        self.url = url


class InvalidRequestError(ShortenerError):
    """Raised when the request body cannot be read or decoded."""

    def __init__(
        self,
        message: str = "Request body could not be read",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DecompressionError(ShortenerError):
    """
    Raised when an inbound body declared as gzip is not a valid gzip stream.

    When:  Bad magic bytes or compression method (raised while opening the
           reader, before the handler runs), or a corrupt/truncated deflate
           stream (raised while the handler reads the body).
    """

    def __init__(
        self,
        message: str = "Malformed gzip stream",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(ShortenerError):
    """Raised by a ShortenerService when a short code is unknown."""

    def __init__(self, short_code: str, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        ctx["short_code"] = short_code
        super().__init__(message=f"Short code '{short_code}' was not found", context=ctx)
        self.short_code = short_code


class DatabaseUnavailableError(ShortenerError):
    """
    Raised when a connection cannot be opened against the configured DSN.

    HTTP:  500 Internal Server Error. The underlying driver error is kept as
           __cause__ and logged; the response body stays empty.
    """

    def __init__(
        self,
        message: str = "Database connection could not be established",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
