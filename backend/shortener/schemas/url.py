"""
Shortener Edge — URL Request/Response Schemas
===============================================

What:  Pydantic models for the JSON shorten endpoint and the absolute-URL check
       shared by both shorten endpoints.

Request and response shapes differ:

    request   {"url": "http://a.com"}
    response  {"result": "http://short/abc"}

ShortenResult still carries the submitted URL, but it is excluded from
serialization and never echoed back.
"""

from urllib.parse import urlsplit

from pydantic import BaseModel, Field

from shortener.exceptions import InvalidURLError


def _has_control_characters(value: str) -> bool:
    return any(ord(c) < 0x20 or ord(c) == 0x7F for c in value)


def parse_absolute_url(value: str) -> str:
    """
    Return `value` unchanged if it is an absolute URL.

    Absolute means both a scheme and a non-empty host are present, so
    "not-a-url", "//no-scheme", "mailto:a@b.c" and "http://user@" are all
    rejected.

    Why the raw checks first: urlsplit() silently drops tabs and newlines and
    strips leading whitespace before parsing, so "http://a.com\\n" would parse
    cleanly while the stored value (and later the Location header) still
    carries the newline.

    Raises:
        InvalidURLError: control characters, surrounding whitespace, scheme or
            host missing, or the URL cannot be parsed.
    """
    if _has_control_characters(value) or value != value.strip():
        raise InvalidURLError(value, context={"error": "control character or whitespace"})
    try:
        parts = urlsplit(value)
    except ValueError as e:
        raise InvalidURLError(value, context={"error": str(e)}) from e
    if not parts.scheme or not parts.hostname:
        raise InvalidURLError(value)
    return value


class ShortenRequest(BaseModel):
    """Body of POST /api/shorten."""

    url: str = Field(description="Absolute URL to shorten")


class ShortenResult(BaseModel):
    """
    Outcome of a shorten call.

    `url` is excluded from every dump, so the serialized form is exactly
    {"result": "..."}.
    """

    url: str = Field(default="", exclude=True)
    result: str = Field(description="Produced short URL")
