"""
Shortener Edge — Shorten Route Handlers
=========================================

What:  POST / and POST /api/shorten.
How:   Both read the raw body themselves (no FastAPI body model), so every
       malformed request ends in ShortenerError → 400 with an empty body
       instead of FastAPI's 422 JSON.

Request flow:
    1. Read the body (already gunzipped by CompressionMiddleware if needed)
    2. Decode it: plain text, or {"url": ...}
    3. Check the URL is absolute (scheme + host)
    4. Call ShortenerService.get_short_url()
    5. 201 Created with the short URL (text/plain or application/json)
"""

import logging

from fastapi import APIRouter, Depends, Request, Response
from pydantic import ValidationError
from starlette.requests import ClientDisconnect

from shortener.dependencies import get_shortener_service
from shortener.exceptions import InvalidRequestError
from shortener.schemas.url import ShortenRequest, ShortenResult, parse_absolute_url
from shortener.services.base import ShortenerService, domain_errors

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Shorten"])


async def read_body(request: Request) -> bytes:
    """
    Read the whole request body.

    A DecompressionError from a corrupt gzip body propagates as is; a client
    that disconnects mid-body becomes an InvalidRequestError.
    """
    try:
        return await request.body()
    except ClientDisconnect as e:
        raise InvalidRequestError("Client disconnected while sending the body") from e


@router.post(
    "/",
    status_code=201,
    summary="Shorten a URL sent as plain text",
    responses={
        201: {"description": "Short URL", "content": {"text/plain": {}}},
        400: {"description": "Invalid URL or shorten failure (empty body)"},
    },
)
async def shorten_plain(
    request: Request,
    service: ShortenerService = Depends(get_shortener_service),
) -> Response:
    body = await read_body(request)
    try:
        text = body.decode("utf-8")
    except UnicodeDecodeError as e:
        raise InvalidRequestError("Body is not valid UTF-8") from e

    original_url = parse_absolute_url(text)
    with domain_errors("shorten"):
        short_url = await service.get_short_url(original_url)
    logger.debug("Shortened %s → %s", original_url, short_url)

    return Response(
        content=short_url,
        status_code=201,
        headers={"Content-Type": "text/plain"},
    )


@router.post(
    "/api/shorten",
    status_code=201,
    summary="Shorten a URL sent as JSON",
    responses={
        201: {"description": "Short URL", "content": {"application/json": {}}},
        400: {"description": "Invalid JSON, invalid URL or shorten failure (empty body)"},
    },
)
async def shorten_json(
    request: Request,
    service: ShortenerService = Depends(get_shortener_service),
) -> Response:
    """
    Shorten the URL in {"url": "..."}.

    Only the produced short URL is serialized: the response is exactly
    {"result": "<short url>"}.
    """
    body = await read_body(request)
    try:
        payload = ShortenRequest.model_validate_json(body)
    except ValidationError as e:
        raise InvalidRequestError(
            "Body is not a valid shorten request",
            context={"errors": e.error_count()},
        ) from e

    original_url = parse_absolute_url(payload.url)
    with domain_errors("shorten"):
        short_url = await service.get_short_url(original_url)

    result = ShortenResult(url=original_url, result=short_url)
    return Response(
        content=result.model_dump_json(),
        status_code=201,
        media_type="application/json",
    )
