"""
Shortener Edge — Redirect Route Handler
=========================================

What:  GET /{short_code} → 307 Temporary Redirect to the original URL.
       Unknown codes and any other resolve failure give a bare 400.
Why:   Location carries the stored URL byte for byte, so shorten → resolve
       hands back exactly what was submitted. Starlette's RedirectResponse
       re-quotes the URL ("|" → "%7C"), which is why a plain Response is used.
"""

from urllib.parse import quote

from fastapi import APIRouter, Depends, Response

from shortener.dependencies import get_shortener_service
from shortener.services.base import ShortenerService, domain_errors

router = APIRouter(tags=["Redirect"])


def location_header(url: str) -> str:
    """
    Header-safe form of `url`.

    Header values travel as latin-1, so only characters outside it are
    percent-encoded (as UTF-8); printable ASCII is never touched.
    """
    return "".join(c if ord(c) < 0x100 else quote(c, safe="") for c in url)


@router.get(
    "/{short_code}",
    status_code=307,
    summary="Redirect a short code to its original URL",
    responses={
        307: {"description": "Redirect to the original URL (empty body)"},
        400: {"description": "Unknown short code (empty body)"},
    },
)
async def resolve(
    short_code: str,
    service: ShortenerService = Depends(get_shortener_service),
) -> Response:
    with domain_errors("resolve"):
        original_url = await service.get_original_url(short_code)
    return Response(status_code=307, headers={"Location": location_header(original_url)})
