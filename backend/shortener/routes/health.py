"""
Shortener Edge — Health Check Route
=====================================

What:  GET /ping reports whether the configured database accepts connections.
How:   probe_connection() opens and releases one connection per call.
       Success → 200, failure → DatabaseUnavailableError, which the handler in
       main.py logs with its cause and answers with a bare 500.
"""

from fastapi import APIRouter, Depends, Response

from shortener.config import Settings
from shortener.database import probe_connection
from shortener.dependencies import get_settings

router = APIRouter(tags=["Health"])


@router.get(
    "/ping",
    summary="Database connectivity check",
    responses={
        200: {"description": "Database reachable (empty body)"},
        500: {"description": "Database unreachable (empty body)"},
    },
)
async def ping(settings: Settings = Depends(get_settings)) -> Response:
    await probe_connection(settings.database_dsn)
    return Response(status_code=200)
