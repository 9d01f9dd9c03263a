"""
Shortener Edge — FastAPI Application Factory
==============================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() wires settings, the shortener service, middleware,
       exception handlers and routes, and returns the app.
Who:   uvicorn (uvicorn shortener.main:app) and the test suite.
Why:   A factory lets tests build isolated apps with their own service,
       settings and access logger instead of sharing the module-level app.
When:  Once at import time for `app`, once per test client in the suite.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────────┐ ┌──────────────┐                  │
    │  │   Logging    │→│ Compression  │→ routes          │
    │  └──────────────┘ └──────────────┘                  │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────┐ ┌───────────────┐ ┌──────┐ ┌────────┐ │
    │  │ POST /   │ │POST /api/short│ │ /ping│ │ /{code}│ │
    │  └──────────┘ └───────────────┘ └──────┘ └────────┘ │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌──────────────────────────────────────────────┐   │
    │  │ ShortenerError→400 │ DatabaseUnavailable→500 │   │
    │  └──────────────────────────────────────────────┘   │
    └─────────────────────────────────────────────────────┘
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request, Response

from shortener import __version__
from shortener.config import Settings, settings as default_settings
from shortener.exceptions import DatabaseUnavailableError, ShortenerError
from shortener.middleware.compression import CompressionMiddleware
from shortener.middleware.logging import RequestLoggingMiddleware
from shortener.routes import health, redirect, shorten
from shortener.services.base import ShortenerService
from shortener.services.memory import InMemoryShortenerService

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure the root logger for the whole process.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s

    uvicorn's own access log is silenced; RequestLoggingMiddleware writes the
    access log under "shortener.access".
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    app_settings: Settings = app.state.settings
    setup_logging(app_settings.log_level)
    logger.info("Shortener edge %s starting up...", __version__)
    logger.info(
        "Listening on %s:%d, short URLs under %s",
        app_settings.server_host,
        app_settings.server_port,
        app_settings.base_url,
    )
    if not app_settings.database_dsn:
        logger.warning("DATABASE_DSN is not set; GET /ping will report 500")

    yield

    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map application exceptions to bare status responses.

    Handler hierarchy (most specific wins):
        DatabaseUnavailableError → 500, cause logged at ERROR
        ShortenerError (base)    → 400, logged at WARNING

    Neither handler writes a body: clients only ever see the status code.
    """

    @app.exception_handler(DatabaseUnavailableError)
    async def handle_database_unavailable(request: Request, exc: DatabaseUnavailableError):
        logger.error(
            "Database unavailable: %s | Context: %s",
            exc.message,
            exc.context,
            exc_info=exc.__cause__,
        )
        return Response(status_code=500)

    @app.exception_handler(ShortenerError)
    async def handle_shortener_error(request: Request, exc: ShortenerError):
        logger.warning(
            "%s %s rejected: %s | Context: %s",
            request.method,
            request.url.path,
            exc.message,
            exc.context,
        )
        return Response(status_code=400)


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    service: Optional[ShortenerService] = None,
    app_settings: Optional[Settings] = None,
    access_logger: Optional[logging.Logger] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        service:       Domain operation; defaults to an InMemoryShortenerService
                       producing URLs under settings.base_url.
        app_settings:  Settings to use instead of the module-level singleton.
        access_logger: Logger for RequestLoggingMiddleware.
    """
    app_settings = app_settings or default_settings

    app = FastAPI(
        title="Shortener Edge",
        description="Shorten URLs and resolve short codes.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = app_settings
    app.state.shortener_service = service or InMemoryShortenerService(app_settings.base_url)

    # Last added runs first: Logging wraps Compression wraps the routes
    # Why this order: the access log must see compressed sizes and the final
    # status, so it has to sit outside compression
    app.add_middleware(CompressionMiddleware)
    app.add_middleware(RequestLoggingMiddleware, logger=access_logger)

    register_exception_handlers(app)

    app.include_router(shorten.router)
    app.include_router(health.router)
    app.include_router(redirect.router)

    return app


app = create_app()
