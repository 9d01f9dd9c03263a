"""
Shortener Edge — Database Connectivity Probe
==============================================

What:  Answers one question for the health check: can a connection be opened
       against the configured DSN?
How:   Builds a throw-away async SQLAlchemy engine with NullPool, opens one
       connection, closes it and disposes the engine. Nothing is pooled or
       reused across requests.
Why:   A pooled connection can look healthy after the database went away;
       a fresh connection per probe answers for the database as it is now.
When:  On every GET /ping, never at startup.

DSN handling:
    postgres://u:p@host/db                → postgresql+asyncpg://u:p@host/db
    postgresql://u:p@host/db?sslmode=...  → postgresql+asyncpg://...?ssl=...
    sqlite+aiosqlite:///path.db           → unchanged (any async URL is accepted)

Keyword-style libpq strings ("host=... user=...") are not URLs and are
reported as unavailable.
"""

import logging

from sqlalchemy.engine import URL, make_url
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import NullPool

from shortener.exceptions import DatabaseUnavailableError

logger = logging.getLogger(__name__)

_POSTGRES_SCHEMES = {"postgres", "postgresql"}


def to_async_url(dsn: str) -> URL:
    """
    Parse a DSN into a SQLAlchemy URL bound to an async driver.

    Raises:
        sqlalchemy.exc.ArgumentError: the DSN is not a URL.
    """
    url = make_url(dsn)
    if url.drivername in _POSTGRES_SCHEMES:
        url = url.set(drivername="postgresql+asyncpg")
        # asyncpg spells libpq's sslmode as ssl
        sslmode = url.query.get("sslmode")
        if sslmode is not None:
            url = url.difference_update_query(["sslmode"]).update_query_dict(
                {"ssl": sslmode}
            )
    return url


async def probe_connection(dsn: str) -> None:
    """
    Open and immediately release one connection using `dsn`.

    Raises:
        DatabaseUnavailableError: for an empty or unparseable DSN, a missing
            driver, or any failure while connecting. The original error is
            chained as __cause__.
    """
    if not dsn:
        raise DatabaseUnavailableError("DATABASE_DSN is not configured")

    try:
        engine = create_async_engine(to_async_url(dsn), poolclass=NullPool)
    except Exception as e:
        raise DatabaseUnavailableError(
            "Invalid database DSN", context={"error": str(e)}
        ) from e

    try:
        async with engine.connect():
            logger.debug("Database probe succeeded for %s", engine.url.render_as_string())
    except Exception as e:
        raise DatabaseUnavailableError(
            context={"url": engine.url.render_as_string(), "error": str(e)}
        ) from e
    finally:
        await engine.dispose()
