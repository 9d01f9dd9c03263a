"""
Shortener Edge — Database Probe Tests
=======================================

What:  DSN normalisation and probe_connection() against SQLite (aiosqlite)
       and DSNs that can never connect.
"""

import pytest
from sqlalchemy.exc import ArgumentError

from shortener.database import probe_connection, to_async_url
from shortener.exceptions import DatabaseUnavailableError


class TestToAsyncURL:

    @pytest.mark.parametrize(
        "dsn, expected",
        [
            ("postgres://u:p@db:5432/links", "postgresql+asyncpg://u:***@db:5432/links"),
            ("postgresql://u:p@db/links", "postgresql+asyncpg://u:***@db/links"),
            ("postgresql+asyncpg://u:p@db/links", "postgresql+asyncpg://u:***@db/links"),
            ("sqlite+aiosqlite:///links.db", "sqlite+aiosqlite:///links.db"),
        ],
    )
    def test_driver_is_async(self, dsn, expected):
        assert str(to_async_url(dsn)) == expected

    def test_sslmode_becomes_ssl(self):
        url = to_async_url("postgres://u:p@db/links?sslmode=disable")

        assert url.query == {"ssl": "disable"}

    def test_keyword_dsn_is_rejected(self):
        with pytest.raises(ArgumentError):
            to_async_url("host=localhost user=postgres dbname=links")


class TestProbeConnection:

    @pytest.mark.asyncio
    async def test_sqlite_memory_succeeds(self):
        await probe_connection("sqlite+aiosqlite:///:memory:")

    @pytest.mark.asyncio
    async def test_empty_dsn(self):
        with pytest.raises(DatabaseUnavailableError, match="not configured"):
            await probe_connection("")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("dsn", ["not a dsn", "nosuchdriver://user@localhost/db"])
    async def test_invalid_dsn_keeps_cause(self, dsn):
        with pytest.raises(DatabaseUnavailableError) as exc_info:
            await probe_connection(dsn)

        assert exc_info.value.message == "Invalid database DSN"
        assert exc_info.value.__cause__ is not None

    @pytest.mark.asyncio
    async def test_unreachable_database(self, tmp_path):
        # Parent directory does not exist, so SQLite cannot create the file
        dsn = f"sqlite+aiosqlite:///{tmp_path}/missing/links.db"

        with pytest.raises(DatabaseUnavailableError) as exc_info:
            await probe_connection(dsn)

        assert "url" in exc_info.value.context
        assert exc_info.value.__cause__ is not None
