"""
Shortener Edge — Test Configuration (conftest.py)
===================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── test_settings: Settings with a fixed base URL and no DSN
    ├── stub_service: AsyncMock ShortenerService with scripted results
    ├── memory_service: Real InMemoryShortenerService
    ├── stub_client / memory_client: HTTPX AsyncClient bound to a fresh app
    └── access_records: Records emitted by a dedicated access logger
"""

import logging
import os
from typing import List
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Override settings for testing BEFORE any app imports
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["BASE_URL"] = "http://short.test"
os.environ["DATABASE_DSN"] = ""

from shortener.config import Settings  # noqa: E402
from shortener.main import create_app  # noqa: E402
from shortener.services.base import ShortenerService  # noqa: E402
from shortener.services.memory import InMemoryShortenerService  # noqa: E402

SHORT_URL = "http://short/abc"


class ListHandler(logging.Handler):
    """Keeps every record it receives."""

    def __init__(self) -> None:
        super().__init__()
        self.records: List[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)


@pytest.fixture
def test_settings():
    return Settings(_env_file=None, base_url="http://short.test", database_dsn="")


@pytest.fixture
def stub_service():
    """
    A ShortenerService double.

    get_short_url() returns SHORT_URL, get_original_url() returns
    "http://example.com"; override return_value / side_effect per test.
    """
    service = AsyncMock(spec=ShortenerService)
    service.get_short_url.return_value = SHORT_URL
    service.get_original_url.return_value = "http://example.com"
    return service


@pytest.fixture
def memory_service():
    return InMemoryShortenerService("http://short.test")


ACCESS_LOGGER = "tests.access"


@pytest.fixture
def access_handler():
    """Collects the records of the ACCESS_LOGGER logger for one test."""
    logger = logging.getLogger(ACCESS_LOGGER)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    handler = ListHandler()
    logger.addHandler(handler)
    yield handler
    logger.removeHandler(handler)


@pytest.fixture
def access_logger(access_handler):
    return logging.getLogger(ACCESS_LOGGER)


@pytest.fixture
def access_records(access_handler):
    return access_handler.records


def _client(app):
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


@pytest_asyncio.fixture
async def stub_client(stub_service, test_settings, access_logger):
    """HTTPX client for an app wired to stub_service."""
    app = create_app(service=stub_service, app_settings=test_settings, access_logger=access_logger)
    async with _client(app) as client:
        yield client


@pytest_asyncio.fixture
async def memory_client(memory_service, test_settings, access_logger):
    """HTTPX client for an app wired to a real in-memory store."""
    app = create_app(service=memory_service, app_settings=test_settings, access_logger=access_logger)
    async with _client(app) as client:
        yield client
