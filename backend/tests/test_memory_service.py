"""
Shortener Edge — In-Memory Shortener Service Tests
====================================================
"""

import asyncio

import pytest

from shortener.exceptions import NotFoundError
from shortener.services.memory import (
    CODE_ALPHABET,
    CODE_LENGTH,
    InMemoryShortenerService,
    generate_short_code,
)


def test_generated_code_shape():
    code = generate_short_code()

    assert len(code) == CODE_LENGTH
    assert set(code) <= set(CODE_ALPHABET)


class TestInMemoryShortenerService:

    @pytest.mark.asyncio
    async def test_same_url_same_short_url(self, memory_service):
        first = await memory_service.get_short_url("http://example.com")
        second = await memory_service.get_short_url("http://example.com")

        assert first == second

    @pytest.mark.asyncio
    async def test_distinct_urls_distinct_codes(self, memory_service):
        urls = [f"http://example.com/{i}" for i in range(50)]

        short_urls = await asyncio.gather(*(memory_service.get_short_url(u) for u in urls))

        assert len(set(short_urls)) == len(urls)
        for url, short_url in zip(urls, short_urls):
            code = short_url.rsplit("/", 1)[1]
            assert await memory_service.get_original_url(code) == url

    @pytest.mark.asyncio
    async def test_unknown_code(self, memory_service):
        with pytest.raises(NotFoundError) as exc_info:
            await memory_service.get_original_url("nope")

        assert exc_info.value.context["short_code"] == "nope"

    @pytest.mark.asyncio
    async def test_base_url_trailing_slash_is_dropped(self):
        service = InMemoryShortenerService("http://short.test/")

        short_url = await service.get_short_url("http://example.com")

        assert short_url.startswith("http://short.test/")
        assert "//" not in short_url[len("http://"):]
