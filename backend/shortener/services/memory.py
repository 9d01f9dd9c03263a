"""
Shortener Edge — In-Memory Shortener Service
==============================================

What:  Process-local ShortenerService used by the default application wiring.
How:   Two dicts (code → URL, URL → code) guarded by an asyncio.Lock.
       Submitting a URL twice returns the same short URL.

Codes are 8 random alphanumeric characters from `secrets`; a colliding code
is simply drawn again. Nothing survives a restart.
"""

import asyncio
import logging
import secrets
import string
from typing import Dict

from shortener.exceptions import NotFoundError
from shortener.services.base import ShortenerService

logger = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_letters + string.digits
CODE_LENGTH = 8


def generate_short_code(length: int = CODE_LENGTH) -> str:
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(length))


class InMemoryShortenerService(ShortenerService):

    def __init__(self, base_url: str):
        self._base_url = base_url.rstrip("/")
        self._urls: Dict[str, str] = {}
        self._codes: Dict[str, str] = {}
        self._lock = asyncio.Lock()

    async def get_short_url(self, original_url: str) -> str:
        async with self._lock:
            code = self._codes.get(original_url)
            if code is None:
                code = generate_short_code()
                while code in self._urls:
                    code = generate_short_code()
                self._urls[code] = original_url
                self._codes[original_url] = code
                logger.debug("Stored %s under %s", original_url, code)
        return f"{self._base_url}/{code}"

    async def get_original_url(self, short_code: str) -> str:
        try:
            return self._urls[short_code]
        except KeyError:
            raise NotFoundError(short_code) from None
