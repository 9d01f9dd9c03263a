"""
Shortener Edge — Abstract Shortener Service Interface
=======================================================

What:  The domain operation the edge layer depends on: turn a URL into a short
       URL and turn a short code back into the URL.
How:   Concrete stores subclass ShortenerService. Routes only talk to this
       interface, so any store (or a test double) can be wired in through
       create_app(service=...).
"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Iterator

from shortener.exceptions import ShortenerError


class ShortenerService(ABC):
    """
    Contract:
        - get_short_url() returns the full short URL for an absolute URL
        - get_original_url() returns the URL stored under a short code
        - failures are raised as ShortenerError subclasses; anything else
          raised is still treated as a domain failure by the routes
    """

    @abstractmethod
    async def get_short_url(self, original_url: str) -> str:
        """
        Shorten `original_url`.

        Returns:
            str: The short URL, e.g. "http://localhost:8080/aB3dE9xQ".
        """
        ...

    @abstractmethod
    async def get_original_url(self, short_code: str) -> str:
        """
        Resolve `short_code` to the URL it was created for.

        Raises:
            NotFoundError: No URL is stored under `short_code`.
        """
        ...


@contextmanager
def domain_errors(operation: str) -> Iterator[None]:
    """Re-raise any failure of a domain call as a ShortenerError."""
    try:
        yield
    except ShortenerError:
        raise
    except Exception as e:
        raise ShortenerError(
            f"{operation} failed",
            context={"error": repr(e)},
        ) from e
