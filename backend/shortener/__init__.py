"""
Shortener Edge — Application Package
=====================================

What: HTTP edge layer of the URL shortener.
How:  FastAPI routes translate the shorten/resolve domain operations into HTTP,
      wrapped by two pure ASGI middlewares:

    ┌──────────────────────────────────────────────┐
    │  RequestLoggingMiddleware  (status, size, ms)│
    │  ┌────────────────────────────────────────┐  │
    │  │  CompressionMiddleware (gzip in / out) │  │
    │  │  ┌──────────────────────────────────┐  │  │
    │  │  │  Routes → ShortenerService       │  │  │
    │  │  └──────────────────────────────────┘  │  │
    │  └────────────────────────────────────────┘  │
    └──────────────────────────────────────────────┘
"""

__version__ = "1.0.0"
