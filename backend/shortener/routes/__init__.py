# Routes package init
"""
Shortener Edge — API Routes Package
=====================================

Route Inventory:
    - shorten.py:   POST /              (plain-text URL in, short URL out)
                    POST /api/shorten   (JSON {"url"} in, {"result"} out)
    - health.py:    GET  /ping          (database connectivity)
    - redirect.py:  GET  /{short_code}  (307 to the original URL)

health.router must be included before redirect.router so that /ping is not
taken for a short code.

Error policy:
    Routes raise ShortenerError subclasses; the handlers in main.py answer
    every one of them with a bare 400 (500 for DatabaseUnavailableError).
    No error detail is ever written to the response body.
"""
