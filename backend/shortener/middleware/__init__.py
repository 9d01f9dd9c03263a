"""
Shortener Edge — Middleware Package
=====================================

Middleware chain (outermost first):
    Request → [Logging] → [Compression] → Route Handler

    Logging:      records final status, transport bytes and duration
    Compression:  decodes gzip request bodies, buffers the response and
                  gzip-encodes it when size, Accept-Encoding and Content-Type allow

Because Logging wraps Compression, the logged size is the number of bytes that
actually left the process (compressed size for gzip responses).
"""
