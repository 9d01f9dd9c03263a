"""
Shortener Edge — Services Layer
=================================

The shorten/resolve domain operation lives behind ShortenerService. The edge
layer only depends on that interface:

    - ShortenerService (abstract): get_short_url / get_original_url
    - InMemoryShortenerService: process-local implementation used when no
      other service is wired in
"""
