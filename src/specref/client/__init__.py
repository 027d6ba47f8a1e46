"""Download layer for remote specification documents.

Provides the batch downloader used by the resolution engine and the default
HTTP fetcher that backs it when the caller does not supply one.

* :func:`fetch_urls` -- download a batch of unique URLs concurrently through
  a caller-supplied resolver and return one
  :class:`~specref.models.FetchResult` per URL.
* :class:`HttpFetcher` -- non-blocking resolver backed by
  :class:`httpx.AsyncClient`, with retry, bounded concurrency and an
  optional disk cache.

Example::

    from specref.client import HttpFetcher, fetch_urls

    async with HttpFetcher() as fetcher:
        results = await fetch_urls(["https://example.com/pet.yaml"], "cli", fetcher.fetch)
"""

from specref.client.fetcher import HttpFetcher, RemoteResolver, fetch_urls

__all__ = ["HttpFetcher", "RemoteResolver", "fetch_urls"]
