"""Disk-based document caching for specref.

This package provides :class:`DocumentCache`, a transparent caching layer
that stores the bodies of downloaded specification documents on disk using
:mod:`diskcache`, keyed by URL with a configurable TTL.

The cache is consumed by :class:`~specref.client.fetcher.HttpFetcher`
and is controlled by the ``cache`` section of the global configuration
(:class:`~specref.models.CacheConfig`).
"""

from specref.cache.cache import DocumentCache

__all__ = ["DocumentCache"]
