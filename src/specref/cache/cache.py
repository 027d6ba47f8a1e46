"""Disk-based cache for remote specification documents.

Uses :mod:`diskcache` to persist the bodies of documents downloaded by
:class:`~specref.client.fetcher.HttpFetcher` with a configurable
time-to-live (TTL), so that repeated ``specref resolve`` runs against the
same remote files do not hit the network every time.

This cache sits *inside* the downloader.  It is unrelated to the per-root
download cache of the resolution engine, which lives only for one traversal
and is never shared between roots.

Cache keys are SHA-256 hashes of the document URL.

See Also:
    :class:`~specref.models.CacheConfig` -- the Pydantic model that
    controls ``enabled`` and ``ttl_seconds``.
"""

from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Any, Optional

import diskcache

from specref.models import CacheConfig


class DocumentCache:
    """Disk-backed cache for downloaded document text.

    Stores the body of every successfully downloaded document in a
    :class:`diskcache.Cache` directory.  Entries expire after
    :attr:`~specref.models.CacheConfig.ttl_seconds`.

    Args:
        cache_dir: Root directory for the cache.  A ``documents/``
            subdirectory is created inside it.
        config: Cache configuration (``enabled`` flag and ``ttl_seconds``).

    Example::

        from specref.cache import DocumentCache
        from specref.models import CacheConfig

        cache = DocumentCache("/tmp/specref-cache", CacheConfig(ttl_seconds=300))
        cache.set("https://example.com/pet.yaml", "type: object\\n")
        hit = cache.get("https://example.com/pet.yaml")
    """

    def __init__(self, cache_dir: str | Path, config: CacheConfig) -> None:
        self._config = config
        self._cache: Optional[diskcache.Cache] = None
        self._cache_dir = Path(cache_dir)
        if config.enabled:
            self._cache = diskcache.Cache(str(self._cache_dir / "documents"))

    def get(self, url: str) -> Optional[str]:
        """Look up a cached document body.

        Returns:
            The cached text, or ``None`` on a miss or when caching is
            disabled.
        """
        if self._cache is None:
            return None
        return self._cache.get(self._make_key(url))

    def set(self, url: str, content: str) -> None:
        """Store a document body.  A no-op when caching is disabled."""
        if self._cache is None:
            return
        self._cache.set(self._make_key(url), content, expire=self._config.ttl_seconds)

    def invalidate(self, url: str) -> None:
        """Remove the entry for *url*, if any."""
        if self._cache is None:
            return
        self._cache.delete(self._make_key(url))

    def clear(self) -> None:
        """Remove all entries from the cache."""
        if self._cache is not None:
            self._cache.clear()

    def stats(self) -> dict[str, Any]:
        """Return cache statistics.

        Returns:
            A ``dict`` with ``enabled`` (bool), and when enabled:
            ``size`` (number of entries), ``directory`` (str path), and
            ``ttl_seconds`` (int).
        """
        if self._cache is None:
            return {"enabled": False}
        return {
            "enabled": True,
            "size": len(self._cache),
            "directory": str(self._cache_dir / "documents"),
            "ttl_seconds": self._config.ttl_seconds,
        }

    def close(self) -> None:
        """Close the underlying :class:`diskcache.Cache` and release resources."""
        if self._cache is not None:
            self._cache.close()

    def _make_key(self, url: str) -> str:
        return hashlib.sha256(url.encode()).hexdigest()
