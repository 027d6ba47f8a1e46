"""Batch downloader and default asynchronous HTTP fetcher.

The resolution engine never talks to the network itself.  For every node it
expands, it hands the set of URLs that are not yet cached to
:func:`fetch_urls` together with a *resolver* -- any callable taking a URL
and returning the document text (or ``None`` when the document does not
exist).  Resolvers may be plain functions or coroutines.

:func:`fetch_urls` turns each resolver outcome into a tagged
:class:`~specref.models.FetchResult`.  Failures never abort the batch: a
resolver that raises yields an ``ERROR`` result, a resolver that returns
``None`` (or the legacy ``"NF"``-prefixed marker) a ``NOT_FOUND`` result.

:class:`HttpFetcher` is the resolver used when the caller does not supply
one.  It wraps :class:`httpx.AsyncClient` and adds retry with exponential
backoff, bounded concurrency, and an optional
:class:`~specref.cache.DocumentCache`.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable, Iterable
from typing import Optional, Union

import httpx

from specref import __version__
from specref.cache import DocumentCache
from specref.exceptions import ConnectionError_, InvalidUsageError, ServerError
from specref.models import FetchConfig, FetchResult, FetchStatus

logger = logging.getLogger(__name__)

ResolverOutput = Union[str, bytes, None]
RemoteResolver = Callable[[str], Union[Awaitable[ResolverOutput], ResolverOutput]]
"""A user-supplied function that downloads one URL."""


async def fetch_urls(
    paths: Iterable[str],
    origin: str,
    resolver: RemoteResolver,
) -> list[FetchResult]:
    """Download a batch of documents concurrently.

    Args:
        paths: The URLs to download.  Duplicates are collapsed.
        origin: Context tag of the calling process, used for diagnostics.
        resolver: Function that downloads a single URL.

    Returns:
        Exactly one :class:`~specref.models.FetchResult` per unique path, in
        first-occurrence order.
    """
    unique = list(dict.fromkeys(paths))
    if not unique:
        return []
    logger.debug("Fetching %d document(s) [origin=%s]", len(unique), origin)
    results = await asyncio.gather(*(_fetch_one(path, resolver) for path in unique))
    return list(results)


async def _fetch_one(path: str, resolver: RemoteResolver) -> FetchResult:
    """Run *resolver* for one path and tag the outcome."""
    try:
        content = resolver(path)
        if inspect.isawaitable(content):
            content = await content
        if isinstance(content, bytes):
            content = content.decode("utf-8")
    except Exception as exc:
        logger.warning("Failed to fetch %s: %s", path, exc)
        return FetchResult(file_name=path, status=FetchStatus.ERROR, error=str(exc))

    result = FetchResult.from_content(path, content)
    if result.status is FetchStatus.NOT_FOUND:
        logger.warning("Remote reference not found: %s", path)
    return result


class HttpFetcher:
    """Asynchronous HTTP resolver for remote ``$ref`` targets.

    Must be used as an async context manager; :meth:`fetch` is the resolver
    passed to :func:`fetch_urls`.

    Args:
        config: Timeout, SSL verification, redirect, retry and concurrency
            settings.  Defaults to :class:`~specref.models.FetchConfig`.
        cache: Optional disk cache consulted before, and filled after,
            every successful download.
        origin: Context tag appended to the ``User-Agent`` header.
        transport: Optional custom :mod:`httpx` transport (used in tests).
        backoff_base: Seconds to wait before the first retry; the delay
            doubles every attempt.

    Example::

        async with HttpFetcher(FetchConfig(timeout=10)) as fetcher:
            text = await fetcher.fetch("https://example.com/pet.yaml")
    """

    def __init__(
        self,
        config: Optional[FetchConfig] = None,
        cache: Optional[DocumentCache] = None,
        origin: str = "cli",
        transport: Optional[httpx.AsyncBaseTransport] = None,
        backoff_base: float = 1.0,
    ) -> None:
        self._config = config or FetchConfig()
        self._cache = cache
        self._origin = origin
        self._transport = transport
        self._backoff_base = backoff_base
        self._client: Optional[httpx.AsyncClient] = None
        self._semaphore: Optional[asyncio.Semaphore] = None

    # ------------------------------------------------------------------ #
    # Async context manager
    # ------------------------------------------------------------------ #

    async def __aenter__(self) -> HttpFetcher:
        self._client = httpx.AsyncClient(
            timeout=self._config.timeout,
            verify=self._config.verify_ssl,
            follow_redirects=self._config.follow_redirects,
            headers={"User-Agent": f"specref/{__version__} ({self._origin})"},
            transport=self._transport,
        )
        self._semaphore = asyncio.Semaphore(max(1, self._config.max_concurrency))
        return self

    async def __aexit__(self, *args: object) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None
        self._semaphore = None

    # ------------------------------------------------------------------ #
    # Resolver
    # ------------------------------------------------------------------ #

    async def fetch(self, url: str) -> Optional[str]:
        """Download the document at *url*.

        Returns:
            The response body for 2xx responses, ``None`` for 4xx responses
            and for URLs whose scheme is not ``http``/``https``.

        Raises:
            InvalidUsageError: If called outside the async context.
            ServerError: On 5xx after all retries are exhausted.
            ConnectionError_: On network / timeout errors after all retries.
        """
        if self._client is None or self._semaphore is None:
            raise InvalidUsageError("HttpFetcher not initialised -- use as async context manager")

        try:
            scheme = httpx.URL(url).scheme
        except httpx.InvalidURL:
            scheme = ""
        if scheme not in ("http", "https"):
            logger.warning("Unsupported URL, skipping: %s", url)
            return None

        if self._cache is not None:
            cached = await asyncio.to_thread(self._cache.get, url)
            if cached is not None:
                logger.debug("Document cache hit: %s", url)
                return cached

        async with self._semaphore:
            response = await self._get_with_retry(url)

        if response.status_code >= 400:
            logger.debug("HTTP %d for %s", response.status_code, url)
            return None

        text = response.text
        if self._cache is not None:
            await asyncio.to_thread(self._cache.set, url, text)
        return text

    async def _get_with_retry(self, url: str) -> httpx.Response:
        """GET *url* with exponential-backoff retry.

        Retries on 5xx status codes and connection / timeout errors up to
        ``max_retries`` times.  The delay doubles each attempt.
        """
        assert self._client is not None

        max_retries = self._config.max_retries
        for attempt in range(max_retries + 1):
            delay = self._backoff_base * 2 ** attempt
            try:
                response = await self._client.get(url)
            except (httpx.ConnectError, httpx.TimeoutException, httpx.NetworkError) as exc:
                if attempt < max_retries:
                    logger.debug(
                        "Connection error: %s, retrying in %ss (attempt %d/%d)",
                        exc, delay, attempt + 1, max_retries,
                    )
                    await asyncio.sleep(delay)
                    continue
                raise ConnectionError_(
                    f"Connection failed after {max_retries + 1} attempts: {exc}"
                ) from exc

            if response.status_code < 500:
                return response
            if attempt < max_retries:
                logger.debug(
                    "Server error %d, retrying in %ss (attempt %d/%d)",
                    response.status_code, delay, attempt + 1, max_retries,
                )
                await asyncio.sleep(delay)
                continue
            raise ServerError(f"HTTP {response.status_code} fetching {url}")

        raise ServerError(f"Request failed after all retries: {url}")  # pragma: no cover
