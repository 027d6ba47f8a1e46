"""Resolve the remote ``$ref`` pointers of one or more root documents.

OpenAPI documents can be split over several files, pulling shared pieces in
with ``{"$ref": "https://example.com/common.yaml#/components/schemas/Pet"}``.
This module downloads every document reachable from a root through such
remote references, following references inside downloaded documents too,
and reports which ones could not be fetched.

Only **remote** references (URLs) are followed.  Local ``#/...`` pointers
and file-path references are left untouched, and nothing is merged into the
root document.

Each root gets its own download cache, created by :func:`resolve_one` and
discarded when it returns: a document referenced twice under one root is
downloaded once, but separate roots never see each other's downloads.
Circular references terminate because the traversal visits each file name
at most once.

The public functions are :func:`resolve_one` and :func:`resolve_many`, with
:func:`resolve_one_sync` and :func:`resolve_many_sync` for callers without a
running event loop.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Mapping
from typing import Any, Optional, Union

from pydantic import ValidationError

from specref.cache import DocumentCache
from specref.client.fetcher import HttpFetcher, RemoteResolver
from specref.config import DEFAULT_ORIGIN, get_cache_dir, resolve_config
from specref.exceptions import InvalidUsageError
from specref.models import (
    Adjacency,
    GlobalConfig,
    ReferenceDescriptor,
    RemoteFile,
    RemoteRefsResult,
    SpecNode,
)
from specref.parser.expander import DownloadCache, get_adjacent_and_missing
from specref.traversal import DFS, TraversalResult

logger = logging.getLogger(__name__)

RootInput = Union[SpecNode, Mapping[str, Any], None]


def validate_input(spec_root: RootInput, batch: bool = False) -> bool:
    """Check that a root document is defined and not empty.

    Args:
        spec_root: The root node, or a mapping of its fields.
        batch: When ``True`` an invalid root yields ``False`` instead of
            raising.

    Returns:
        ``True`` for a usable root, ``False`` for an unusable one in batch
        mode.

    Raises:
        InvalidUsageError: If the root is unusable (undefined, empty, or a
            mapping that does not describe a node) and *batch* is ``False``.
    """
    problem = "Root file must be defined"
    try:
        usable = spec_root is not None and not _as_node(spec_root).is_empty()
    except ValidationError as exc:
        usable, problem = False, f"Invalid root file: {exc}"
    if usable:
        return True
    if batch:
        return False
    raise InvalidUsageError(problem)


def _as_node(spec_root: Union[SpecNode, Mapping[str, Any]]) -> SpecNode:
    if isinstance(spec_root, SpecNode):
        return spec_root
    return SpecNode.model_validate(dict(spec_root))


async def resolve_one(
    spec_root: RootInput,
    origin: str = DEFAULT_ORIGIN,
    resolver: Optional[RemoteResolver] = None,
    config: Optional[GlobalConfig] = None,
) -> RemoteRefsResult:
    """Download every document transitively referenced by *spec_root*.

    Args:
        spec_root: The root document.  A mapping is converted into a
            :class:`~specref.models.SpecNode`.
        origin: Context tag forwarded to the batch downloader.
        resolver: Function that downloads one URL.  When ``None`` an
            :class:`~specref.client.fetcher.HttpFetcher` configured from
            *config* is used for the duration of the call.
        config: Settings for the default fetcher.  Resolved with
            :func:`~specref.config.resolve_config` when omitted.

    Returns:
        A :class:`~specref.models.RemoteRefsResult`: the referenced
        documents in traversal order (root excluded), the references that
        could not be downloaded (each path once), and the root node, whose
        ``parsed`` tree is now set.

    Raises:
        InvalidUsageError: If *spec_root* is undefined or empty.
        SpecParseError: If the root or any downloaded document is malformed.
    """
    validate_input(spec_root)
    root = _as_node(spec_root)

    if resolver is not None:
        return await _resolve(root, origin, resolver)

    config = config or resolve_config()
    cache = DocumentCache(get_cache_dir(), config.cache) if config.cache.enabled else None
    try:
        async with HttpFetcher(config.fetch, cache=cache, origin=origin) as fetcher:
            return await _resolve(root, origin, fetcher.fetch)
    finally:
        if cache is not None:
            cache.close()


async def _resolve(root: SpecNode, origin: str, resolver: RemoteResolver) -> RemoteRefsResult:
    downloaded: DownloadCache = {}

    async def expand(node: SpecNode) -> Adjacency:
        return await get_adjacent_and_missing(node, downloaded, origin, resolver)

    traversal: TraversalResult[SpecNode, ReferenceDescriptor] = await DFS().traverse(root, expand)

    remote_refs = [
        RemoteFile(file_name=node.file_name, content=node.content, parsed=node.parsed)
        for node in traversal.traverse_order[1:]
    ]
    missing = list({ref.path: ref for ref in traversal.missing}.values())
    logger.debug(
        "%s: %d remote document(s), %d missing",
        root.file_name, len(remote_refs), len(missing),
    )
    return RemoteRefsResult(remote_refs=remote_refs, missing_remote_refs=missing, spec_root=root)


async def resolve_many(
    spec_roots: Optional[Iterable[RootInput]],
    origin: str = DEFAULT_ORIGIN,
    resolver: Optional[RemoteResolver] = None,
    config: Optional[GlobalConfig] = None,
) -> list[RemoteRefsResult]:
    """Resolve several root documents one after the other.

    Undefined or empty roots are dropped silently.  The remaining roots are
    processed strictly in input order, each with a fresh download cache.

    Returns:
        One :class:`~specref.models.RemoteRefsResult` per valid root, or an
        empty list when *spec_roots* is ``None`` or empty.
    """
    if not spec_roots:
        return []

    clean_roots = [root for root in spec_roots if validate_input(root, batch=True)]
    results: list[RemoteRefsResult] = []
    for root in clean_roots:
        results.append(await resolve_one(root, origin, resolver, config))
    return results


def resolve_one_sync(
    spec_root: RootInput,
    origin: str = DEFAULT_ORIGIN,
    resolver: Optional[RemoteResolver] = None,
    config: Optional[GlobalConfig] = None,
) -> RemoteRefsResult:
    """Blocking wrapper around :func:`resolve_one`."""
    return asyncio.run(resolve_one(spec_root, origin, resolver, config))


def resolve_many_sync(
    spec_roots: Optional[Iterable[RootInput]],
    origin: str = DEFAULT_ORIGIN,
    resolver: Optional[RemoteResolver] = None,
    config: Optional[GlobalConfig] = None,
) -> list[RemoteRefsResult]:
    """Blocking wrapper around :func:`resolve_many`."""
    return asyncio.run(resolve_many(spec_roots, origin, resolver, config))
