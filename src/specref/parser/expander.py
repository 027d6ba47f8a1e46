"""Expand one document node into its remote neighbours.

:func:`get_adjacent_and_missing` is the expansion function handed to
:class:`~specref.traversal.DFS` by the resolver.  For a single
:class:`~specref.models.SpecNode` it:

1. parses the node (unless it already carries a parsed tree);
2. collects the distinct remote ``$ref`` targets, fragments stripped;
3. splits them into targets already downloaded during this run and targets
   that still have to be fetched;
4. downloads the latter as one batch and records the results in the shared
   download cache;
5. stores a relocated copy of the tree on the node;
6. separates the downloads into new neighbour nodes and missing references.

The download cache passed in is owned by the caller and must be scoped to a
single root traversal.
"""

from __future__ import annotations

import logging
from typing import Optional

from specref.client.fetcher import RemoteResolver, fetch_urls
from specref.models import Adjacency, FetchResult, ReferenceDescriptor, SpecNode
from specref.parser.loader import hint_from_name, parse_content
from specref.parser.pointer import is_remote_ref, remove_local_reference_from_path
from specref.parser.references import (
    Relocator,
    find_references,
    map_to_local_path,
    relocate_references,
)

logger = logging.getLogger(__name__)

DownloadCache = dict[str, FetchResult]


async def get_adjacent_and_missing(
    node: SpecNode,
    downloaded: DownloadCache,
    origin: str,
    resolver: RemoteResolver,
    relocate: Relocator = map_to_local_path,
) -> Adjacency:
    """Return the documents *node* references remotely, and those that failed.

    Args:
        node: The node being expanded.  Its ``parsed`` attribute is set on
            return.
        downloaded: Download cache for the current root traversal; fresh
            results are written into it.
        origin: Context tag forwarded to the batch downloader.
        resolver: Function that downloads one URL.
        relocate: Maps a downloaded URL to the name it is known by locally;
            also applied to the node's remote ``$ref`` values.

    Returns:
        An :class:`~specref.models.Adjacency` listing the downloaded
        documents (fresh downloads first, then cache hits) and the
        references that could not be fetched.

    Raises:
        SpecParseError: If the node's content is not a valid document.
    """
    tree = node.parsed
    if tree is None:
        tree = parse_content(node.content, hint_from_name(node.url or node.file_name))

    references = find_references(tree, is_remote_ref, remove_local_reference_from_path)
    if not references:
        node.parsed = tree
        return Adjacency()

    from_cache: list[FetchResult] = []
    to_download: list[ReferenceDescriptor] = []
    for reference in references:
        cached: Optional[FetchResult] = downloaded.get(reference.path)
        if cached is not None:
            from_cache.append(cached)
        else:
            to_download.append(reference)

    if from_cache:
        logger.debug("%s: %d reference(s) served from cache", node.file_name, len(from_cache))

    fetched = await fetch_urls(
        list(dict.fromkeys(reference.path for reference in to_download)), origin, resolver
    )
    for result in fetched:
        downloaded[result.file_name] = result

    node.parsed = relocate_references(tree, is_remote_ref, relocate)
    return _to_adjacency([*fetched, *from_cache], relocate)


def _to_adjacency(results: list[FetchResult], relocate: Relocator) -> Adjacency:
    """Split downloads into neighbour nodes and missing references."""
    adjacency = Adjacency()
    for result in results:
        if result.is_missing:
            adjacency.missing_nodes.append(ReferenceDescriptor(path=result.file_name))
        else:
            adjacency.graph_adj.append(
                SpecNode(
                    file_name=relocate(result.file_name),
                    url=result.file_name,
                    content=result.content,
                )
            )
    return adjacency
