"""Cycle-safe asynchronous depth-first traversal over an implicit graph.

The graph is never materialised.  Edges are produced on demand by an
*expansion function* that receives a node and returns its neighbours plus
any items that should be reported as missing.  For reference resolution the
expansion function is the node expander, which downloads the documents a
node points to; the traversal itself knows nothing about fetching or
parsing.

Nodes are identified by a *key* (``file_name`` by default).  A key is
expanded at most once, which makes the traversal terminate on circular
graphs (A -> B -> A) and avoids redundant work on diamonds
(A -> B, A -> C, B -> D, C -> D).
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Hashable, Sequence
from dataclasses import dataclass, field
from operator import attrgetter
from typing import Any, Generic, TypeVar, Union

from specref.models import Adjacency

logger = logging.getLogger(__name__)

N = TypeVar("N")
M = TypeVar("M")

Expansion = Union[Adjacency, tuple[Sequence[Any], Sequence[Any]]]
ExpandFn = Callable[[Any], Awaitable[Expansion]]


@dataclass
class TraversalResult(Generic[N, M]):
    """Accumulated output of :meth:`DFS.traverse`.

    Attributes:
        traverse_order: Every visited node in pre-order, root first.
        missing: Items reported missing by the expansion function, in the
            order they were reported.
    """

    traverse_order: list[N] = field(default_factory=list)
    missing: list[M] = field(default_factory=list)


class DFS(Generic[N, M]):
    """Depth-first traversal driven by an asynchronous expansion function.

    Args:
        key: Returns the identity of a node.  Defaults to the node's
            ``file_name`` attribute.

    Example::

        result = await DFS().traverse(root, expand)
        for node in result.traverse_order:
            print(node.file_name)
    """

    def __init__(self, key: Callable[[N], Hashable] = attrgetter("file_name")) -> None:
        self._key = key

    async def traverse(self, root: N, expand: ExpandFn) -> TraversalResult[N, M]:
        """Visit every node reachable from *root*.

        Each node is expanded when it is first popped from the work stack.
        Neighbours are pushed in reverse so they are visited in the order
        *expand* returned them, each subtree completing before the next
        sibling starts.  Neighbours whose key was already visited are
        skipped silently.

        Args:
            root: The starting node.
            expand: Coroutine function returning either an
                :class:`~specref.models.Adjacency` or an
                ``(adjacent, missing)`` tuple for a node.

        Returns:
            The :class:`TraversalResult`.

        Raises:
            Exception: Whatever *expand* raises is propagated unchanged.
        """
        result: TraversalResult[N, M] = TraversalResult()
        visited: set[Hashable] = set()
        stack: list[N] = [root]

        while stack:
            node = stack.pop()
            node_key = self._key(node)
            if node_key in visited:
                continue
            visited.add(node_key)
            result.traverse_order.append(node)
            logger.debug("Visiting %s", node_key)

            adjacent, missing = _unpack(await expand(node))
            result.missing.extend(missing)
            stack.extend(
                neighbour for neighbour in reversed(adjacent)
                if self._key(neighbour) not in visited
            )

        return result


def _unpack(expansion: Expansion) -> tuple[Sequence[Any], Sequence[Any]]:
    if isinstance(expansion, Adjacency):
        return expansion.graph_adj, expansion.missing_nodes
    adjacent, missing = expansion
    return adjacent, missing
