"""Locate and relocate ``$ref`` occurrences in an arbitrary document tree.

A parsed OpenAPI document is a tree of three node shapes: mappings, sequences,
and scalars.  :func:`walk` visits every container node (including the root)
depth-first, and the functions built on it apply a *predicate* of the form
``predicate(node, key) -> bool`` to each mapping's direct keys -- the
classifiers in :mod:`specref.parser.pointer` have exactly this signature.

* :func:`find_references` -- read-only; returns the distinct targets.
* :func:`relocate_references` -- returns a **new** tree with the matching
  ``$ref`` values rewritten; the input tree is left untouched.
* :func:`collect_ref_sites` -- every ``$ref`` with its location and kind,
  for reporting.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from specref.models import RefKind, ReferenceDescriptor
from specref.parser.pointer import REF_KEY, classify

RefPredicate = Callable[[Mapping[str, Any], str], bool]
PathResolver = Callable[[Mapping[str, Any]], str]
Relocator = Callable[[str], str]

TreePath = tuple[Any, ...]


@dataclass
class RefSite:
    """A single ``$ref`` found in a document.

    Attributes:
        path: Keys and list indices from the root to the mapping holding
            the ``$ref``.
        ref: The raw ``$ref`` value.
        kind: Its classification.
    """

    path: TreePath
    ref: str
    kind: RefKind


def walk(tree: Any) -> Iterator[tuple[TreePath, Any]]:
    """Yield ``(path, node)`` for every mapping and sequence in *tree*.

    The root itself is yielded first with an empty path; scalars are never
    yielded.  An explicit stack is used so arbitrarily deep documents do not
    hit the recursion limit.  Children are yielded in document order.

    Each container object is yielded once, at the first path that reaches
    it.  YAML aliases can make a tree share nodes or even contain itself;
    later paths to the same object are skipped.
    """
    seen: set[int] = set()
    stack: list[tuple[TreePath, Any]] = [((), tree)]
    while stack:
        path, node = stack.pop()
        if not isinstance(node, (Mapping, list)) or id(node) in seen:
            continue
        seen.add(id(node))
        yield path, node
        entries = node.items() if isinstance(node, Mapping) else enumerate(node)
        children = [(path + (key,), value) for key, value in entries]
        stack.extend(reversed(children))


def _matches(node: Any, predicate: RefPredicate) -> bool:
    return isinstance(node, Mapping) and any(predicate(node, key) for key in node)


def find_references(
    root: Any,
    predicate: RefPredicate,
    resolve_path: PathResolver,
) -> list[ReferenceDescriptor]:
    """Collect the distinct reference targets in *root* that satisfy *predicate*.

    Args:
        root: The parsed document tree.
        predicate: ``predicate(node, key)`` selecting the ``$ref`` properties
            of interest, e.g. :func:`~specref.parser.pointer.is_remote_ref`.
        resolve_path: Maps a matching node to its descriptor path, e.g.
            :func:`~specref.parser.pointer.remove_local_reference_from_path`.

    Returns:
        One :class:`~specref.models.ReferenceDescriptor` per distinct path,
        in order of first discovery.
    """
    seen: set[str] = set()
    references: list[ReferenceDescriptor] = []
    for _, node in walk(root):
        if not _matches(node, predicate):
            continue
        path = resolve_path(node)
        if path not in seen:
            seen.add(path)
            references.append(ReferenceDescriptor(path=path))
    return references


def map_to_local_path(url: str) -> str:
    """Map a remote URL to the key it is stored under locally.

    The identity mapping: downloaded documents keep their URL as their name.
    Callers pass a different function to :func:`relocate_references` and the
    node expander to rewrite URLs into local cache keys.
    """
    return url


def relocate_references(
    root: Any,
    predicate: RefPredicate,
    relocate: Relocator = map_to_local_path,
) -> Any:
    """Return a copy of *root* with every matching ``$ref`` passed through *relocate*.

    Mirrors the shape of the input: mappings become ``dict``, sequences become
    ``list`` and scalars are shared.  The input tree is never mutated.

    Like :func:`copy.deepcopy`, each container is copied once, so nodes shared
    through YAML aliases stay shared in the copy and a self-containing node
    becomes a self-containing copy.  Works with an explicit stack, like
    :func:`walk`.
    """
    if not isinstance(root, (Mapping, list)):
        return root

    copies: dict[int, Any] = {}

    def copy_of(node: Any) -> Any:
        if not isinstance(node, (Mapping, list)):
            return node
        if id(node) not in copies:
            copies[id(node)] = {} if isinstance(node, Mapping) else [None] * len(node)
            stack.append((node, copies[id(node)]))
        return copies[id(node)]

    stack: list[tuple[Any, Any]] = []
    result = copy_of(root)
    while stack:
        source, target = stack.pop()
        entries = source.items() if isinstance(source, Mapping) else enumerate(source)
        for key, value in entries:
            target[key] = copy_of(value)
        if _matches(source, predicate):
            target[REF_KEY] = relocate(source[REF_KEY])
    return result


def collect_ref_sites(root: Any) -> list[RefSite]:
    """List every string ``$ref`` in *root* with its location and kind."""
    sites: list[RefSite] = []
    for path, node in walk(root):
        if isinstance(node, Mapping) and isinstance(node.get(REF_KEY), str):
            ref = node[REF_KEY]
            sites.append(RefSite(path=path, ref=ref, kind=classify(ref)))
    return sites
