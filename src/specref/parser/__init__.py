"""Reference resolution engine -- pointer algebra, extraction, expansion, resolution.

This sub-package turns a root OpenAPI document into the list of every remote
document it transitively references, plus the references that could not be
downloaded.

Typical usage::

    from specref.parser import load_source, resolve_one_sync

    root = load_source("openapi.yaml")
    result = resolve_one_sync(root)
    for remote in result.remote_refs:
        print(remote.file_name)

Sub-modules:

* :mod:`~specref.parser.pointer` -- JSON Pointer codec, ``$ref``
  classification, and ``components`` key-path computation.
* :mod:`~specref.parser.references` -- Tree walking, reference extraction
  and relocation.
* :mod:`~specref.parser.loader` -- Document parsing (JSON/YAML) and root
  document loading (URL, file, stdin).
* :mod:`~specref.parser.expander` -- Expansion of one document into its
  downloaded neighbours.
* :mod:`~specref.parser.resolver` -- Per-root orchestration on top of
  :class:`~specref.traversal.DFS`.
"""

from specref.parser.loader import load_source, parse_content
from specref.parser.resolver import (
    resolve_many,
    resolve_many_sync,
    resolve_one,
    resolve_one_sync,
)

__all__ = [
    "load_source",
    "parse_content",
    "resolve_one",
    "resolve_many",
    "resolve_one_sync",
    "resolve_many_sync",
]
