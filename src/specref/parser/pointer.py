"""JSON Pointer algebra for multi-file OpenAPI documents.

This module holds the pure string functions used to classify ``$ref``
values, to turn a file path into a single JSON Pointer segment (and back),
and to compute where an entity pulled from another document would live
inside the root document's ``components`` section.

A ``$ref`` value is exactly one of:

* **local** -- starts with ``#`` (a fragment of the current document);
* **remote** -- not ``#``-prefixed and a valid URL;
* **external** -- anything else, interpreted as a file path that may carry
  a trailing ``#fragment``.

None of the functions here raise on malformed input.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from typing import Any, Optional
from urllib.parse import quote, unquote, urlsplit

import httpx

from specref.models import RefKind

LOCAL_POINTER = "#"
POINTER_SEPARATOR = "/"
REF_KEY = "$ref"

COMPONENTS_KEYS: tuple[str, ...] = (
    "schemas",
    "responses",
    "parameters",
    "examples",
    "requestBodies",
    "headers",
    "securitySchemes",
    "links",
    "callbacks",
)
"""Categories of the ``components`` section, in OpenAPI 3 order."""

SCHEMA_PARENT_KEYS: tuple[str, ...] = (
    "allOf",
    "oneOf",
    "anyOf",
    "not",
    "additionalProperties",
    "items",
    "schema",
)
"""Keys whose value is always a schema; they are placed under ``schemas``."""

# Characters encodeURIComponent leaves alone besides alphanumerics and -_.~
_URI_COMPONENT_SAFE = "!*'()"


# --- Segment codec ---


def encode_segment(name: str) -> str:
    """Encode a file path so it can be used as one JSON Pointer segment.

    ``~`` becomes ``~0`` and ``/`` becomes ``~1``; the result is then
    percent-encoded.

    Example::

        >>> encode_segment("specs/pet.yaml")
        'specs~1pet.yaml'
    """
    escaped = name.replace("~", "~0").replace("/", "~1")
    return quote(escaped, safe=_URI_COMPONENT_SAFE)


def decode_segment(name: str) -> str:
    """Decode a JSON Pointer segment produced by :func:`encode_segment`.

    ``~1`` and ``~0`` are unescaped *before* percent-decoding, so an escape
    that was itself percent-encoded (``%7E1``) survives as the literal text
    ``~1``.
    """
    unescaped = name.replace("~1", POINTER_SEPARATOR).replace("~0", "~")
    return unquote(unescaped)


# --- Classification ---


def is_valid_url(value: str) -> bool:
    """Return ``True`` if *value* parses as a URL with a scheme.

    Host-less URLs such as ``file:///tmp/pet.yaml`` or ``urn:example:pet``
    count.  Only when :class:`httpx.URL` rejects the string outright is a
    permissive :func:`urllib.parse.urlsplit` tried, and it must find a host
    name.
    """
    try:
        return bool(httpx.URL(value).scheme)
    except (httpx.InvalidURL, TypeError, ValueError):
        pass
    try:
        return bool(urlsplit(value).hostname)
    except (TypeError, ValueError):
        return False


def classify(ref: str) -> RefKind:
    """Classify a ``$ref`` value as local, external, or remote."""
    if ref.startswith(LOCAL_POINTER):
        return RefKind.LOCAL
    if is_valid_url(ref):
        return RefKind.REMOTE
    return RefKind.EXTERNAL


def _ref_value(node: Mapping[str, Any], key: str) -> Optional[str]:
    if key != REF_KEY:
        return None
    value = node.get(key)
    return value if isinstance(value, str) else None


def is_local_ref(node: Mapping[str, Any], key: str) -> bool:
    """Whether ``node[key]`` is a ``$ref`` pointing inside the current document."""
    value = _ref_value(node, key)
    return value is not None and classify(value) is RefKind.LOCAL


def is_external_ref(node: Mapping[str, Any], key: str) -> bool:
    """Whether ``node[key]`` is a ``$ref`` naming another file by path."""
    value = _ref_value(node, key)
    return value is not None and classify(value) is RefKind.EXTERNAL


def is_remote_ref(node: Mapping[str, Any], key: str) -> bool:
    """Whether ``node[key]`` is a ``$ref`` naming a URL."""
    value = _ref_value(node, key)
    return value is not None and classify(value) is RefKind.REMOTE


# --- Fragments ---


def strip_local_fragment(ref: str) -> str:
    """Drop everything from the first ``#`` on.

    Example::

        >>> strip_local_fragment("a.yaml#/components/schemas/Pet")
        'a.yaml'
    """
    return ref.split(LOCAL_POINTER, 1)[0]


def local_fragment(ref: str) -> str:
    """Return the text after the first ``#``, or ``""`` when there is none."""
    _, _, fragment = ref.partition(LOCAL_POINTER)
    return fragment


def remove_local_reference_from_path(node: Mapping[str, Any]) -> str:
    """Path-resolver for reference extraction: ``node["$ref"]`` without its fragment."""
    return strip_local_fragment(node[REF_KEY])


def entity_name(pointer: Optional[str]) -> str:
    """Return the last segment of a JSON Pointer (``""`` for an empty pointer)."""
    if not pointer:
        return ""
    return pointer[pointer.rfind(POINTER_SEPARATOR) + 1:]


# --- Components placement ---


def key_in_components(
    trace_from_parent: Sequence[str],
    file_name: str,
    local_path: Optional[str] = None,
) -> tuple[list[str], bool]:
    """Compute the nested key under ``components`` for a referenced entity.

    *trace_from_parent* is the chain of property names from the document
    root down to the ``$ref``.  The referenced file (plus ``#local_path``
    when given) is appended as a decoded pseudo-segment, then the chain is
    scanned from the reference outwards: schema-composition keys are
    rewritten to ``schemas`` and the scan stops at the first components
    category.

    Args:
        trace_from_parent: Property names from the root to the reference.
        file_name: The (possibly encoded) name of the referenced file.
        local_path: Optional fragment inside the referenced file.

    Returns:
        ``(key_path, in_components)``.  ``key_path`` is in root-to-leaf
        order and empty when no category matched.  ``in_components`` is
        ``True`` (with an empty key path) when the chain already starts at
        ``components``.

    Example::

        >>> key_in_components(
        ...     ["paths", "/pets", "get", "responses", "200", "content",
        ...      "application/json", "schema"],
        ...     "pet.yaml",
        ... )
        (['schemas', 'pet.yaml'], False)
    """
    if trace_from_parent and trace_from_parent[0] == "components":
        return [], True

    local_part = f"{LOCAL_POINTER}{local_path}" if local_path else ""
    trace = [*trace_from_parent, decode_segment(f"{file_name}{local_part}")]

    trace_to_key: list[str] = []
    for item in reversed(trace):
        if item in SCHEMA_PARENT_KEYS:
            item = "schemas"
        trace_to_key.append(item)
        if item in COMPONENTS_KEYS:
            trace_to_key.reverse()
            return trace_to_key, False
    return [], False


def concat_pointer(encode: Callable[[str], str], trace: Sequence[str]) -> str:
    """Join *trace* into a ``#/components/...`` pointer, encoding each segment."""
    joined = POINTER_SEPARATOR.join(encode(segment) for segment in trace)
    return f"{LOCAL_POINTER}/components{POINTER_SEPARATOR}{joined}"


def to_root_pointer(
    encode: Callable[[str], str],
    ref: str,
    trace_from_key: Sequence[str],
) -> str:
    """Return the pointer to *ref*'s entity relative to the root document.

    Local references are already root-relative and are returned unchanged.
    """
    if ref.startswith(LOCAL_POINTER):
        return ref
    return concat_pointer(encode, trace_from_key)
