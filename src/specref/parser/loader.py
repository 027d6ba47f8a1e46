"""Read specification documents and parse them into Python trees.

This module is the document-parser boundary of the resolution engine.  It
turns raw text into a ``dict`` (JSON or YAML, with automatic format
detection) and reads root documents from a URL, a local file, or stdin.

The public functions are:

* :func:`parse_content` -- Parse raw text into a document tree.
* :func:`hint_from_name` -- Guess the format from a file name or URL.
* :func:`load_source` -- Read a root document into an unparsed
  :class:`~specref.models.SpecNode`.

Parsing is deliberately strict: a document that is neither valid JSON nor
valid YAML, or whose top level is not a mapping, raises
:class:`~specref.exceptions.SpecParseError`.  The resolution engine treats
that as fatal for the whole run.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Optional
from urllib.parse import urlsplit

import httpx
import yaml

from specref.exceptions import SpecParseError
from specref.models import SpecNode

STDIN_SOURCE = "-"


def load_source(
    source: str,
    timeout: float = 30.0,
    transport: Optional[httpx.BaseTransport] = None,
) -> SpecNode:
    """Read a root document without parsing it.

    *source* is ``-`` for stdin, an ``http(s)`` URL, or a file path.  The
    returned node is named after the source (``stdin`` for standard input)
    and is parsed later by the node expander.

    Raises:
        SpecParseError: If the source cannot be read or holds only
            whitespace.
    """
    if source == STDIN_SOURCE:
        return SpecNode(file_name="stdin", content=_read_stdin())
    if urlsplit(source).scheme in ("http", "https"):
        content = _read_url(source, timeout, transport)
        return SpecNode(file_name=source, url=source, content=content)
    return SpecNode(file_name=source, content=_read_file(Path(source)))


def _non_blank(text: str, message: str) -> str:
    if not text.strip():
        raise SpecParseError(message)
    return text


def _read_stdin() -> str:
    try:
        text = sys.stdin.read()
    except (OSError, ValueError) as exc:
        raise SpecParseError(f"Could not read stdin: {exc}") from exc
    return _non_blank(text, "No input on stdin")


def _read_url(url: str, timeout: float, transport: Optional[httpx.BaseTransport] = None) -> str:
    try:
        with httpx.Client(timeout=timeout, follow_redirects=True, transport=transport) as client:
            response = client.get(url)
            response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise SpecParseError(f"HTTP {exc.response.status_code} from {url}") from exc
    except httpx.HTTPError as exc:
        raise SpecParseError(f"Failed to fetch {url}: {exc}") from exc
    return _non_blank(response.text, f"Document at {url} is empty")


def _read_file(path: Path) -> str:
    if not path.is_file():
        raise SpecParseError(f"File not found: {path}")
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise SpecParseError(f"Could not read {path}: {exc}") from exc
    return _non_blank(text, f"File is empty: {path}")


def hint_from_name(name: str) -> str:
    """Return ``"json"`` or ``"yaml"`` based on the extension of *name*, else ``""``.

    Works for plain paths and URLs; query strings and fragments are ignored.
    """
    try:
        path = urlsplit(name).path
    except ValueError:
        path = name
    suffix = Path(path).suffix.lower()
    if suffix == ".json":
        return "json"
    if suffix in (".yaml", ".yml"):
        return "yaml"
    return ""


def parse_content(content: str | None, hint: str = "") -> dict[str, Any]:
    """Parse a document as JSON or YAML.

    JSON is attempted first unless *hint* is ``"yaml"``; every JSON text is
    also YAML, but the JSON parser is faster and its errors are clearer.
    With ``hint="json"`` a JSON syntax error is final.

    Raises:
        SpecParseError: If *content* is ``None``, parses as neither format,
            or is not a mapping at the top level.
    """
    if content is None:
        raise SpecParseError("Document has no content to parse")

    errors: list[str] = []
    if hint != "yaml":
        try:
            return _require_mapping(json.loads(content))
        except json.JSONDecodeError as exc:
            if hint == "json":
                raise SpecParseError(f"Invalid JSON: {exc}") from exc
            errors.append(f"JSON error: {exc}")

    try:
        return _require_mapping(yaml.safe_load(content))
    except yaml.YAMLError as exc:
        errors.append(f"YAML error: {exc}")

    raise SpecParseError("Failed to parse spec as JSON or YAML\n  " + "\n  ".join(errors))


def _require_mapping(document: Any) -> dict[str, Any]:
    if not isinstance(document, dict):
        kind = "empty document" if document is None else type(document).__name__
        raise SpecParseError(f"Spec must be a JSON/YAML object (got {kind})")
    return document
