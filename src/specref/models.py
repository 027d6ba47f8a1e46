"""Canonical Pydantic models shared across all specref modules.

This is the single source of truth for data shapes in the project. Every other
module imports from here rather than defining its own models. The models fall
into two groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`FetchConfig`, :class:`CacheConfig`, :class:`OutputConfig`, and
    :class:`GlobalConfig`.

**Resolution models** -- produced and consumed by the reference-resolution
engine:
    :class:`RefKind`, :class:`ReferenceDescriptor`, :class:`SpecNode`,
    :class:`FetchStatus`, :class:`FetchResult`, :class:`Adjacency`,
    :class:`RemoteFile`, and :class:`RemoteRefsResult`.

All models use Pydantic v2.  :class:`SpecNode` is deliberately mutable: the
node expander attaches the parsed document tree to it once the node has been
expanded.
"""

from __future__ import annotations

import enum
from typing import Any, Optional

from pydantic import BaseModel, Field


NOT_FOUND_MARKER = "NF"
"""Legacy prefix that user resolvers may return to signal a missing document."""


# --- Config Models ---


class FetchConfig(BaseModel):
    """HTTP download settings used by :class:`~specref.client.fetcher.HttpFetcher`."""

    timeout: float = Field(default=30.0, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")
    max_retries: int = Field(default=3, description="Max retry attempts")
    follow_redirects: bool = Field(default=True, description="Follow HTTP redirects")
    max_concurrency: int = Field(
        default=8, description="Max simultaneous downloads within one batch"
    )


class CacheConfig(BaseModel):
    """Persistent document cache settings stored in :class:`GlobalConfig`."""

    enabled: bool = Field(default=True, description="Enable the on-disk document cache")
    ttl_seconds: int = Field(default=300, description="Cache TTL in seconds")


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/specref/config.json``.

    Loaded and saved by :func:`~specref.config.load_global_config` and
    :func:`~specref.config.save_global_config`. Fields here have the
    lowest precedence and can be overridden by project config, environment
    variables, or CLI flags. See :func:`~specref.config.resolve_config`
    for the full precedence chain.
    """

    origin: str = Field(
        default="cli", description="Origin tag passed to the batch downloader"
    )
    fetch: FetchConfig = Field(default_factory=FetchConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)


# --- Resolution Models ---


class RefKind(str, enum.Enum):
    """The three mutually exclusive classes of a ``$ref`` value."""

    LOCAL = "local"
    EXTERNAL = "external"
    REMOTE = "remote"


class ReferenceDescriptor(BaseModel):
    """An external or remote ``$ref`` target with its ``#fragment`` stripped.

    ``path`` is the identity used as the download-cache key.
    """

    path: str


class SpecNode(BaseModel):
    """One physical document taking part in a traversal.

    ``file_name`` is the identity key inside a traversal.  ``content`` is the
    raw text and ``parsed`` the lazily built document tree, filled in by the
    node expander.
    """

    file_name: str = ""
    url: Optional[str] = None
    content: Optional[str] = None
    parsed: Any = None

    def is_empty(self) -> bool:
        """Return ``True`` when the node carries neither a name nor any content."""
        return not self.file_name and not self.content and self.parsed is None


class FetchStatus(str, enum.Enum):
    """Outcome of downloading one document."""

    OK = "ok"
    NOT_FOUND = "not_found"
    ERROR = "error"


class FetchResult(BaseModel):
    """Tagged result of downloading one reference target.

    Replaces the ``"NF"`` string sentinel with an explicit :class:`FetchStatus`.
    ``error`` carries a human-readable reason for ``ERROR`` results.
    """

    file_name: str
    status: FetchStatus = FetchStatus.OK
    content: Optional[str] = None
    error: Optional[str] = None

    @property
    def is_missing(self) -> bool:
        """Whether the target should be reported as an unresolved reference."""
        return self.status != FetchStatus.OK or self.content is None

    @classmethod
    def from_content(cls, file_name: str, content: Optional[str]) -> FetchResult:
        """Build a result from raw resolver output.

        ``None`` and strings starting with :data:`NOT_FOUND_MARKER` map to
        :attr:`FetchStatus.NOT_FOUND`; any other string is a successful fetch.
        """
        if content is None or content.startswith(NOT_FOUND_MARKER):
            return cls(file_name=file_name, status=FetchStatus.NOT_FOUND)
        return cls(file_name=file_name, status=FetchStatus.OK, content=content)


class Adjacency(BaseModel):
    """Neighbours discovered while expanding one node.

    ``graph_adj`` holds the successfully downloaded documents, in the order
    the downloader returned them; ``missing_nodes`` the targets that could
    not be fetched.
    """

    graph_adj: list[SpecNode] = Field(default_factory=list)
    missing_nodes: list[ReferenceDescriptor] = Field(default_factory=list)


class RemoteFile(BaseModel):
    """A document reached from the root, as reported to callers."""

    file_name: str
    content: Optional[str] = None
    parsed: Any = None


class RemoteRefsResult(BaseModel):
    """Result of resolving the remote references of a single root document."""

    remote_refs: list[RemoteFile] = Field(default_factory=list)
    missing_remote_refs: list[ReferenceDescriptor] = Field(default_factory=list)
    spec_root: SpecNode
