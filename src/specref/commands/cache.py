"""Cache commands -- inspect and empty the document cache.

Provides the ``specref cache`` sub-command group over the on-disk
:class:`~specref.cache.DocumentCache` that ``specref resolve`` fills with
downloaded documents.  The per-run download cache of the resolution engine
is never persisted and is not affected.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

import typer

from specref.cache import DocumentCache
from specref.output import format_response, info, success


cache_app = typer.Typer(no_args_is_help=True)


@contextmanager
def _open_cache(maintenance: bool = False) -> Iterator[DocumentCache]:
    """Open the configured cache; *maintenance* opens it even when disabled."""
    from specref.config import get_cache_dir, resolve_config

    config = resolve_config().cache
    if maintenance:
        config = config.model_copy(update={"enabled": True})
    cache = DocumentCache(get_cache_dir(), config)
    try:
        yield cache
    finally:
        cache.close()


@cache_app.command("stats")
def cache_stats() -> None:
    """Show where the document cache lives and how many entries it holds.

    Example::

        specref cache stats
        specref --json cache stats
    """
    with _open_cache() as cache:
        format_response(cache.stats())


@cache_app.command("forget")
def cache_forget(
    url: str = typer.Argument(help="URL of the document to drop from the cache."),
) -> None:
    """Drop one document so the next ``resolve`` downloads it again.

    Any ``#fragment`` is ignored, matching how documents are cached.

    Example::

        specref cache forget https://specs.example.com/pet.yaml
    """
    from specref.parser.pointer import strip_local_fragment

    with _open_cache(maintenance=True) as cache:
        cache.invalidate(strip_local_fragment(url))
    success(f"Forgot {url}")


@cache_app.command("clear")
def cache_clear(
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation."),
) -> None:
    """Remove every cached document.

    Asks for confirmation unless ``--force`` is given.

    Example::

        specref cache clear --force
    """
    if not force and not typer.confirm("Remove all cached documents?"):
        info("Cancelled.")
        raise typer.Exit()

    with _open_cache(maintenance=True) as cache:
        cache.clear()
    success("Document cache cleared.")
