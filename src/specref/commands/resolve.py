"""Resolve command -- download the remote documents referenced by root specs.

Provides ``specref resolve``, which loads one or more root documents, follows
every remote ``$ref`` transitively, and reports the documents reached and
the references that could not be downloaded.  Roots are processed one after
the other, each with its own download cache.
"""

from __future__ import annotations

from typing import Any, Optional

import typer

from specref.exceptions import SpecrefError, UnresolvedReferencesError
from specref.models import RemoteRefsResult
from specref.output import debug, error, format_response, get_output, info, success


def resolve_command(
    sources: list[str] = typer.Argument(
        help="Root documents: file paths, http(s) URLs, or '-' for stdin."
    ),
    origin: Optional[str] = typer.Option(
        None, "--origin", help="Origin tag passed to the downloader."
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", help="Per-request timeout in seconds."
    ),
    no_cache: bool = typer.Option(
        False, "--no-cache", help="Bypass the on-disk document cache."
    ),
    strict: bool = typer.Option(
        False, "--strict", help="Exit with code 8 if any reference is missing."
    ),
) -> None:
    """Follow the remote $refs of each SOURCE and report the result.

    Prints one row per downloaded document and one per missing reference.
    With ``--json`` the full report is printed as a JSON array with one
    object per root.

    Args:
        sources: Root documents to resolve.
        origin: Origin tag override.
        timeout: Request timeout override.
        no_cache: Disable the persistent document cache for this run.
        strict: Fail when any remote reference could not be downloaded.

    Raises:
        typer.Exit: With the error's exit code when a root cannot be loaded
            or parsed, or with code 8 under ``--strict`` when references are
            missing.

    Example::

        specref resolve openapi.yaml
        specref resolve api-a.yaml api-b.yaml --json --strict
    """
    from specref.config import resolve_config
    from specref.parser import load_source, resolve_many_sync

    try:
        config = resolve_config(cli_origin=origin, cli_timeout=timeout, cli_no_cache=no_cache)
        roots = [load_source(source, timeout=config.fetch.timeout) for source in sources]
        debug(f"Resolving {len(roots)} root(s) [origin={config.origin}]")
        results = resolve_many_sync(roots, config.origin, config=config)
    except SpecrefError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    _report(results)

    missing = [ref.path for result in results for ref in result.missing_remote_refs]
    if strict and missing:
        exc = UnresolvedReferencesError(missing)
        error(str(exc))
        raise typer.Exit(code=exc.exit_code)


def _report(results: list[RemoteRefsResult]) -> None:
    """Print the resolution report in the active output format."""
    from specref.output import OutputFormat

    output = get_output()
    if output.format == OutputFormat.JSON:
        format_response([_as_dict(result) for result in results])
        return

    rows = [
        [result.spec_root.file_name, remote.file_name, str(len(remote.content or ""))]
        for result in results
        for remote in result.remote_refs
    ]
    output.print_table(["Root", "Document", "Bytes"], rows, title=f"Remote documents ({len(rows)})")

    missing_rows = [
        [result.spec_root.file_name, ref.path]
        for result in results
        for ref in result.missing_remote_refs
    ]
    if missing_rows:
        output.print_table(
            ["Root", "Reference"], missing_rows, title=f"Missing references ({len(missing_rows)})"
        )
        info(f"{len(missing_rows)} remote reference(s) could not be resolved.")
    else:
        success("All remote references resolved.")


def _as_dict(result: RemoteRefsResult) -> dict[str, Any]:
    return {
        "root": result.spec_root.file_name,
        "remote_refs": [
            {"file_name": remote.file_name, "bytes": len(remote.content or "")}
            for remote in result.remote_refs
        ],
        "missing_remote_refs": [ref.path for ref in result.missing_remote_refs],
    }
