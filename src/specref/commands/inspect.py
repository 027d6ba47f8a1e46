"""Inspect commands -- examine the references of a single document.

Provides the ``specref inspect`` sub-command group with read-only commands
for looking at a document without downloading anything.  ``inspect refs``
lists every ``$ref``, where it sits, how it is classified, and where the
referenced entity would be placed under the root's ``components`` section.
"""

from __future__ import annotations

from typing import Optional

import typer

from specref.exceptions import SpecrefError
from specref.models import RefKind
from specref.output import error, get_output


inspect_app = typer.Typer(no_args_is_help=True)


@inspect_app.command("refs")
def inspect_refs(
    source: str = typer.Argument(help="Document to inspect: file path, URL, or '-'."),
    kind: Optional[RefKind] = typer.Option(
        None, "--kind", "-k", help="Only show references of this kind."
    ),
) -> None:
    """List every $ref in SOURCE.

    For each reference the table shows its location as a JSON Pointer, the
    raw value, its kind (local, external, remote), the key path it would
    get under ``components``, and the pointer to it relative to the root.

    Example::

        specref inspect refs openapi.yaml
        specref inspect refs openapi.yaml --kind remote --json
    """
    from specref.parser.loader import hint_from_name, load_source, parse_content
    from specref.parser.pointer import (
        encode_segment,
        key_in_components,
        local_fragment,
        strip_local_fragment,
        to_root_pointer,
    )
    from specref.parser.references import collect_ref_sites

    try:
        node = load_source(source)
        tree = parse_content(node.content, hint_from_name(source))
    except SpecrefError as exc:
        error(f"Failed to load spec: {exc}")
        raise typer.Exit(code=exc.exit_code) from None

    rows: list[list[str]] = []
    for site in collect_ref_sites(tree):
        if kind is not None and site.kind is not kind:
            continue
        trace = [str(segment) for segment in site.path]
        location = "#/" + "/".join(encode_segment(segment) for segment in trace)

        key_column = "-"
        root_pointer = site.ref
        if site.kind is not RefKind.LOCAL:
            key_path, in_components = key_in_components(
                trace, strip_local_fragment(site.ref), local_fragment(site.ref) or None
            )
            if in_components:
                key_column = "(in components)"
                root_pointer = "-"
            elif key_path:
                key_column = "/".join(key_path)
                root_pointer = to_root_pointer(encode_segment, site.ref, key_path)
            else:
                root_pointer = "-"

        rows.append([location, site.ref, site.kind.value, key_column, root_pointer])

    get_output().print_table(
        ["Location", "$ref", "Kind", "Components key", "Root pointer"],
        rows,
        title=f"{node.file_name} -- References ({len(rows)})",
    )
