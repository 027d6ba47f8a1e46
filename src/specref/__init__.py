"""specref -- Follow the remote ``$ref`` pointers of multi-file OpenAPI specs.

This package walks an OpenAPI document, downloads every remote document it
references (and every document those reference in turn), and reports the
references that could not be fetched. Circular and repeated references are
downloaded once.

Typical workflow::

    specref resolve openapi.yaml          # list remote documents and missing refs
    specref inspect refs openapi.yaml     # classify every $ref in one document

Modules:
    app: Typer application factory and CLI entry point.
    models: Pydantic models shared across the entire package.
    parser: Pointer algebra, reference extraction and remote resolution.
    traversal: Cycle-safe asynchronous depth-first traversal.
    client: Batch downloader and default HTTP fetcher.
    config: XDG-aware configuration and precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.1.0"
