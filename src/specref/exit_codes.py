"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~specref.exceptions.SpecrefError` subclass.
External tooling (CI scripts, shell wrappers) can inspect the exit code to
determine the failure class without parsing stderr.

Example::

    $ specref resolve openapi.yaml --strict
    $ echo $?
    8   # EXIT_UNRESOLVED_REFERENCES -- at least one remote $ref was missing
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or an undefined root document."""

EXIT_SERVER_ERROR = 5
"""A remote document server returned an HTTP 5xx error after all retries."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""

EXIT_SPEC_PARSE_ERROR = 7
"""A specification document could not be read or parsed."""

EXIT_UNRESOLVED_REFERENCES = 8
"""Strict mode was requested and one or more remote references could not be fetched."""
