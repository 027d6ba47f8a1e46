"""Exception hierarchy for specref.

All exceptions inherit from :class:`SpecrefError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`specref.exit_codes`.
The top-level error handler in :func:`specref.app.main` catches
``SpecrefError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Only :class:`InvalidUsageError` and :class:`SpecParseError` escape the
resolution engine.  Download failures (:class:`ServerError`,
:class:`ConnectionError_`) are raised by the HTTP fetcher but converted
into missing-reference entries by the batch downloader.

Subclass hierarchy::

    SpecrefError                  (exit 1)
    +-- InvalidUsageError         (exit 2)
    +-- ServerError               (exit 5)
    +-- ConnectionError_          (exit 6)
    +-- SpecParseError            (exit 7)
    +-- UnresolvedReferencesError (exit 8)
    +-- ConfigError               (exit 1)
"""

from specref.exit_codes import (
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_SERVER_ERROR,
    EXIT_SPEC_PARSE_ERROR,
    EXIT_UNRESOLVED_REFERENCES,
)


class SpecrefError(Exception):
    """Base exception for all specref errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`specref.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(SpecrefError):
    """Raised for invalid CLI arguments or an undefined/empty root document."""

    exit_code = EXIT_INVALID_USAGE


class ServerError(SpecrefError):
    """Raised when a document server returns an HTTP 5xx error after all retries."""

    exit_code = EXIT_SERVER_ERROR


class ConnectionError_(SpecrefError):
    """Raised on network-level failures (timeout, DNS resolution, connection refused).

    Named with a trailing underscore to avoid shadowing the built-in
    ``ConnectionError``.
    """

    exit_code = EXIT_CONNECTION_ERROR


class SpecParseError(SpecrefError):
    """Raised when a specification document cannot be read or parsed."""

    exit_code = EXIT_SPEC_PARSE_ERROR


class UnresolvedReferencesError(SpecrefError):
    """Raised by ``specref resolve --strict`` when remote references are missing.

    Args:
        missing: The unresolved reference paths, in report order.
    """

    exit_code = EXIT_UNRESOLVED_REFERENCES

    def __init__(self, missing: list[str]):
        self.missing = list(missing)
        super().__init__(
            f"{len(self.missing)} remote reference(s) could not be resolved: "
            + ", ".join(self.missing)
        )


class ConfigError(SpecrefError):
    """Raised for configuration problems (invalid JSON, unknown keys, bad values)."""

    exit_code = EXIT_GENERIC_FAILURE
