"""Terminal output for specref: reports on stdout, diagnostics on stderr.

Everything a script may want to parse (resolution reports, reference tables,
configuration dumps) is written to **stdout**.  Status lines, warnings,
errors, and log records go to **stderr**, so piping
``specref --json resolve api.yaml`` into ``jq`` never sees them.

The format is chosen once per invocation in
:func:`~specref.app.main_callback`: ``--json`` and ``--plain`` force one,
otherwise Rich tables are drawn on a colour-capable terminal and
tab-separated text is written everywhere else.  ``NO_COLOR`` and
``TERM=dumb`` are honoured as described on `clig.dev <https://clig.dev/>`_.

Library code never prints.  It logs through :mod:`logging`, and
:func:`configure_logging` routes the ``specref`` logger to stderr with a
:class:`rich.logging.RichHandler`.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from collections.abc import Iterator
from enum import Enum
from typing import Any, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.syntax import Syntax
from rich.table import Table
from rich.text import Text


class OutputFormat(str, Enum):
    """How data on stdout is rendered.  ``AUTO`` is resolved on construction."""

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """``True`` when ``NO_COLOR`` is set to anything or ``TERM`` is ``dumb``."""
    return "NO_COLOR" in os.environ or os.environ.get("TERM") == "dumb"


def _plain_lines(data: Any) -> Iterator[str]:
    """Flatten a JSON-compatible value into tab-separated lines."""
    if isinstance(data, dict):
        for key, value in data.items():
            yield f"{key}\t{value}"
    elif isinstance(data, list):
        for item in data:
            yield "\t".join(map(str, item.values())) if isinstance(item, dict) else str(item)
    else:
        yield str(data)


class OutputManager:
    """Output settings for one CLI invocation.

    Holds the resolved :class:`OutputFormat`, the quiet/verbose flags and a
    Rich console for each stream.  Consoles bind to ``sys.stdout`` and
    ``sys.stderr`` as they are at construction time.

    Args:
        format: Requested format; ``AUTO`` becomes ``RICH`` on an
            interactive, colour-capable stdout and ``PLAIN`` otherwise.
        no_color: Disable colour even on a terminal.
        quiet: Hide ``info`` and ``success`` messages.
        verbose: Show ``debug`` messages.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose
        if format == OutputFormat.AUTO:
            format = OutputFormat.RICH if _is_tty() and not self._no_color else OutputFormat.PLAIN
        self._format = format

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=format == OutputFormat.RICH,
        )
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        return self._format

    @property
    def is_quiet(self) -> bool:
        return self._quiet

    @property
    def is_verbose(self) -> bool:
        return self._verbose

    @property
    def stderr_console(self) -> Console:
        return self._stderr

    # --- stdout ---

    def print_data(self, text: str) -> None:
        print(text, file=sys.stdout, flush=True)

    def format_response(self, data: Any) -> None:
        """Render a JSON-compatible value in the active format."""
        if self._format == OutputFormat.PLAIN:
            for line in _plain_lines(data):
                self.print_data(line)
            return
        text = json.dumps(data, indent=2, ensure_ascii=False, default=str)
        if self._format == OutputFormat.JSON:
            self.print_data(text)
        else:
            self._stdout.print(Syntax(text, "json", theme="monokai", word_wrap=True))

    def print_table(
        self,
        headers: list[str],
        rows: list[list[str]],
        title: Optional[str] = None,
    ) -> None:
        """Render rows of strings under *headers*.

        JSON mode prints one object per row keyed by header.  Plain mode
        prints the header line and then one tab-separated line per row; the
        title is dropped.
        """
        if self._format == OutputFormat.JSON:
            records = [dict(zip(headers, row)) for row in rows]
            self.print_data(json.dumps(records, indent=2, ensure_ascii=False))
        elif self._format == OutputFormat.PLAIN:
            for line in (headers, *rows):
                self.print_data("\t".join(line))
        else:
            table = Table(*headers, title=title, header_style="bold cyan")
            for row in rows:
                table.add_row(*row)
            self._stdout.print(table)

    # --- stderr ---

    def _emit(self, text: Text) -> None:
        if self._no_color:
            print(text.plain, file=sys.stderr, flush=True)
        else:
            self._stderr.print(text)

    def info(self, message: str) -> None:
        if not self._quiet:
            self._emit(Text(message))

    def success(self, message: str) -> None:
        if not self._quiet:
            self._emit(Text(message, style="green"))

    def warning(self, message: str) -> None:
        """Printed even in quiet mode."""
        self._emit(Text.assemble(("Warning:", "yellow"), " ", message))

    def error(self, message: str) -> None:
        """Printed even in quiet mode."""
        self._emit(Text.assemble(("Error:", "bold red"), " ", message))

    def debug(self, message: str) -> None:
        if self._verbose:
            self._emit(Text(f"[debug] {message}", style="dim"))


def configure_logging(output: OutputManager) -> None:
    """Route records of the ``specref`` logger to *output*'s stderr console.

    The level follows the CLI flags: ``DEBUG`` with ``--verbose``, ``ERROR``
    with ``--quiet``, ``WARNING`` otherwise.  A handler installed by an
    earlier call is replaced.
    """
    if output.is_verbose:
        level = logging.DEBUG
    elif output.is_quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING

    logger = logging.getLogger("specref")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = RichHandler(
        console=output.stderr_console,
        show_path=False,
        show_time=output.is_verbose,
        markup=False,
    )
    handler.setLevel(level)
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False


# --- Global instance ---

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the installed manager, creating a default one on first use."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Forget the installed manager (tests call this between runs)."""
    global _output
    _output = None


def format_response(data: Any) -> None:
    get_output().format_response(data)


def print_table(
    headers: list[str],
    rows: list[list[str]],
    title: Optional[str] = None,
) -> None:
    get_output().print_table(headers, rows, title)


def info(message: str) -> None:
    get_output().info(message)


def success(message: str) -> None:
    get_output().success(message)


def warning(message: str) -> None:
    get_output().warning(message)


def error(message: str) -> None:
    get_output().error(message)


def debug(message: str) -> None:
    get_output().debug(message)
