"""Terminal output for the specbind CLI.

Two streams, two jobs:

* **stdout** carries results only: generated source from ``show``, the
  tables from ``inspect``, the JSON summary of ``compile --json``. It is safe
  to redirect into a file or pipe into ``jq``.
* **stderr** carries everything a person reads while the compiler runs:
  progress notes, per-file warnings, errors, next-step hints and the records
  emitted by library modules through :mod:`logging`.

The data format is ``json``, ``plain`` (tab separated) or ``rich``. ``auto``
picks ``rich`` for an interactive terminal and ``plain`` for a pipe. Colour is
off when ``NO_COLOR`` is set, when ``TERM=dumb``, or with ``--no-color``.

:class:`OutputManager` holds these choices. :func:`~specbind.app.main_callback`
builds one per invocation and installs it with :func:`set_output`. Commands
call the module-level helpers (:func:`info`, :func:`warning` ...), which
forward to the installed manager.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from enum import Enum
from typing import Any, NamedTuple, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table


class OutputFormat(str, Enum):
    """How data written to stdout is rendered."""

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class _Style(NamedTuple):
    """Rendering of one diagnostic kind on stderr."""

    prefix: str
    markup: str
    quiet_hides: bool


_STYLES: dict[str, _Style] = {
    "info": _Style("", "{}", True),
    "success": _Style("", "[green]{}[/green]", True),
    "suggest": _Style("→ ", "[dim]→ {}[/dim]", True),
    "warning": _Style("Warning: ", "[yellow]Warning:[/yellow] {}", False),
    "error": _Style("Error: ", "[bold red]Error:[/bold red] {}", False),
    "debug": _Style("[debug] ", "[dim]\\[debug] {}[/dim]", False),
}


class OutputManager:
    """Routes command output to stdout and diagnostics to stderr.

    Args:
        format: Data format for stdout. ``AUTO`` is resolved once, here.
        no_color: Never emit colour or Rich markup.
        quiet: Hide info, success and suggestion messages.
        verbose: Show debug messages and DEBUG log records.
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

        if format != OutputFormat.AUTO:
            self._format = format
        elif _is_tty() and not self._no_color:
            self._format = OutputFormat.RICH
        else:
            self._format = OutputFormat.PLAIN

        rich_stdout = self._format == OutputFormat.RICH
        self._stdout = Console(file=sys.stdout, no_color=self._no_color, force_terminal=rich_stdout)
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

    # -- stdout ----------------------------------------------------------

    def print_data(self, text: str) -> None:
        """Write one line of *text* to stdout."""
        print(text, file=sys.stdout, flush=True)

    def format_response(self, data: Any) -> None:
        """Write a dict or list to stdout.

        JSON mode dumps it indented; plain mode writes ``key<TAB>value`` per
        dict entry or one line per list item; rich mode highlights the JSON.
        """
        if self._format == OutputFormat.PLAIN:
            for line in _plain_lines(data):
                self.print_data(line)
            return
        text = _dump(data)
        if self._format == OutputFormat.JSON:
            self.print_data(text)
        else:
            self._stdout.print(Syntax(text, "json", theme="monokai", word_wrap=True))

    def print_source(self, source: str) -> None:
        """Write generated Python *source* to stdout.

        Only rich mode decorates it; in every other mode the bytes are exactly
        what ``compile`` would write to disk.
        """
        if self._format == OutputFormat.RICH:
            self._stdout.print(Syntax(source, "python", theme="monokai"))
            return
        sys.stdout.write(source)
        sys.stdout.flush()

    def print_table(
        self,
        headers: list[str],
        rows: list[list[str]],
        title: Optional[str] = None,
    ) -> None:
        """Write rows to stdout as a Rich table, TSV, or a JSON list of objects.

        *title* is only shown in rich mode.
        """
        if self._format == OutputFormat.JSON:
            self.print_data(_dump([dict(zip(headers, row)) for row in rows]))
        elif self._format == OutputFormat.PLAIN:
            for row in [headers, *rows]:
                self.print_data("\t".join(row))
        else:
            table = Table(*headers, title=title, header_style="bold cyan")
            for row in rows:
                table.add_row(*row)
            self._stdout.print(table)

    # -- stderr ----------------------------------------------------------

    def info(self, message: str) -> None:
        self._diagnostic("info", message)

    def success(self, message: str) -> None:
        self._diagnostic("success", message)

    def suggest(self, message: str) -> None:
        self._diagnostic("suggest", message)

    def warning(self, message: str) -> None:
        self._diagnostic("warning", message)

    def error(self, message: str) -> None:
        self._diagnostic("error", message)

    def debug(self, message: str) -> None:
        if self._verbose:
            self._diagnostic("debug", message)

    def log_handler(self) -> RichHandler:
        """Return a handler that renders log records on this manager's stderr.

        Records at DEBUG pass with ``--verbose``, ERROR and above with
        ``--quiet``, WARNING and above otherwise.
        """
        handler = RichHandler(
            console=self._stderr,
            show_time=False,
            show_path=self._verbose,
            markup=False,
            rich_tracebacks=self._verbose,
        )
        if self._verbose:
            handler.setLevel(logging.DEBUG)
        elif self._quiet:
            handler.setLevel(logging.ERROR)
        else:
            handler.setLevel(logging.WARNING)
        return handler

    def _diagnostic(self, kind: str, message: str) -> None:
        style = _STYLES[kind]
        if self._quiet and style.quiet_hides:
            return
        if self._no_color:
            print(f"{style.prefix}{message}", file=sys.stderr, flush=True)
        else:
            self._stderr.print(style.markup.format(escape(message)))


def _dump(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False, default=str)


def _plain_lines(data: Any) -> list[str]:
    if isinstance(data, dict):
        return [f"{key}\t{value}" for key, value in data.items()]
    if isinstance(data, list):
        return [
            "\t".join(str(v) for v in item.values()) if isinstance(item, dict) else str(item)
            for item in data
        ]
    return [str(data)]


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """``NO_COLOR`` (any value, see no-color.org) or ``TERM=dumb``."""
    return "NO_COLOR" in os.environ or os.environ.get("TERM") == "dumb"


# -- process-wide manager ------------------------------------------------

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the installed manager, creating an ``AUTO`` one on first use."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Forget the installed manager (its consoles may hold closed streams)."""
    global _output
    _output = None


def format_response(data: Any) -> None:
    get_output().format_response(data)


def print_data(text: str) -> None:
    get_output().print_data(text)


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


def suggest(message: str) -> None:
    get_output().suggest(message)


def warning(message: str) -> None:
    get_output().warning(message)


def error(message: str) -> None:
    get_output().error(message)


def debug(message: str) -> None:
    get_output().debug(message)
