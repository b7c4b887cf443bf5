"""The ``specbind`` command: root Typer app and console-script entry point.

Sub-commands live in :mod:`specbind.commands` and are attached below. The
root callback runs before any of them and sets up the two things every
command relies on: the global :class:`~specbind.output.OutputManager` and a
stderr handler for the ``specbind`` logger tree.

:func:`main` wraps the app for the console script. A
:class:`~specbind.exceptions.SpecbindError` that escapes a command becomes
its exit code; any other exception is written to a crash log under
:func:`~specbind.config.get_data_dir` and exits with
:data:`~specbind.exit_codes.EXIT_GENERIC_FAILURE`.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

import typer

from specbind import __version__
from specbind.exit_codes import EXIT_GENERIC_FAILURE

if TYPE_CHECKING:
    from specbind.output import OutputFormat

app = typer.Typer(
    name="specbind",
    help="Compile REST endpoint spec files into Python client bindings.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

from specbind.commands.compile import compile_command  # noqa: E402
from specbind.commands.inspect import inspect_app  # noqa: E402
from specbind.commands.show import show_command  # noqa: E402

app.command("compile")(compile_command)
app.command("show")(show_command)
app.add_typer(inspect_app, name="inspect", help="Inspect a compiled spec directory.")

_EXIT_INTERRUPTED = 130


def _print_version(value: bool) -> None:
    if value:
        typer.echo(f"specbind {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False, "--version", callback=_print_version, is_eager=True, help="Show version and exit."
    ),
    json_output: bool = typer.Option(False, "--json", help="Write results as JSON."),
    plain_output: bool = typer.Option(False, "--plain", help="Write results as plain text."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable colour."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only report problems."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug messages."),
) -> None:
    """Compile Elasticsearch-style REST spec files into Python client bindings.

    ``--json`` and ``--plain`` pick the stdout format. Without either, the
    ``output.format`` of the global config applies (``auto`` by default).
    """
    from specbind.output import OutputManager, set_output

    output = OutputManager(
        format=_output_format(json_output, plain_output),
        no_color=no_color,
        quiet=quiet,
        verbose=verbose,
    )
    set_output(output)
    _route_logging(output.log_handler())

    ctx.ensure_object(dict)
    ctx.obj.update(verbose=verbose, quiet=quiet)


def _output_format(json_output: bool, plain_output: bool) -> OutputFormat:
    from specbind.config import load_global_config
    from specbind.exceptions import ConfigError
    from specbind.output import OutputFormat

    if json_output:
        return OutputFormat.JSON
    if plain_output:
        return OutputFormat.PLAIN
    try:
        return OutputFormat(load_global_config().output.format)
    except ConfigError as exc:
        from specbind.commands import exit_with

        raise exit_with(exc, exc.exit_code) from None


def _route_logging(handler: logging.Handler) -> None:
    """Make *handler* the only destination of the ``specbind`` logger tree.

    Handlers from an earlier invocation in the same process are dropped.
    """
    logger = logging.getLogger("specbind")
    for stale in list(logger.handlers):
        logger.removeHandler(stale)
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False


def _on_sigint(signum: int, frame: Any) -> None:
    sys.stderr.write("\nCancelled.\n")
    sys.exit(_EXIT_INTERRUPTED)


def _write_crash_log() -> Path:
    """Save the traceback being handled and return where it went."""
    from specbind.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_path = logs_dir / f"crash-{datetime.now():%Y%m%d-%H%M%S}.log"
    log_path.write_text(traceback.format_exc(), encoding="utf-8")
    return log_path


def main() -> None:
    """Console-script entry point. Always ends in :class:`SystemExit`."""
    from specbind.exceptions import SpecbindError
    from specbind.output import error

    signal.signal(signal.SIGINT, _on_sigint)
    try:
        app()
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(_EXIT_INTERRUPTED)
    except SpecbindError as exc:
        error(str(exc))
        sys.exit(exc.exit_code)
    except Exception:
        error(f"Unexpected error. Debug log: {_write_crash_log()}")
        sys.exit(EXIT_GENERIC_FAILURE)
