"""Built-in CLI sub-commands for specbind.

This package groups the Typer sub-command modules that form the CLI's
top-level command tree:

* :mod:`~specbind.commands.compile` -- compile a spec directory and write
  the bindings package.
* :mod:`~specbind.commands.inspect` -- list compiled endpoints or per-file
  errors for a spec directory.
* :mod:`~specbind.commands.show` -- print the generated module for a single
  spec file.

Each module either exports a :class:`typer.Typer` sub-application (for
multi-command groups like ``inspect``) or a plain callback function
registered directly on the root app (for single commands like ``compile``).
"""

from __future__ import annotations

from typing import Optional

import typer

from specbind.exceptions import InvalidUsageError
from specbind.models import CompilerConfig


def resolve_spec_dir(
    spec_dir: Optional[str],
    workers: Optional[int] = None,
    exclude: Optional[list[str]] = None,
) -> CompilerConfig:
    """Resolve the compiler config and require a spec directory.

    Raises:
        InvalidUsageError: If neither the argument nor any config layer
            names a spec directory.
    """
    from specbind.config import resolve_config

    config = resolve_config(cli_spec_dir=spec_dir, cli_workers=workers, cli_exclude=exclude)
    if config.spec_dir is None:
        raise InvalidUsageError(
            "No spec directory given. Pass SPEC_DIR, set SPECBIND_SPEC_DIR, "
            "or add 'spec_dir' to specbind.json."
        )
    return config


def exit_with(exc: Exception, code: int) -> typer.Exit:
    """Report *exc* on stderr and build the :class:`typer.Exit` to raise."""
    from specbind.output import error

    error(str(exc))
    return typer.Exit(code=code)
