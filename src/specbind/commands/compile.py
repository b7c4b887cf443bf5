"""Compile command -- turn a spec directory into a bindings package.

``specbind compile`` resolves the compiler config (CLI flags, environment,
``specbind.json``, global config), walks the spec directory, reports every
file that failed, and writes the bindings for every file that compiled.

With ``--strict`` a single failed file aborts the run before anything is
written, and the command exits with
:data:`~specbind.exit_codes.EXIT_SPEC_ERROR`.
"""

from __future__ import annotations

from typing import Optional

import typer

from specbind.commands import exit_with
from specbind.exceptions import InvalidUsageError, SpecbindError
from specbind.output import (
    OutputFormat,
    debug,
    format_response,
    get_output,
    info,
    success,
    suggest,
    warning,
)


def compile_command(
    spec_dir: Optional[str] = typer.Argument(
        None, help="Directory of endpoint spec files."
    ),
    out: Optional[str] = typer.Option(
        None, "--out", "-o", help="Directory to write the bindings package into."
    ),
    strict: Optional[bool] = typer.Option(
        None, "--strict/--no-strict", help="Fail the run if any spec file fails."
    ),
    workers: Optional[int] = typer.Option(
        None, "--workers", "-w", min=1, help="Number of parser threads."
    ),
    exclude: Optional[list[str]] = typer.Option(
        None, "--exclude", "-x", help="Gitignore-style pattern to skip (repeatable)."
    ),
) -> None:
    """Compile every spec file under SPEC_DIR and write Python bindings.

    Example::

        specbind compile rest-api-spec/api --out es_bindings
        specbind compile --strict --exclude "_common.json"
    """
    from specbind.config import resolve_config
    from specbind.generator import write_bindings
    from specbind.parser import parse_all

    try:
        config = resolve_config(
            cli_spec_dir=spec_dir,
            cli_out_dir=out,
            cli_workers=workers,
            cli_strict=strict,
            cli_exclude=exclude,
        )
        if config.spec_dir is None:
            raise InvalidUsageError(
                "No spec directory given. Pass SPEC_DIR, set SPECBIND_SPEC_DIR, "
                "or add 'spec_dir' to specbind.json."
            )
        if config.out_dir is None:
            raise InvalidUsageError(
                "No output directory given. Pass --out, set SPECBIND_OUT_DIR, "
                "or add 'out_dir' to specbind.json."
            )

        debug(f"Compiling {config.spec_dir} with {config.workers} worker(s)")
        result = parse_all(config.spec_dir, config)

        for err in result.errors:
            warning(f"{err.file}: {err.message}")

        if config.strict:
            result.raise_for_errors()

        written = write_bindings(result.registry, config.out_dir)
    except SpecbindError as exc:
        raise exit_with(exc, exc.exit_code) from None

    if get_output().format == OutputFormat.JSON:
        format_response({
            "spec_dir": config.spec_dir,
            "out_dir": config.out_dir,
            "endpoints": result.registry.names(),
            "files": [str(path) for path in written],
            "errors": [
                {"file": err.file, "kind": err.kind, "message": err.message}
                for err in result.errors
            ],
        })
        return

    count = len(result.registry)
    if result.errors:
        info(f"{len(result.errors)} spec file(s) skipped.")
        suggest(f"Run: specbind inspect errors {config.spec_dir}")
    success(f"Compiled {count} endpoint(s) into {config.out_dir}")
