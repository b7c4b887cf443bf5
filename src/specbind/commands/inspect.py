"""Inspect commands -- examine what a spec directory compiles to.

Provides the ``specbind inspect`` sub-command group with read-only commands
that walk a spec directory without writing anything: the compiled endpoints
and the files that failed. Both present their data in table form (or JSON
with ``--json``).
"""

from __future__ import annotations

from typing import Optional

import typer

from specbind.commands import exit_with, resolve_spec_dir
from specbind.exceptions import SpecbindError
from specbind.models import Endpoint, WalkResult
from specbind.output import get_output, info


inspect_app = typer.Typer(no_args_is_help=True)


def _walk(spec_dir: Optional[str], exclude: Optional[list[str]]) -> WalkResult:
    """Resolve config and compile the spec directory, exiting on failure."""
    from specbind.parser import parse_all

    try:
        config = resolve_spec_dir(spec_dir, exclude=exclude)
        return parse_all(config.spec_dir, config)
    except SpecbindError as exc:
        raise exit_with(exc, exc.exit_code) from None


def _body_label(endpoint: Endpoint) -> str:
    if endpoint.body is None:
        return "-"
    label = "required" if endpoint.body.required else "optional"
    if endpoint.body.serialize:
        label = f"{label} ({endpoint.body.serialize})"
    return label


@inspect_app.command("endpoints")
def inspect_endpoints(
    spec_dir: Optional[str] = typer.Argument(
        None, help="Directory of endpoint spec files."
    ),
    exclude: Optional[list[str]] = typer.Option(
        None, "--exclude", "-x", help="Gitignore-style pattern to skip (repeatable)."
    ),
) -> None:
    """List every endpoint that compiles.

    Displays a table with each endpoint's name, verbs, path templates,
    query params and body requirement.

    Example::

        specbind inspect endpoints rest-api-spec/api
    """
    result = _walk(spec_dir, exclude)

    if not result.registry:
        info("No endpoints compiled.")
        return

    headers = ["Endpoint", "Verbs", "Paths", "Params", "Body", "File"]
    rows: list[list[str]] = []
    for name in result.registry.names():
        endpoint = result.registry[name]
        rows.append([
            name,
            ", ".join(verb.value for verb in endpoint.sorted_verbs()),
            " ".join(path.raw for path in endpoint.url_paths),
            ", ".join(sorted(endpoint.params)) or "-",
            _body_label(endpoint),
            result.files.get(name, "-"),
        ])

    get_output().print_table(headers, rows, title=f"Endpoints ({len(rows)})")


@inspect_app.command("errors")
def inspect_errors(
    spec_dir: Optional[str] = typer.Argument(
        None, help="Directory of endpoint spec files."
    ),
    exclude: Optional[list[str]] = typer.Option(
        None, "--exclude", "-x", help="Gitignore-style pattern to skip (repeatable)."
    ),
) -> None:
    """List every spec file that fails to compile, with the reason.

    Example::

        specbind inspect errors rest-api-spec/api
    """
    result = _walk(spec_dir, exclude)

    if result.ok:
        info("No errors.")
        return

    headers = ["File", "Error", "Message"]
    rows = [[err.file, err.kind, err.message] for err in result.errors]
    get_output().print_table(headers, rows, title=f"Errors ({len(rows)})")
