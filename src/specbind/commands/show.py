"""Show command -- print the bindings generated for one spec file.

``specbind show`` compiles a single file exactly as ``compile`` would (the
endpoint name falls back to the file stem) and writes the resulting module to
stdout, optionally restricted to one HTTP verb. Nothing is written to disk.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from specbind.commands import exit_with
from specbind.exceptions import InvalidUsageError, SpecbindError, UnknownVerbError
from specbind.exit_codes import EXIT_INVALID_USAGE
from specbind.output import get_output


def show_command(
    spec_file: str = typer.Argument(..., help="Path to one endpoint spec file."),
    verb: Optional[str] = typer.Option(
        None, "--verb", help="Only show bindings for this HTTP verb (e.g. GET)."
    ),
) -> None:
    """Print the generated module for SPEC_FILE.

    Example::

        specbind show rest-api-spec/api/bulk.json
        specbind show search.json --verb GET
    """
    from specbind.generator import emit, render_module
    from specbind.models import Registry
    from specbind.parser import assemble, read_spec_file, resolve_verb
    from specbind.parser.walker import endpoint_name_for

    try:
        selected = resolve_verb(verb.upper()) if verb is not None else None
    except UnknownVerbError as exc:
        raise exit_with(exc, EXIT_INVALID_USAGE) from None

    try:
        endpoint = assemble(read_spec_file(spec_file))
        if endpoint.name is None:
            endpoint = endpoint.model_copy(update={"name": endpoint_name_for(Path(spec_file).name)})
        if selected is not None and selected not in endpoint.verbs:
            raise InvalidUsageError(
                f"Endpoint {endpoint.name!r} does not support {selected.value}"
            )
        bindings = emit(Registry({endpoint.name: endpoint}))
    except SpecbindError as exc:
        raise exit_with(exc, exc.exit_code) from None

    if selected is not None:
        bindings = [binding for binding in bindings if binding.verb == selected]

    get_output().print_source(render_module(endpoint, bindings))
