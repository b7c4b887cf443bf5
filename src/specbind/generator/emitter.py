"""Emit Python client bindings from a compiled :class:`~specbind.models.Registry`.

This is the back end of the compiler. It consumes only the resolved AST (it
never calls the type or verb resolvers) and produces source text that a
transport object can execute.

Output shape for an endpoint ``search``::

    @dataclasses.dataclass(frozen=True)
    class SearchParams:
        q: Optional[str] = dataclasses.field(default=None, metadata={"wire": "q"})

    def get_index(transport: Transport, index: str, params: Optional[SearchParams] = None) -> Any:
        return transport.request("GET", "/{index}/_search", parts={"index": index}, params=params)

One function is emitted per URL path template and verb. Its name is the verb
followed by the path parts (``get_index_type``). Path parts become positional
arguments, query params travel in the endpoint's options dataclass, and a
``body`` argument is added when the verb carries a request body.

Ordering is total and independent of registry iteration order: endpoints are
sorted by name, verbs follow :class:`~specbind.models.HttpVerb` declaration
order, and path templates keep their declared order. Rendering uses the
Jinja2 templates under ``generator/templates/``.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Union

from jinja2 import Environment, FileSystemLoader, select_autoescape

from specbind import __version__
from specbind.generator.naming import (
    class_name,
    docstring_text,
    function_name,
    module_name,
    python_annotation,
    python_literal,
    sanitize_identifier,
    typing_names,
    unique_identifier,
)
from specbind.models import (
    Binding,
    BodySchema,
    Endpoint,
    HttpVerb,
    PathTemplate,
    Registry,
)

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "templates"
"""Path to the Jinja2 template directory (``generator/templates/``)."""

TRANSPORT_MODULE = "_transport"
"""Module (inside the generated package) holding the transport protocol."""

# Argument names every binding uses for itself.
_RESERVED_ARGS = frozenset({"transport", "params", "body"})

_BODY_VERBS = frozenset({HttpVerb.POST, HttpVerb.PUT, HttpVerb.DELETE})


def emit(registry: Registry) -> list[Binding]:
    """Emit one :class:`~specbind.models.Binding` per (endpoint, verb) pair.

    Args:
        registry: Compiled endpoints, as returned by
            :func:`~specbind.parser.walker.parse_all`.

    Returns:
        Bindings ordered by endpoint name, then canonical verb order. The
        same registry content always yields byte-identical output.
    """
    env = _create_jinja_env()
    bindings: list[Binding] = []
    for name in registry.names():
        bindings.extend(_emit_endpoint(env, registry[name]))
    logger.debug("Emitted %d binding(s) for %d endpoint(s)", len(bindings), len(registry))
    return bindings


def emit_params_class(endpoint: Endpoint) -> str:
    """Render the options dataclass for *endpoint*'s query params."""
    return _render_params(_create_jinja_env(), endpoint)


def render_module(endpoint: Endpoint, bindings: list[Binding]) -> str:
    """Render the full module text for one endpoint.

    Args:
        endpoint: The endpoint whose options class and docs head the module.
        bindings: The endpoint's bindings, as produced by :func:`emit`.
    """
    env = _create_jinja_env()
    return env.get_template("module.py.j2").render(
        endpoint_name=docstring_text(endpoint.name or ""),
        documentation=docstring_text(endpoint.documentation) if endpoint.documentation else None,
        version=__version__,
        typing_imports=sorted(_typing_imports(endpoint)),
        transport_module=TRANSPORT_MODULE,
        params_class=_render_params(env, endpoint),
        bindings=[binding.source.rstrip("\n") for binding in bindings],
    )


def render_package(registry: Registry) -> dict[str, str]:
    """Render every file of the bindings package.

    Returns:
        Mapping of file name to file text: the transport protocol module, one
        module per endpoint (sorted by endpoint name), and ``__init__.py``.
    """
    env = _create_jinja_env()
    by_endpoint: dict[str, list[Binding]] = {}
    for binding in emit(registry):
        by_endpoint.setdefault(binding.endpoint, []).append(binding)

    files: dict[str, str] = {
        f"{TRANSPORT_MODULE}.py": env.get_template("transport.py.j2").render(version=__version__),
    }
    taken = {TRANSPORT_MODULE, "__init__"}
    modules: list[tuple[str, str]] = []
    for name in registry.names():
        mod = unique_identifier(module_name(name), taken)
        files[f"{mod}.py"] = render_module(registry[name], by_endpoint.get(name, []))
        modules.append((mod, docstring_text(name)))

    files["__init__.py"] = env.get_template("package_init.py.j2").render(
        version=__version__,
        modules=modules,
    )
    return files


def write_bindings(registry: Registry, out_dir: Union[str, Path]) -> list[Path]:
    """Write the bindings package for *registry* into *out_dir*.

    Each file is written atomically. Existing files with other names are
    left untouched.

    Returns:
        The written paths, in :func:`render_package` order.
    """
    from specbind.config import _atomic_write

    out_path = Path(out_dir)
    out_path.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []
    for filename, text in render_package(registry).items():
        target = out_path / filename
        _atomic_write(target, text)
        written.append(target)
    logger.debug("Wrote %d file(s) to %s", len(written), out_path)
    return written


# ---------------------------------------------------------------------------
# Internals
# ---------------------------------------------------------------------------


def _create_jinja_env() -> Environment:
    """Create the Jinja2 environment for the binding templates.

    Autoescape is disabled for ``.py.j2`` templates, which produce Python
    rather than HTML. Block trimming and lstrip keep the templates readable.
    """
    return Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=select_autoescape(disabled_extensions=("py.j2",)),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


def accepts_body(verb: HttpVerb, body: BodySchema | None) -> bool:
    """Whether a binding for *verb* takes a request body.

    ``POST``, ``PUT`` and ``DELETE`` carry the body whenever the endpoint
    declares one. ``GET`` carries it only when it is required, since some
    APIs accept search bodies on ``GET``. ``HEAD`` never does.
    """
    if body is None:
        return False
    if verb in _BODY_VERBS:
        return True
    return verb == HttpVerb.GET and body.required


def _emit_endpoint(env: Environment, endpoint: Endpoint) -> list[Binding]:
    # The registry only ever holds assembled endpoints; these are invariants.
    assert endpoint.name is not None, "registry endpoint without a name"
    assert endpoint.verbs, f"endpoint {endpoint.name!r} has no verbs"
    assert endpoint.url_paths, f"endpoint {endpoint.name!r} has no paths"

    template = env.get_template("function.py.j2")
    params_cls = class_name(endpoint.name)
    params_required = any(param.required for param in endpoint.params.values())

    bindings: list[Binding] = []
    for verb in endpoint.sorted_verbs():
        taken: set[str] = set()
        names: list[str] = []
        chunks: list[str] = []
        for path in endpoint.url_paths:
            fn_name = _unique_function_name(verb, path, taken)
            context = _function_context(
                endpoint, verb, path, fn_name, params_cls, params_required
            )
            chunks.append(template.render(**context).rstrip("\n"))
            names.append(fn_name)
        bindings.append(
            Binding(
                endpoint=endpoint.name,
                verb=verb,
                function_names=tuple(names),
                source="\n\n\n".join(chunks) + "\n",
            )
        )
    return bindings


def _unique_function_name(verb: HttpVerb, path: PathTemplate, taken: set[str]) -> str:
    base = function_name(verb, [part.name for part in path.parts])
    name = base
    counter = 2
    while name in taken:
        name = f"{base}_{counter}"
        counter += 1
    taken.add(name)
    return name


def _function_context(
    endpoint: Endpoint,
    verb: HttpVerb,
    path: PathTemplate,
    fn_name: str,
    params_cls: str,
    params_required: bool,
) -> dict[str, Any]:
    """Assemble the template variables for one binding function."""
    taken = set(_RESERVED_ARGS)
    arguments = ["transport: Transport"]
    parts: list[tuple[str, str]] = []
    arg_docs: list[tuple[str, str]] = []

    for part in path.parts:
        py_name = unique_identifier(sanitize_identifier(part.name), taken)
        arguments.append(f"{py_name}: {python_annotation(part.value_type)}")
        parts.append((json.dumps(part.name), py_name))
        if part.description:
            arg_docs.append((py_name, docstring_text(part.description)))

    with_body = accepts_body(verb, endpoint.body)
    body = endpoint.body
    body_required = with_body and body is not None and body.required
    if body_required:
        arguments.append("body: Any")
    if params_required:
        arguments.append(f"params: {params_cls}")
    else:
        arguments.append(f"params: Optional[{params_cls}] = None")
    if with_body and not body_required:
        arguments.append("body: Any = None")

    if with_body and body is not None and body.description:
        arg_docs.append(("body", docstring_text(body.description)))

    call_kwargs: list[str] = []
    if parts:
        mapping = ", ".join(f"{wire}: {py}" for wire, py in parts)
        call_kwargs.append(f"parts={{{mapping}}}")
    call_kwargs.append("params=params")
    if with_body:
        call_kwargs.append("body=body")
        if body is not None and body.serialize:
            call_kwargs.append(f"serialize={json.dumps(body.serialize)}")

    return {
        "name": fn_name,
        "arguments": arguments,
        "summary": docstring_text(f"{verb.value} {path.raw}"),
        "arg_docs": arg_docs,
        "verb": json.dumps(verb.value),
        "path": json.dumps(path.raw),
        "call_kwargs": call_kwargs,
    }


def _render_params(env: Environment, endpoint: Endpoint) -> str:
    """Render the options dataclass; required fields come first."""
    assert endpoint.name is not None
    # Field names must not shadow the module the declarations call into.
    taken: set[str] = {"dataclasses"}
    required: list[dict[str, str]] = []
    optional: list[dict[str, str]] = []

    for wire in sorted(endpoint.params):
        param = endpoint.params[wire]
        py_name = unique_identifier(sanitize_identifier(wire), taken)
        annotation = python_annotation(param.value_type)
        metadata = f'metadata={{"wire": {json.dumps(wire)}}}'
        if param.required:
            declaration = f"{annotation} = dataclasses.field({metadata})"
        elif param.default is not None:
            default = python_literal(param.default)
            declaration = f"{annotation} = dataclasses.field(default={default}, {metadata})"
        else:
            if annotation != "Any":
                annotation = f"Optional[{annotation}]"
            declaration = f"{annotation} = dataclasses.field(default=None, {metadata})"
        entry = {
            "name": py_name,
            "declaration": declaration,
            "doc": docstring_text(param.description) if param.description else "",
        }
        (required if param.required else optional).append(entry)

    return env.get_template("params.py.j2").render(
        class_name=class_name(endpoint.name),
        endpoint_name=docstring_text(endpoint.name),
        fields=required + optional,
    ).rstrip("\n")


def _typing_imports(endpoint: Endpoint) -> set[str]:
    names = {"Any", "Optional"}
    for param in endpoint.params.values():
        names |= typing_names(param.value_type)
    for path in endpoint.url_paths:
        for part in path.parts:
            names |= typing_names(part.value_type)
    return names
