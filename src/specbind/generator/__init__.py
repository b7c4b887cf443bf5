"""Binding generator -- emit Python client source from a compiled registry.

This sub-package is responsible for the second half of the specbind pipeline:
taking a :class:`~specbind.models.Registry` (produced by the parser) and
rendering a package of Python modules, one per endpoint, whose functions call
a transport object.

Typical usage::

    from specbind.generator import emit, write_bindings

    bindings = emit(registry)            # in-memory, one per (endpoint, verb)
    write_bindings(registry, "es_api")   # full package on disk

Sub-modules:

* :mod:`~specbind.generator.naming` -- Identifier sanitisation, annotation
  and literal rendering.
* :mod:`~specbind.generator.emitter` -- Deterministic emission through the
  Jinja2 templates in ``generator/templates/``.
"""

from specbind.generator.emitter import (
    emit,
    emit_params_class,
    render_module,
    render_package,
    write_bindings,
)

__all__ = [
    "emit",
    "emit_params_class",
    "render_module",
    "render_package",
    "write_bindings",
]
