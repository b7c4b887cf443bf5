"""Spec parser -- resolve types and verbs, assemble endpoints, and walk directories.

This sub-package is responsible for the first half of the specbind pipeline:
turning a directory of endpoint spec documents (JSON or YAML) into a
:class:`~specbind.models.Registry` that the generator can consume.

Typical usage::

    from specbind.parser import parse_all

    result = parse_all("rest-api-spec/api")
    for err in result.errors:
        print(f"{err.file}: {err.message}")
    registry = result.registry

Sub-modules:

* :mod:`~specbind.parser.types` -- Type-name lookup table.
* :mod:`~specbind.parser.verbs` -- HTTP method token resolution.
* :mod:`~specbind.parser.loader` -- Decode bytes, text, streams or files
  into document dicts.
* :mod:`~specbind.parser.assembler` -- Build one
  :class:`~specbind.models.Endpoint` from one document.
* :mod:`~specbind.parser.walker` -- Concurrent directory compilation with
  per-file error collection.
"""

from specbind.parser.assembler import assemble, parse_one
from specbind.parser.loader import load_document, read_spec_file
from specbind.parser.types import resolve_type
from specbind.parser.verbs import resolve_verb
from specbind.parser.walker import parse_all

__all__ = [
    "assemble",
    "load_document",
    "parse_all",
    "parse_one",
    "read_spec_file",
    "resolve_type",
    "resolve_verb",
]
