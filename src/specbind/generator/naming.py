"""Turn endpoint, part, and param names into Python source fragments.

This module bridges spec vocabulary and generated code:

* **Identifiers** -- :func:`sanitize_identifier` converts spec names
  (``_source_include``, ``if_seq_no``, ``petId``) into valid snake_case
  Python identifiers; :func:`module_name`, :func:`class_name` and
  :func:`function_name` derive the generated module, options class and
  binding function names.
* **Annotations** -- :func:`python_annotation` maps a resolved
  :data:`~specbind.models.ValueType` to the annotation text used in the
  generated signature: ``string`` and ``time`` become ``str``, integral
  numbers ``int``, ``float``/``double`` ``float``, ``list``
  ``Sequence[str]``, ``enum`` a ``Literal[...]``, and anything unknown ``Any``.
* **Literals** -- :func:`python_literal` renders a
  :data:`~specbind.models.DefaultValue` as Python source.
"""

from __future__ import annotations

import json
import keyword
import math
import re
from collections.abc import Iterable

from specbind.models import (
    BoolType,
    DefaultValue,
    EnumType,
    HttpVerb,
    ListType,
    NumberType,
    StrType,
    TimeType,
    ValueType,
)


# ---------------------------------------------------------------------------
# Identifiers
# ---------------------------------------------------------------------------

# Matches any character that is not alphanumeric or underscore.
_INVALID_IDENT_RE = re.compile(r"[^a-zA-Z0-9_]")


def sanitize_identifier(name: str) -> str:
    """Convert a spec name to a valid Python identifier.

    Applies the following transformations in order:

    1. CamelCase boundaries are split with underscores (``petId`` becomes
       ``pet_id``).
    2. The string is lowercased.
    3. Hyphens and dots are replaced with underscores.
    4. Any remaining non-alphanumeric/non-underscore characters are replaced.
    5. Consecutive and leading/trailing underscores are collapsed.
    6. An empty result defaults to ``"param"``.
    7. A leading digit gets an underscore prefix.
    8. Python keywords get a trailing underscore per PEP 8 convention.

    Example::

        >>> sanitize_identifier("_source_include")
        'source_include'
        >>> sanitize_identifier("from")
        'from_'
    """
    result = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", name)
    result = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", result)
    result = result.lower()
    result = result.replace("-", "_").replace(".", "_")
    result = _INVALID_IDENT_RE.sub("_", result)
    result = re.sub(r"_+", "_", result).strip("_")
    if not result:
        result = "param"
    if result[0].isdigit():
        result = f"_{result}"
    if keyword.iskeyword(result):
        result = f"{result}_"
    return result


def unique_identifier(candidate: str, taken: set[str]) -> str:
    """Return *candidate*, or *candidate* with trailing underscores, not in *taken*.

    The chosen name is added to *taken*.
    """
    name = candidate
    while name in taken:
        name = f"{name}_"
    taken.add(name)
    return name


def module_name(endpoint_name: str) -> str:
    """Module name for an endpoint: ``indices.create`` -> ``indices_create``."""
    return sanitize_identifier(endpoint_name)


def class_name(endpoint_name: str) -> str:
    """Options class name for an endpoint: ``indices.create`` -> ``IndicesCreateParams``."""
    words = sanitize_identifier(endpoint_name).split("_")
    return "".join(word[:1].upper() + word[1:] for word in words if word) + "Params"


def function_name(verb: HttpVerb, part_names: Iterable[str]) -> str:
    """Binding function name: the verb, then each path part.

    Example::

        >>> function_name(HttpVerb.GET, ["index", "type"])
        'get_index_type'
        >>> function_name(HttpVerb.HEAD, [])
        'head'
    """
    pieces = [verb.value.lower()]
    pieces.extend(sanitize_identifier(part) for part in part_names)
    return "_".join(pieces)


# ---------------------------------------------------------------------------
# Annotations and literals
# ---------------------------------------------------------------------------


def python_annotation(value_type: ValueType) -> str:
    """Annotation text for a resolved type."""
    if isinstance(value_type, (StrType, TimeType)):
        return "str"
    if isinstance(value_type, BoolType):
        return "bool"
    if isinstance(value_type, ListType):
        return "Sequence[str]"
    if isinstance(value_type, NumberType):
        return "int" if value_type.number_kind.is_integral else "float"
    if isinstance(value_type, EnumType):
        options = ", ".join(json.dumps(opt) for opt in value_type.options)
        return f"Literal[{options}]"
    return "Any"


def typing_names(value_type: ValueType) -> set[str]:
    """Names from :mod:`typing` that :func:`python_annotation` output needs."""
    if isinstance(value_type, ListType):
        return {"Sequence"}
    if isinstance(value_type, EnumType):
        return {"Literal"}
    if python_annotation(value_type) == "Any":
        return {"Any"}
    return set()


def python_literal(default: DefaultValue) -> str:
    """Render a default value as a Python literal.

    List defaults become tuples so they are safe as dataclass defaults.
    """
    value = default.value
    if default.kind == "str":
        return json.dumps(value)
    if default.kind == "bool":
        return "True" if value else "False"
    if default.kind == "int":
        return str(value)
    if default.kind == "float":
        if not math.isfinite(value):
            return f'float("{value}")'
        return repr(value)
    items = [json.dumps(item) for item in value]
    if len(items) == 1:
        return f"({items[0]},)"
    return "(" + ", ".join(items) + ")"


def docstring_text(text: str) -> str:
    """Collapse whitespace and escape *text* for use inside a docstring."""
    text = " ".join(text.split())
    text = text.replace("\\", "\\\\").replace('"""', '\\"\\"\\"')
    # A trailing quote would merge with the closing delimiter.
    if text.endswith('"'):
        text = f"{text} "
    return text
