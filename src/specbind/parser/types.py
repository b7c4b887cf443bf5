"""Resolve textual type names into :data:`~specbind.models.ValueType` nodes.

Type names are exact keywords, so resolution is a single table lookup with a
fallback: any name the table does not know becomes
:class:`~specbind.models.OtherType` carrying the raw name, which lets newer
spec revisions introduce new primitive kinds without breaking compilation.

The single public function is :func:`resolve_type`.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Optional

from specbind.exceptions import TypeMismatchError
from specbind.models import (
    BoolType,
    EnumType,
    ListType,
    NumberKind,
    NumberType,
    OtherType,
    StrType,
    TimeType,
    ValueType,
)

_TYPE_TABLE: dict[str, ValueType] = {
    "string": StrType(),
    "boolean": BoolType(),
    "time": TimeType(),
    "list": ListType(),
    "number": NumberType(number_kind=NumberKind.LONG),
    "long": NumberType(number_kind=NumberKind.LONG),
    "integer": NumberType(number_kind=NumberKind.INT),
    "short": NumberType(number_kind=NumberKind.SHORT),
    "byte": NumberType(number_kind=NumberKind.BYTE),
    "float": NumberType(number_kind=NumberKind.FLOAT),
    "double": NumberType(number_kind=NumberKind.DOUBLE),
}

ENUM_TYPE_NAME = "enum"


def resolve_type(name: str, options: Optional[Sequence[str]] = None) -> ValueType:
    """Map a type name (and enum options) to a typed node.

    Args:
        name: The type keyword from the spec, e.g. ``"string"`` or ``"long"``.
        options: Enumeration options, consulted only when *name* is
            ``"enum"``. Order and contents are preserved exactly.

    Returns:
        The resolved type. Unknown names resolve to
        ``OtherType(raw_name=name)``.

    Raises:
        TypeMismatchError: If *name* is ``"enum"`` and no options (or an
            empty list) were supplied.

    Example::

        >>> resolve_type("number") == resolve_type("long")
        True
        >>> resolve_type("stuff")
        OtherType(kind='other', raw_name='stuff')
    """
    if name == ENUM_TYPE_NAME:
        if not options:
            raise TypeMismatchError("enum", "no options", "enum types must declare options")
        return EnumType(options=tuple(options))
    resolved = _TYPE_TABLE.get(name)
    if resolved is None:
        return OtherType(raw_name=name)
    return resolved
