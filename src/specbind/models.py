"""Canonical models shared across all specbind modules.

This is the single source of truth for data shapes in the project. The models
fall into three groups:

**Intermediate representation** -- produced by the parser and consumed by the
generator:
    :class:`HttpVerb`, :class:`NumberKind`, the type variants
    (:class:`StrType` ... :class:`OtherType`, united as :data:`ValueType`),
    the default-value variants (:class:`StrDefault` ... :class:`ListDefault`,
    united as :data:`DefaultValue`), :class:`Param`, :class:`PathTemplate`,
    :class:`BodySchema`, :class:`Endpoint` and :class:`Registry`.

**Pipeline results** -- :class:`FileError`, :class:`WalkResult` and
:class:`Binding`.

**Configuration models** -- serialised as JSON in the user's config directory
or the project's ``specbind.json``: :class:`CompilerConfig`,
:class:`OutputConfig` and :class:`GlobalConfig`.

The IR models use Pydantic v2 with ``frozen=True``: they are built once by the
assembler and never modified afterwards.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from specbind.exceptions import (
    CompileError,
    DuplicateEndpointError,
    SpecError,
    TypeMismatchError,
)


_FROZEN = ConfigDict(frozen=True)


# --- Verbs and number kinds ---


class HttpVerb(str, enum.Enum):
    """HTTP methods understood by the compiler.

    Declaration order is the canonical emission order.
    """

    HEAD = "HEAD"
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"

    @property
    def rank(self) -> int:
        """Position of the verb in the canonical emission order."""
        return _VERB_ORDER[self]


_VERB_ORDER: dict[HttpVerb, int] = {verb: index for index, verb in enumerate(HttpVerb)}


class NumberKind(str, enum.Enum):
    """Numeric subkinds. ``number`` and ``long`` both resolve to :attr:`LONG`."""

    LONG = "long"
    INT = "integer"
    SHORT = "short"
    BYTE = "byte"
    FLOAT = "float"
    DOUBLE = "double"

    @property
    def is_integral(self) -> bool:
        return self not in (NumberKind.FLOAT, NumberKind.DOUBLE)


# Signed ranges for the integral kinds.
_INT_BOUNDS: dict[NumberKind, tuple[int, int]] = {
    NumberKind.LONG: (-(2**63), 2**63 - 1),
    NumberKind.INT: (-(2**31), 2**31 - 1),
    NumberKind.SHORT: (-(2**15), 2**15 - 1),
    NumberKind.BYTE: (-(2**7), 2**7 - 1),
}


# --- Types ---


class StrType(BaseModel):
    """A free-form string."""

    model_config = _FROZEN

    kind: Literal["string"] = "string"

    @property
    def label(self) -> str:
        return "string"


class BoolType(BaseModel):
    """A boolean flag."""

    model_config = _FROZEN

    kind: Literal["boolean"] = "boolean"

    @property
    def label(self) -> str:
        return "boolean"


class TimeType(BaseModel):
    """A time unit string such as ``1m`` or ``30s``."""

    model_config = _FROZEN

    kind: Literal["time"] = "time"

    @property
    def label(self) -> str:
        return "time"


class ListType(BaseModel):
    """A list of strings (sent as a comma-separated value by the transport)."""

    model_config = _FROZEN

    kind: Literal["list"] = "list"

    @property
    def label(self) -> str:
        return "list"


class NumberType(BaseModel):
    """A number of a specific :class:`NumberKind`."""

    model_config = _FROZEN

    kind: Literal["number"] = "number"
    number_kind: NumberKind

    @property
    def label(self) -> str:
        return f"number({self.number_kind.value})"


class EnumType(BaseModel):
    """One of a fixed, ordered set of string options."""

    model_config = _FROZEN

    kind: Literal["enum"] = "enum"
    options: tuple[str, ...] = Field(min_length=1)

    @property
    def label(self) -> str:
        return "enum[" + "|".join(self.options) + "]"


class OtherType(BaseModel):
    """Any type name the compiler does not recognise, kept verbatim."""

    model_config = _FROZEN

    kind: Literal["other"] = "other"
    raw_name: str

    @property
    def label(self) -> str:
        return f"other({self.raw_name})"


ValueType = Annotated[
    Union[StrType, BoolType, TimeType, ListType, NumberType, EnumType, OtherType],
    Field(discriminator="kind"),
]
"""Tagged union of every type a parameter or path part can have."""


# --- Default values ---


class StrDefault(BaseModel):
    model_config = ConfigDict(frozen=True, strict=True)

    kind: Literal["str"] = "str"
    value: str


class BoolDefault(BaseModel):
    model_config = ConfigDict(frozen=True, strict=True)

    kind: Literal["bool"] = "bool"
    value: bool


class IntDefault(BaseModel):
    model_config = ConfigDict(frozen=True, strict=True)

    kind: Literal["int"] = "int"
    value: int


class FloatDefault(BaseModel):
    model_config = ConfigDict(frozen=True, strict=True)

    kind: Literal["float"] = "float"
    value: float


class ListDefault(BaseModel):
    model_config = ConfigDict(frozen=True, strict=True)

    kind: Literal["list"] = "list"
    value: tuple[str, ...]


DefaultValue = Annotated[
    Union[StrDefault, BoolDefault, IntDefault, FloatDefault, ListDefault],
    Field(discriminator="kind"),
]
"""Tagged union of the primitive default values a spec can declare."""

# Python type that each default tag reads back as.
_DEFAULT_PY_TYPES: dict[str, tuple[type, ...]] = {
    "str": (str,),
    "bool": (bool,),
    "int": (int,),
    "float": (float,),
    "list": (list, tuple),
}


def _json_kind(value: Any) -> str:
    """Name the JSON kind of *value* for error messages."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "float"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "list"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def _wrap_list(value: Any, expected: str) -> ListDefault:
    if isinstance(value, str):
        return ListDefault(value=(value,))
    if isinstance(value, (list, tuple)) and all(isinstance(v, str) for v in value):
        return ListDefault(value=tuple(value))
    raise TypeMismatchError(expected, _json_kind(value))


def wrap_default(value_type: ValueType, value: Any) -> DefaultValue:
    """Wrap a raw default *value* in the tag that matches *value_type*.

    Args:
        value_type: The declared type of the owning parameter.
        value: The raw value as decoded from the document.

    Returns:
        The matching :data:`DefaultValue` variant.

    Raises:
        TypeMismatchError: If *value_type* cannot represent *value*.
    """
    expected = value_type.label

    if isinstance(value_type, (StrType, TimeType)):
        if isinstance(value, str):
            return StrDefault(value=value)
        raise TypeMismatchError(expected, _json_kind(value))

    if isinstance(value_type, EnumType):
        if not isinstance(value, str):
            raise TypeMismatchError(expected, _json_kind(value))
        if value not in value_type.options:
            raise TypeMismatchError(expected, repr(value), "not one of the options")
        return StrDefault(value=value)

    if isinstance(value_type, BoolType):
        if isinstance(value, bool):
            return BoolDefault(value=value)
        raise TypeMismatchError(expected, _json_kind(value))

    if isinstance(value_type, ListType):
        return _wrap_list(value, expected)

    if isinstance(value_type, NumberType):
        # bool is a subclass of int; a flag is never a number here.
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise TypeMismatchError(expected, _json_kind(value))
        kind = value_type.number_kind
        if not kind.is_integral:
            return FloatDefault(value=float(value))
        if isinstance(value, float):
            if not value.is_integer():
                raise TypeMismatchError(expected, "float")
            value = int(value)
        low, high = _INT_BOUNDS[kind]
        if not low <= value <= high:
            raise TypeMismatchError(expected, str(value), f"outside {low}..{high}")
        return IntDefault(value=value)

    # OtherType: tag by the raw value's own kind.
    if isinstance(value, bool):
        return BoolDefault(value=value)
    if isinstance(value, int):
        return IntDefault(value=value)
    if isinstance(value, float):
        return FloatDefault(value=value)
    if isinstance(value, str):
        return StrDefault(value=value)
    return _wrap_list(value, expected)


# --- Params ---


class Param(BaseModel):
    """A named, typed, optionally defaulted input to an endpoint.

    Instances are built once during endpoint assembly and are immutable
    afterwards. The name lives in the owning :class:`Endpoint`'s ``params``
    mapping, not on the param itself.

    Prefer the constructors over calling ``Param(...)`` directly; they check
    that the default fits the declared type::

        Param.string(False, "op1")
        Param.boolean(False, False)
        Param.number(NumberKind.INT, True)
        Param.enumeration(["and", "or"], default="or")
    """

    model_config = _FROZEN

    value_type: ValueType
    required: bool = False
    default: Optional[DefaultValue] = None
    description: Optional[str] = None

    @classmethod
    def of(
        cls,
        value_type: ValueType,
        required: bool = False,
        default: Any = None,
        description: Optional[str] = None,
    ) -> Param:
        """Build a param of any type, wrapping *default* in the matching tag.

        Raises:
            TypeMismatchError: If *value_type* cannot represent *default*.
        """
        wrapped = None if default is None else wrap_default(value_type, default)
        return cls(
            value_type=value_type,
            required=required,
            default=wrapped,
            description=description,
        )

    @classmethod
    def string(cls, required: bool = False, default: Optional[str] = None, description: Optional[str] = None) -> Param:
        return cls.of(StrType(), required, default, description)

    @classmethod
    def boolean(cls, required: bool = False, default: Optional[bool] = None, description: Optional[str] = None) -> Param:
        return cls.of(BoolType(), required, default, description)

    @classmethod
    def time(cls, required: bool = False, default: Optional[str] = None, description: Optional[str] = None) -> Param:
        return cls.of(TimeType(), required, default, description)

    @classmethod
    def sequence(cls, required: bool = False, default: Any = None, description: Optional[str] = None) -> Param:
        return cls.of(ListType(), required, default, description)

    @classmethod
    def number(
        cls,
        kind: NumberKind,
        required: bool = False,
        default: Union[int, float, None] = None,
        description: Optional[str] = None,
    ) -> Param:
        return cls.of(NumberType(number_kind=kind), required, default, description)

    @classmethod
    def enumeration(
        cls,
        options: Iterable[str],
        required: bool = False,
        default: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Param:
        return cls.of(EnumType(options=tuple(options)), required, default, description)

    @classmethod
    def other(cls, raw_name: str, required: bool = False, default: Any = None, description: Optional[str] = None) -> Param:
        return cls.of(OtherType(raw_name=raw_name), required, default, description)

    def get_default(self, as_type: type) -> Any:
        """Read the default value as *as_type*.

        Args:
            as_type: The Python type the caller expects: ``str``, ``bool``,
                ``int``, ``float``, ``list`` or ``tuple``.

        Returns:
            ``None`` when no default was declared, otherwise the value.
            List defaults come back as a ``list`` or ``tuple`` to match
            *as_type*.

        Raises:
            TypeMismatchError: If the stored tag does not match *as_type*.
        """
        if self.default is None:
            return None
        accepted = _DEFAULT_PY_TYPES[self.default.kind]
        if as_type not in accepted:
            raise TypeMismatchError(as_type.__name__, self.default.kind)
        if as_type is list:
            return list(self.default.value)
        return self.default.value


# --- Paths and bodies ---


class LiteralSegment(BaseModel):
    """Fixed text inside a path template."""

    model_config = _FROZEN

    kind: Literal["literal"] = "literal"
    text: str


class PartSegment(BaseModel):
    """A named, typed placeholder inside a path template (``{index}``)."""

    model_config = _FROZEN

    kind: Literal["part"] = "part"
    name: str
    value_type: ValueType
    description: Optional[str] = None


PathSegment = Annotated[Union[LiteralSegment, PartSegment], Field(discriminator="kind")]


class PathTemplate(BaseModel):
    """A URL path template split into literal and part segments.

    ``/{index}/_bulk`` becomes ``[Literal("/"), Part("index"), Literal("/_bulk")]``.
    """

    model_config = _FROZEN

    raw: str
    segments: tuple[PathSegment, ...] = ()

    @property
    def parts(self) -> list[PartSegment]:
        """Named parts in the order they appear in the template."""
        return [seg for seg in self.segments if isinstance(seg, PartSegment)]


class BodySchema(BaseModel):
    """Request body descriptor for an endpoint."""

    model_config = _FROZEN

    required: bool = False
    description: Optional[str] = None
    serialize: Optional[str] = Field(
        default=None, description="Body serialisation hint, e.g. 'bulk' for NDJSON"
    )


class Endpoint(BaseModel):
    """Compiled representation of one API endpoint.

    ``name`` may be ``None`` straight out of the assembler when the document
    does not carry one; the directory walker fills it from the file identity
    before the endpoint enters a :class:`Registry`.
    """

    model_config = _FROZEN

    name: Optional[str] = None
    documentation: Optional[str] = None
    verbs: frozenset[HttpVerb]
    url_paths: tuple[PathTemplate, ...]
    params: dict[str, Param] = Field(default_factory=dict)
    body: Optional[BodySchema] = None

    def sorted_verbs(self) -> list[HttpVerb]:
        """The endpoint's verbs in canonical order."""
        return sorted(self.verbs, key=lambda verb: verb.rank)


class Registry(Mapping[str, Endpoint]):
    """Read-only, name-keyed collection of compiled endpoints.

    Iteration yields names in lexicographic order, the same as :meth:`names`.
    """

    def __init__(self, endpoints: Optional[Mapping[str, Endpoint]] = None) -> None:
        self._endpoints: Mapping[str, Endpoint] = MappingProxyType(dict(endpoints or {}))

    @classmethod
    def from_endpoints(cls, endpoints: Iterable[Endpoint]) -> Registry:
        """Build a registry from named endpoints.

        Raises:
            ValueError: If an endpoint has no name.
            DuplicateEndpointError: If two endpoints share a name.
        """
        collected: dict[str, Endpoint] = {}
        for endpoint in endpoints:
            if endpoint.name is None:
                raise ValueError("Registry entries must have a name")
            if endpoint.name in collected:
                raise DuplicateEndpointError(endpoint.name)
            collected[endpoint.name] = endpoint
        return cls(collected)

    def __getitem__(self, name: str) -> Endpoint:
        return self._endpoints[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())

    def __len__(self) -> int:
        return len(self._endpoints)

    def __repr__(self) -> str:
        return f"Registry({self.names()!r})"

    def names(self) -> list[str]:
        """Endpoint names in lexicographic order."""
        return sorted(self._endpoints)


# --- Pipeline results ---


@dataclass(frozen=True)
class FileError:
    """A spec file that could not be compiled.

    Attributes:
        file: File identity, the POSIX path relative to the spec directory.
        error: The error raised while reading or assembling the file.
    """

    file: str
    error: SpecError

    @property
    def kind(self) -> str:
        return type(self.error).__name__

    @property
    def message(self) -> str:
        return str(self.error)


@dataclass(frozen=True)
class WalkResult:
    """Outcome of compiling a spec directory.

    Holds the registry of every file that compiled and the errors of every
    file that did not. Callers wanting all-or-nothing semantics call
    :meth:`raise_for_errors`.
    """

    registry: Registry
    errors: list[FileError] = field(default_factory=list)
    files: dict[str, str] = field(default_factory=dict)  # endpoint name -> file

    @property
    def ok(self) -> bool:
        return not self.errors

    def raise_for_errors(self) -> None:
        """Raise :class:`~specbind.exceptions.CompileError` if any file failed."""
        if self.errors:
            raise CompileError(self.errors)


class Binding(BaseModel):
    """Generated source for one (endpoint, verb) pair."""

    model_config = _FROZEN

    endpoint: str
    verb: HttpVerb
    function_names: tuple[str, ...] = ()
    source: str


# --- Configuration ---


DEFAULT_INCLUDE = ["**/*.json", "**/*.yaml", "**/*.yml"]


class CompilerConfig(BaseModel):
    """Settings for a compile run.

    Built by :func:`~specbind.config.resolve_config` from defaults, the global
    config, the project's ``specbind.json``, environment variables and CLI
    flags, in increasing order of precedence.
    """

    spec_dir: Optional[str] = Field(default=None, description="Directory of spec files")
    out_dir: Optional[str] = Field(default=None, description="Where to write bindings")
    include: list[str] = Field(
        default_factory=lambda: list(DEFAULT_INCLUDE),
        description="Gitignore-style patterns selecting spec files",
    )
    exclude: list[str] = Field(
        default_factory=list, description="Gitignore-style patterns to skip"
    )
    workers: int = Field(default=4, ge=1, description="Parser threads")
    strict: bool = Field(
        default=False, description="Fail the whole run if any file fails"
    )


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: Literal["auto", "json", "plain", "rich"] = Field(
        default="auto", description="Output format used when no flag is given"
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/specbind/config.json``."""

    compiler: CompilerConfig = Field(default_factory=CompilerConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
