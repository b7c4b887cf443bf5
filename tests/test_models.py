"""Tests for specbind.models -- param defaults, registry, and pipeline results."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from specbind.exceptions import DuplicateEndpointError, TypeMismatchError
from specbind.models import (
    BoolDefault,
    CompilerConfig,
    Endpoint,
    EnumType,
    FloatDefault,
    HttpVerb,
    IntDefault,
    ListDefault,
    NumberKind,
    OtherType,
    Param,
    PathTemplate,
    Registry,
    StrDefault,
    StrType,
)


def _endpoint(name: str | None) -> Endpoint:
    return Endpoint(
        name=name,
        verbs=frozenset({HttpVerb.GET}),
        url_paths=(PathTemplate(raw="/"),),
    )


class TestParamDefaults:
    def test_string_default(self) -> None:
        param = Param.string(False, "op1")
        assert param.get_default(str) == "op1"

    def test_string_default_read_as_bool(self) -> None:
        with pytest.raises(TypeMismatchError) as exc_info:
            Param.string(False, "op1").get_default(bool)
        assert exc_info.value.expected == "bool"
        assert exc_info.value.actual == "str"

    def test_boolean_false_default(self) -> None:
        assert Param.boolean(False, False).get_default(bool) is False

    def test_no_default(self) -> None:
        param = Param.string(True)
        assert param.required
        assert param.get_default(str) is None
        assert param.get_default(bool) is None

    def test_time_default(self) -> None:
        assert Param.time(default="1m").get_default(str) == "1m"

    def test_description_kept(self) -> None:
        assert Param.string(description="Query").description == "Query"


class TestNumberDefaults:
    def test_long_default(self) -> None:
        param = Param.number(NumberKind.LONG, default=10)
        assert param.default == IntDefault(value=10)
        assert param.get_default(int) == 10

    def test_int_read_as_float_fails(self) -> None:
        with pytest.raises(TypeMismatchError):
            Param.number(NumberKind.INT, default=1).get_default(float)

    def test_float_kind_widens_integers(self) -> None:
        param = Param.number(NumberKind.DOUBLE, default=1)
        assert param.default == FloatDefault(value=1.0)
        assert isinstance(param.get_default(float), float)

    def test_integral_float_accepted(self) -> None:
        assert Param.number(NumberKind.INT, default=5.0).get_default(int) == 5

    def test_fractional_float_rejected(self) -> None:
        with pytest.raises(TypeMismatchError):
            Param.number(NumberKind.INT, default=1.5)

    @pytest.mark.parametrize(
        ("kind", "value"),
        [
            (NumberKind.BYTE, 128),
            (NumberKind.BYTE, -129),
            (NumberKind.SHORT, 2**15),
            (NumberKind.INT, 2**31),
            (NumberKind.LONG, 2**63),
        ],
    )
    def test_out_of_range(self, kind: NumberKind, value: int) -> None:
        with pytest.raises(TypeMismatchError):
            Param.number(kind, default=value)

    def test_bool_is_not_a_number(self) -> None:
        with pytest.raises(TypeMismatchError):
            Param.number(NumberKind.LONG, default=True)

    def test_string_is_not_a_number(self) -> None:
        with pytest.raises(TypeMismatchError):
            Param.number(NumberKind.LONG, default="10")


class TestOtherDefaults:
    def test_enum_default_in_options(self) -> None:
        param = Param.enumeration(["AND", "OR"], default="OR")
        assert param.value_type == EnumType(options=("AND", "OR"))
        assert param.get_default(str) == "OR"

    def test_enum_default_not_in_options(self) -> None:
        with pytest.raises(TypeMismatchError):
            Param.enumeration(["AND", "OR"], default="XOR")

    def test_bool_type_rejects_string(self) -> None:
        with pytest.raises(TypeMismatchError):
            Param.boolean(default="true")  # type: ignore[arg-type]

    def test_string_type_rejects_number(self) -> None:
        with pytest.raises(TypeMismatchError):
            Param.of(StrType(), default=3)

    def test_list_default_from_string(self) -> None:
        param = Param.sequence(default="_all")
        assert param.default == ListDefault(value=("_all",))
        assert param.get_default(list) == ["_all"]
        assert param.get_default(tuple) == ("_all",)

    def test_list_default_from_list(self) -> None:
        assert Param.sequence(default=["a", "b"]).get_default(list) == ["a", "b"]

    def test_list_default_rejects_numbers(self) -> None:
        with pytest.raises(TypeMismatchError):
            Param.sequence(default=[1, 2])

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("x", StrDefault(value="x")),
            (True, BoolDefault(value=True)),
            (3, IntDefault(value=3)),
            (1.5, FloatDefault(value=1.5)),
            (["a"], ListDefault(value=("a",))),
        ],
    )
    def test_other_type_tags_by_value(self, value, expected) -> None:
        param = Param.other("geo_point", default=value)
        assert param.value_type == OtherType(raw_name="geo_point")
        assert param.default == expected

    def test_other_type_rejects_objects(self) -> None:
        with pytest.raises(TypeMismatchError):
            Param.other("geo_point", default={"lat": 1})


class TestImmutability:
    def test_param_is_frozen(self) -> None:
        param = Param.string()
        with pytest.raises(ValidationError):
            param.required = True  # type: ignore[misc]

    def test_enum_requires_options(self) -> None:
        with pytest.raises(ValidationError):
            EnumType(options=())


class TestRegistry:
    def test_mapping_protocol(self) -> None:
        registry = Registry.from_endpoints([_endpoint("b"), _endpoint("a")])
        assert len(registry) == 2
        assert "a" in registry
        assert registry["a"].name == "a"
        assert registry.names() == ["a", "b"]
        assert sorted(registry) == ["a", "b"]

    def test_iteration_is_sorted(self) -> None:
        registry = Registry({name: _endpoint(name) for name in ["search", "bulk", "ping"]})
        assert list(registry) == ["bulk", "ping", "search"]
        assert list(registry.keys()) == registry.names()

    def test_missing_key(self) -> None:
        with pytest.raises(KeyError):
            Registry()["nope"]

    def test_duplicate_names(self) -> None:
        with pytest.raises(DuplicateEndpointError):
            Registry.from_endpoints([_endpoint("a"), _endpoint("a")])

    def test_unnamed_endpoint(self) -> None:
        with pytest.raises(ValueError):
            Registry.from_endpoints([_endpoint(None)])

    def test_read_only(self) -> None:
        registry = Registry({"a": _endpoint("a")})
        with pytest.raises(TypeError):
            registry["b"] = _endpoint("b")  # type: ignore[index]

    def test_source_mapping_is_copied(self) -> None:
        source = {"a": _endpoint("a")}
        registry = Registry(source)
        source["b"] = _endpoint("b")
        assert registry.names() == ["a"]


class TestEndpoint:
    def test_sorted_verbs(self) -> None:
        endpoint = Endpoint(
            verbs=frozenset({HttpVerb.DELETE, HttpVerb.HEAD, HttpVerb.PUT}),
            url_paths=(PathTemplate(raw="/"),),
        )
        assert endpoint.sorted_verbs() == [HttpVerb.HEAD, HttpVerb.PUT, HttpVerb.DELETE]


class TestCompilerConfig:
    def test_defaults(self) -> None:
        config = CompilerConfig()
        assert config.workers == 4
        assert config.strict is False
        assert "**/*.json" in config.include
        assert config.exclude == []

    def test_workers_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            CompilerConfig(workers=0)
