"""Tests for specbind.parser.assembler -- one document to one Endpoint."""

from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Any

import pytest

from specbind.exceptions import (
    InvalidDocumentError,
    MissingFieldError,
    TypeMismatchError,
    UnknownVerbError,
)
from specbind.models import (
    BodySchema,
    EnumType,
    HttpVerb,
    ListType,
    LiteralSegment,
    NumberKind,
    NumberType,
    OtherType,
    PartSegment,
    StrType,
)
from specbind.parser.assembler import assemble, parse_one, parse_path_template

API_DIR = Path(__file__).parent.parent / "fixtures" / "api"


def _minimal(**overrides: Any) -> dict[str, Any]:
    body: dict[str, Any] = {
        "methods": ["GET"],
        "url": {"path": "/_ping"},
    }
    body.update(overrides)
    return {"ping": body}


class TestBulkDocument:
    """The ``bulk`` document from the Elasticsearch REST spec."""

    def test_name(self) -> None:
        with open(API_DIR / "bulk.json", "rb") as f:
            endpoint = parse_one(f)
        assert endpoint.name == "bulk"

    def test_documentation(self, bulk_raw: dict[str, Any]) -> None:
        endpoint = assemble(bulk_raw)
        assert endpoint.documentation is not None
        assert endpoint.documentation.endswith("docs-bulk.html")

    def test_verbs(self, bulk_raw: dict[str, Any]) -> None:
        endpoint = assemble(bulk_raw)
        assert endpoint.verbs == frozenset({HttpVerb.POST, HttpVerb.PUT})
        assert endpoint.sorted_verbs() == [HttpVerb.POST, HttpVerb.PUT]

    def test_paths_in_declared_order(self, bulk_raw: dict[str, Any]) -> None:
        endpoint = assemble(bulk_raw)
        assert [p.raw for p in endpoint.url_paths] == [
            "/_bulk",
            "/{index}/_bulk",
            "/{index}/{type}/_bulk",
        ]

    def test_path_parts_are_typed(self, bulk_raw: dict[str, Any]) -> None:
        endpoint = assemble(bulk_raw)
        parts = endpoint.url_paths[2].parts
        assert [p.name for p in parts] == ["index", "type"]
        assert all(p.value_type == StrType() for p in parts)
        assert parts[0].description == "Default index for items which don't provide one"

    def test_params(self, bulk_raw: dict[str, Any]) -> None:
        endpoint = assemble(bulk_raw)
        assert set(endpoint.params) == {
            "consistency", "refresh", "routing", "timeout", "type", "fields",
        }
        assert endpoint.params["consistency"].value_type == EnumType(
            options=("one", "quorum", "all")
        )
        assert endpoint.params["fields"].value_type == ListType()
        assert not endpoint.params["refresh"].required
        assert endpoint.params["refresh"].default is None

    def test_body(self, bulk_raw: dict[str, Any]) -> None:
        endpoint = assemble(bulk_raw)
        assert endpoint.body == BodySchema(
            required=True,
            description="The operation definition and data (action-data pairs), separated by newlines",
            serialize="bulk",
        )

    def test_parse_one_from_bytes(self) -> None:
        endpoint = parse_one((API_DIR / "bulk.json").read_bytes())
        assert endpoint.name == "bulk"


class TestDocumentShapes:
    def test_flat_document_with_name(self) -> None:
        endpoint = assemble({"name": "ping", "methods": ["HEAD"], "url": {"path": "/"}})
        assert endpoint.name == "ping"

    def test_flat_document_without_name(self) -> None:
        endpoint = assemble({"methods": ["HEAD"], "url": {"path": "/"}})
        assert endpoint.name is None

    def test_flat_name_must_be_string(self) -> None:
        with pytest.raises(InvalidDocumentError):
            assemble({"name": 3, "methods": ["HEAD"], "url": {"path": "/"}})

    def test_empty_document(self) -> None:
        with pytest.raises(MissingFieldError) as exc_info:
            assemble({})
        assert exc_info.value.field == "methods"

    def test_wrapper_key_must_be_a_string(self) -> None:
        with pytest.raises(InvalidDocumentError, match="Endpoint name must be a string"):
            assemble({123: {"methods": ["GET"], "url": {"path": "/"}}})

    def test_wrapper_with_two_keys(self) -> None:
        doc = _minimal()
        doc["other"] = doc["ping"]
        with pytest.raises(MissingFieldError):
            assemble(doc)

    def test_documentation_object(self) -> None:
        endpoint = assemble(_minimal(documentation={
            "url": "https://example.com/ping",
            "description": "Ping the cluster",
        }))
        assert endpoint.documentation == "https://example.com/ping"

    def test_documentation_object_without_url(self) -> None:
        endpoint = assemble(_minimal(documentation={"description": "Ping the cluster"}))
        assert endpoint.documentation == "Ping the cluster"


class TestMethods:
    def test_missing_methods(self) -> None:
        doc = _minimal()
        del doc["ping"]["methods"]
        with pytest.raises(MissingFieldError) as exc_info:
            assemble(doc)
        assert exc_info.value.field == "methods"

    def test_empty_methods(self) -> None:
        with pytest.raises(MissingFieldError):
            assemble(_minimal(methods=[]))

    def test_unknown_method(self) -> None:
        with pytest.raises(UnknownVerbError) as exc_info:
            assemble(_minimal(methods=["GET", "PATCH"]))
        assert exc_info.value.token == "PATCH"

    def test_methods_not_a_list(self) -> None:
        with pytest.raises(InvalidDocumentError):
            assemble(_minimal(methods="GET"))

    def test_duplicate_methods_collapse(self) -> None:
        endpoint = assemble(_minimal(methods=["GET", "GET", "HEAD"]))
        assert endpoint.sorted_verbs() == [HttpVerb.HEAD, HttpVerb.GET]


class TestUrl:
    def test_missing_url(self) -> None:
        doc = _minimal()
        del doc["ping"]["url"]
        with pytest.raises(MissingFieldError) as exc_info:
            assemble(doc)
        assert exc_info.value.field == "url"

    def test_url_not_an_object(self) -> None:
        with pytest.raises(InvalidDocumentError):
            assemble(_minimal(url="/_ping"))

    def test_no_path_at_all(self) -> None:
        with pytest.raises(MissingFieldError) as exc_info:
            assemble(_minimal(url={}))
        assert exc_info.value.field == "url.paths"

    def test_empty_paths(self) -> None:
        with pytest.raises(MissingFieldError):
            assemble(_minimal(url={"paths": []}))

    def test_paths_win_over_path(self) -> None:
        endpoint = assemble(_minimal(url={"path": "/a", "paths": ["/b", "/c"]}))
        assert [p.raw for p in endpoint.url_paths] == ["/b", "/c"]

    def test_duplicate_paths_are_dropped(self) -> None:
        endpoint = assemble(_minimal(url={"paths": ["/a", "/a", "/b"]}))
        assert [p.raw for p in endpoint.url_paths] == ["/a", "/b"]

    def test_undeclared_part(self) -> None:
        with pytest.raises(MissingFieldError) as exc_info:
            assemble(_minimal(url={"paths": ["/{index}/_ping"]}))
        assert exc_info.value.field == "url.parts.index"

    def test_part_without_type(self) -> None:
        with pytest.raises(MissingFieldError) as exc_info:
            assemble(_minimal(url={
                "paths": ["/{index}"],
                "parts": {"index": {"description": "x"}},
            }))
        assert exc_info.value.field == "url.parts.index.type"

    @pytest.mark.parametrize("options", ["abc", {"a": 1}])
    def test_part_options_must_be_a_list(self, options: Any) -> None:
        with pytest.raises(InvalidDocumentError, match="url.parts.level.options"):
            assemble(_minimal(url={
                "path": "/{level}",
                "parts": {"level": {"type": "enum", "options": options}},
            }))

    def test_numeric_part_options_become_strings(self) -> None:
        endpoint = assemble(_minimal(url={
            "path": "/{level}",
            "parts": {"level": {"type": "enum", "options": [1, 2]}},
        }))
        assert endpoint.url_paths[0].parts[0].value_type == EnumType(options=("1", "2"))

    def test_unknown_part_type_is_other(self) -> None:
        endpoint = assemble(_minimal(url={
            "paths": ["/{id}"],
            "parts": {"id": {"type": "uuid"}},
        }))
        assert endpoint.url_paths[0].parts[0].value_type == OtherType(raw_name="uuid")


class TestPathTemplate:
    PARTS = {
        "index": {"type": "string"},
        "type": {"type": "list"},
    }

    def test_literal_only(self) -> None:
        template = parse_path_template("/_bulk", self.PARTS)
        assert template.segments == (LiteralSegment(text="/_bulk"),)
        assert template.parts == []

    def test_mixed_segments(self) -> None:
        template = parse_path_template("/{index}/{type}/_bulk", self.PARTS)
        assert template.segments == (
            LiteralSegment(text="/"),
            PartSegment(name="index", value_type=StrType()),
            LiteralSegment(text="/"),
            PartSegment(name="type", value_type=ListType()),
            LiteralSegment(text="/_bulk"),
        )

    def test_adjacent_parts(self) -> None:
        template = parse_path_template("/{index}{type}", self.PARTS)
        assert [p.name for p in template.parts] == ["index", "type"]

    @pytest.mark.parametrize("raw", ["/{index", "/index}", "/{{index}}", "/}{"])
    def test_unbalanced_braces(self, raw: str) -> None:
        with pytest.raises(InvalidDocumentError):
            parse_path_template(raw, self.PARTS)

    def test_empty_part_name(self) -> None:
        with pytest.raises(InvalidDocumentError):
            parse_path_template("/{}/_bulk", self.PARTS)


class TestParams:
    def test_param_without_type(self) -> None:
        with pytest.raises(MissingFieldError) as exc_info:
            assemble(_minimal(url={"path": "/", "params": {"q": {"description": "x"}}}))
        assert exc_info.value.field == "url.params.q.type"

    def test_param_default_is_checked(self) -> None:
        with pytest.raises(TypeMismatchError):
            assemble(_minimal(url={
                "path": "/",
                "params": {"size": {"type": "number", "default": "ten"}},
            }))

    def test_enum_default_must_be_an_option(self) -> None:
        with pytest.raises(TypeMismatchError):
            assemble(_minimal(url={
                "path": "/",
                "params": {"op": {"type": "enum", "options": ["AND", "OR"], "default": "XOR"}},
            }))

    def test_enum_without_options(self) -> None:
        with pytest.raises(TypeMismatchError):
            assemble(_minimal(url={"path": "/", "params": {"op": {"type": "enum"}}}))

    def test_required_and_default(self, search_raw: dict[str, Any]) -> None:
        endpoint = assemble(search_raw)
        op = endpoint.params["default_operator"]
        assert op.get_default(str) == "OR"
        assert endpoint.params["size"].value_type == NumberType(number_kind=NumberKind.LONG)

    def test_numeric_options_become_strings(self) -> None:
        endpoint = assemble(_minimal(url={
            "path": "/",
            "params": {"level": {"type": "enum", "options": [1, 2]}},
        }))
        assert endpoint.params["level"].value_type == EnumType(options=("1", "2"))

    def test_params_not_an_object(self) -> None:
        with pytest.raises(InvalidDocumentError):
            assemble(_minimal(url={"path": "/", "params": ["q"]}))

    @pytest.mark.parametrize("options", ["abc", {"a": 1, "b": 2}])
    def test_options_must_be_a_list(self, options: Any) -> None:
        with pytest.raises(InvalidDocumentError, match="url.params.op.options"):
            assemble(_minimal(url={
                "path": "/",
                "params": {"op": {"type": "enum", "options": options}},
            }))

    @pytest.mark.parametrize("flag", ["false", "true", 0, 1])
    def test_required_must_be_a_boolean(self, flag: Any) -> None:
        with pytest.raises(InvalidDocumentError, match="url.params.q.required"):
            assemble(_minimal(url={
                "path": "/",
                "params": {"q": {"type": "string", "required": flag}},
            }))

    def test_null_required_means_optional(self) -> None:
        endpoint = assemble(_minimal(url={
            "path": "/",
            "params": {"q": {"type": "string", "required": None}},
        }))
        assert endpoint.params["q"].required is False

    def test_param_name_must_be_a_string(self) -> None:
        with pytest.raises(InvalidDocumentError, match="Param name"):
            assemble(_minimal(url={"path": "/", "params": {7: {"type": "string"}}}))


class TestBody:
    def test_null_body(self) -> None:
        assert assemble(_minimal(body=None)).body is None

    def test_absent_body(self) -> None:
        assert assemble(_minimal()).body is None

    def test_optional_body(self) -> None:
        endpoint = assemble(_minimal(body={"description": "Query"}))
        assert endpoint.body == BodySchema(required=False, description="Query")

    def test_body_not_an_object(self) -> None:
        with pytest.raises(InvalidDocumentError):
            assemble(_minimal(body="yes"))

    def test_required_must_be_a_boolean(self) -> None:
        with pytest.raises(InvalidDocumentError, match="body.required"):
            assemble(_minimal(body={"required": "false"}))


class TestPurity:
    def test_document_is_not_mutated(self, bulk_raw: dict[str, Any]) -> None:
        before = copy.deepcopy(bulk_raw)
        assemble(bulk_raw)
        assert bulk_raw == before

    def test_same_input_same_endpoint(self, bulk_raw: dict[str, Any]) -> None:
        text = json.dumps(bulk_raw)
        assert parse_one(text) == parse_one(text)
