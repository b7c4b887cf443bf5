"""Tests for specbind.parser.verbs -- HTTP method resolution."""

from __future__ import annotations

import pytest

from specbind.exceptions import UnknownVerbError
from specbind.exit_codes import EXIT_SPEC_ERROR
from specbind.models import HttpVerb
from specbind.parser.verbs import resolve_verb


class TestResolveVerb:
    @pytest.mark.parametrize("token", ["HEAD", "GET", "POST", "PUT", "DELETE"])
    def test_known_tokens(self, token: str) -> None:
        assert resolve_verb(token) is HttpVerb(token)

    @pytest.mark.parametrize("token", ["get", "Post", "PATCH", "OPTIONS", "", "GET "])
    def test_unknown_tokens(self, token: str) -> None:
        with pytest.raises(UnknownVerbError) as exc_info:
            resolve_verb(token)
        assert exc_info.value.token == token

    def test_non_string_token(self) -> None:
        with pytest.raises(UnknownVerbError) as exc_info:
            resolve_verb(42)  # type: ignore[arg-type]
        assert exc_info.value.token == "42"

    def test_error_carries_spec_exit_code(self) -> None:
        with pytest.raises(UnknownVerbError) as exc_info:
            resolve_verb("FETCH")
        assert exc_info.value.exit_code == EXIT_SPEC_ERROR
        assert "FETCH" in str(exc_info.value)


class TestVerbOrder:
    def test_declaration_order_is_canonical(self) -> None:
        assert [verb.value for verb in HttpVerb] == ["HEAD", "GET", "POST", "PUT", "DELETE"]

    def test_rank_follows_declaration(self) -> None:
        assert HttpVerb.HEAD.rank < HttpVerb.GET.rank < HttpVerb.DELETE.rank
