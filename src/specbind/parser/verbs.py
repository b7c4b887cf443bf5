"""Resolve HTTP method tokens into :class:`~specbind.models.HttpVerb` values."""

from __future__ import annotations

from specbind.exceptions import UnknownVerbError
from specbind.models import HttpVerb

_VERBS: dict[str, HttpVerb] = {verb.value: verb for verb in HttpVerb}


def resolve_verb(token: str) -> HttpVerb:
    """Resolve *token* by exact, case-sensitive match.

    Raises:
        UnknownVerbError: If *token* is not ``HEAD``, ``GET``, ``POST``,
            ``PUT`` or ``DELETE``.
    """
    try:
        return _VERBS[token]
    except (KeyError, TypeError):
        raise UnknownVerbError(str(token)) from None
