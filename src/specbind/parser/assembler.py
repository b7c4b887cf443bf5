"""Assemble one decoded spec document into an :class:`~specbind.models.Endpoint`.

Two document shapes are accepted. The *wrapped* shape used by the
Elasticsearch ``rest-api-spec`` keys the body by the endpoint name::

    {
      "bulk": {
        "documentation": "http://www.elastic.co/guide/.../docs-bulk.html",
        "methods": ["POST", "PUT"],
        "url": {
          "path": "/_bulk",
          "paths": ["/_bulk", "/{index}/_bulk", "/{index}/{type}/_bulk"],
          "parts": {"index": {"type": "string", "description": "..."}},
          "params": {"refresh": {"type": "boolean", "description": "..."}}
        },
        "body": {"description": "...", "required": true, "serialize": "bulk"}
      }
    }

The *flat* shape puts those fields at the root, with an optional ``name``.

The public entry points are :func:`parse_one` (content in, endpoint out) and
:func:`assemble` (decoded dict in, endpoint out). Neither touches the
filesystem or network. Every failure is raised as a
:class:`~specbind.exceptions.SpecError` subclass; no partial endpoint is ever
returned.
"""

from __future__ import annotations

import re
from typing import Any, Optional

from pydantic import ValidationError

from specbind.exceptions import InvalidDocumentError, MissingFieldError
from specbind.models import (
    BodySchema,
    Endpoint,
    HttpVerb,
    LiteralSegment,
    Param,
    PartSegment,
    PathSegment,
    PathTemplate,
)
from specbind.parser.loader import DocumentSource, load_document
from specbind.parser.types import resolve_type
from specbind.parser.verbs import resolve_verb

# Keys that mark a dict as a flat endpoint body rather than a wrapper.
_BODY_KEYS = frozenset({"methods", "url", "documentation", "body"})

_PART_RE = re.compile(r"\{([^{}]*)\}")


def parse_one(source: DocumentSource, hint: str = "") -> Endpoint:
    """Decode and assemble a single spec document.

    Args:
        source: Raw content (``bytes``/``str``) or a readable stream.
        hint: Optional format hint passed to
            :func:`~specbind.parser.loader.load_document`.

    Returns:
        The compiled endpoint. ``name`` is ``None`` when the document does
        not carry one.

    Raises:
        SpecError: Any subclass, see :func:`assemble`.
    """
    return assemble(load_document(source, hint=hint))


def assemble(document: dict[str, Any]) -> Endpoint:
    """Build an :class:`~specbind.models.Endpoint` from a decoded document.

    Raises:
        InvalidDocumentError: If a field has the wrong JSON shape.
        UnknownVerbError: If a method token is not a supported verb.
        TypeMismatchError: If a default does not fit its declared type, or an
            ``enum`` is declared without options.
        MissingFieldError: If ``methods``, ``url``, the path templates, a
            param's ``type`` or a used path part's declaration is missing.
    """
    try:
        return _assemble(document)
    except ValidationError as exc:
        raise InvalidDocumentError(f"Document does not describe a valid endpoint: {exc}") from exc


def _assemble(document: dict[str, Any]) -> Endpoint:
    name, body = _unwrap(document)

    verbs = _extract_verbs(body.get("methods"))

    url = body.get("url")
    if url is None:
        raise MissingFieldError("url")
    url = _require_dict(url, "url")

    parts = _require_dict(url.get("parts") or {}, "url.parts")
    url_paths = _extract_paths(url, parts)
    params = _extract_params(_require_dict(url.get("params") or {}, "url.params"))

    return Endpoint(
        name=name,
        documentation=_extract_documentation(body.get("documentation")),
        verbs=frozenset(verbs),
        url_paths=tuple(url_paths),
        params=params,
        body=_extract_body(body.get("body")),
    )


def _unwrap(document: dict[str, Any]) -> tuple[Optional[str], dict[str, Any]]:
    """Split a document into its endpoint name (if any) and endpoint body."""
    if _BODY_KEYS.intersection(document):
        name = document.get("name")
        if name is not None and not isinstance(name, str):
            raise InvalidDocumentError("'name' must be a string")
        return name, document

    if len(document) == 1:
        name, body = next(iter(document.items()))
        if isinstance(body, dict):
            if not isinstance(name, str):
                raise InvalidDocumentError(f"Endpoint name must be a string, got {name!r}")
            return name, body

    # Neither an endpoint body nor a single-key wrapper around one.
    raise MissingFieldError("methods")


def _require_dict(value: Any, field: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise InvalidDocumentError(f"'{field}' must be an object")
    return value


def _require_list(value: Any, field: str) -> list[Any]:
    if not isinstance(value, list):
        raise InvalidDocumentError(f"'{field}' must be a list")
    return value


def _optional_str(value: Any, field: str) -> Optional[str]:
    if value is None or isinstance(value, str):
        return value
    raise InvalidDocumentError(f"'{field}' must be a string")


def _flag(value: Any, field: str) -> bool:
    """A JSON boolean; absent or null means ``False``."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    raise InvalidDocumentError(f"'{field}' must be a boolean, got {value!r}")


def _options(declaration: dict[str, Any], field: str) -> Optional[list[str]]:
    options = declaration.get("options")
    if options is None:
        return None
    return [str(option) for option in _require_list(options, f"{field}.options")]


def _extract_documentation(value: Any) -> Optional[str]:
    """Documentation is a URL string, or an object with ``url``/``description``."""
    if isinstance(value, dict):
        return _optional_str(value.get("url") or value.get("description"), "documentation")
    return _optional_str(value, "documentation")


def _extract_verbs(methods: Any) -> list[HttpVerb]:
    if not methods:
        raise MissingFieldError("methods")
    return [resolve_verb(token) for token in _require_list(methods, "methods")]


def _extract_paths(url: dict[str, Any], parts: dict[str, Any]) -> list[PathTemplate]:
    """Collect ``url.paths``, falling back to the single ``url.path``."""
    raw_paths = url.get("paths")
    if raw_paths is None:
        single = url.get("path")
        raw_paths = [single] if single is not None else []
    raw_paths = _require_list(raw_paths, "url.paths")
    if not raw_paths:
        raise MissingFieldError("url.paths")

    templates: list[PathTemplate] = []
    seen: set[str] = set()
    for raw in raw_paths:
        if not isinstance(raw, str):
            raise InvalidDocumentError("'url.paths' entries must be strings")
        if raw in seen:
            continue
        seen.add(raw)
        templates.append(parse_path_template(raw, parts))
    return templates


def parse_path_template(raw: str, parts: dict[str, Any]) -> PathTemplate:
    """Split a path template into literal and typed part segments.

    Args:
        raw: The template, e.g. ``"/{index}/{type}/_search"``.
        parts: The ``url.parts`` declarations, keyed by part name.

    Raises:
        InvalidDocumentError: If braces are unbalanced or a part is unnamed.
        MissingFieldError: If a part is not declared in *parts*.
    """
    segments: list[PathSegment] = []
    position = 0
    for match in _PART_RE.finditer(raw):
        literal = raw[position:match.start()]
        if literal:
            segments.append(_literal(literal, raw))
        segments.append(_part(match.group(1), parts, raw))
        position = match.end()
    tail = raw[position:]
    if tail:
        segments.append(_literal(tail, raw))
    return PathTemplate(raw=raw, segments=tuple(segments))


def _literal(text: str, raw: str) -> LiteralSegment:
    if "{" in text or "}" in text:
        raise InvalidDocumentError(f"Unbalanced braces in path template {raw!r}")
    return LiteralSegment(text=text)


def _part(name: str, parts: dict[str, Any], raw: str) -> PartSegment:
    name = name.strip()
    if not name:
        raise InvalidDocumentError(f"Empty path part in template {raw!r}")
    declaration = parts.get(name)
    if declaration is None:
        raise MissingFieldError(f"url.parts.{name}")
    field = f"url.parts.{name}"
    declaration = _require_dict(declaration, field)
    type_name = declaration.get("type")
    if type_name is None:
        raise MissingFieldError(f"{field}.type")
    return PartSegment(
        name=name,
        value_type=resolve_type(str(type_name), _options(declaration, field)),
        description=_optional_str(declaration.get("description"), f"{field}.description"),
    )


def _extract_params(raw_params: dict[str, Any]) -> dict[str, Param]:
    params: dict[str, Param] = {}
    for name, declaration in raw_params.items():
        if not isinstance(name, str):
            raise InvalidDocumentError(f"Param name must be a string, got {name!r}")
        field = f"url.params.{name}"
        declaration = _require_dict(declaration, field)
        type_name = declaration.get("type")
        if type_name is None:
            raise MissingFieldError(f"{field}.type")
        params[name] = Param.of(
            resolve_type(str(type_name), _options(declaration, field)),
            required=_flag(declaration.get("required"), f"{field}.required"),
            default=declaration.get("default"),
            description=_optional_str(declaration.get("description"), f"{field}.description"),
        )
    return params


def _extract_body(raw_body: Any) -> Optional[BodySchema]:
    if raw_body is None:
        return None
    raw_body = _require_dict(raw_body, "body")
    return BodySchema(
        required=_flag(raw_body.get("required"), "body.required"),
        description=_optional_str(raw_body.get("description"), "body.description"),
        serialize=_optional_str(raw_body.get("serialize"), "body.serialize"),
    )
