"""Decode endpoint spec documents from bytes, text, streams, or files.

This module handles all I/O for turning raw spec documents into Python
dictionaries. JSON is the native format; YAML is accepted as a fallback with
automatic format detection, so hand-written specs can use either.

The public functions are:

* :func:`load_document` -- Decode already-read content (``bytes``, ``str``,
  or a file-like object). Performs no filesystem access of its own.
* :func:`read_spec_file` -- Read a file from disk and decode it.

The resulting dict is handed to
:func:`~specbind.parser.assembler.assemble`.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import IO, Any, Union

import yaml

from specbind.exceptions import InvalidDocumentError, SpecReadError

DocumentSource = Union[bytes, bytearray, str, IO[bytes], IO[str]]

_SUFFIX_HINTS = {".json": "json", ".yaml": "yaml", ".yml": "yaml"}


def load_document(source: DocumentSource, hint: str = "") -> dict[str, Any]:
    """Decode a spec document.

    Args:
        source: Raw content as ``bytes``/``str``, or a readable stream.
        hint: Optional format hint (``"json"`` or ``"yaml"``).

    Returns:
        The decoded document.

    Raises:
        InvalidDocumentError: If the content is empty, not valid JSON/YAML,
            or its root is not an object.
    """
    if hasattr(source, "read"):
        source = source.read()  # type: ignore[union-attr]

    if isinstance(source, (bytes, bytearray)):
        try:
            content = bytes(source).decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise InvalidDocumentError(f"Document is not valid UTF-8: {exc}") from exc
    else:
        content = source  # type: ignore[assignment]

    if not content.strip():
        raise InvalidDocumentError("Document is empty")

    return _parse_content(content, hint=hint)


def read_spec_file(path: Union[str, Path]) -> dict[str, Any]:
    """Read and decode a spec file from disk.

    ``.json`` files are parsed strictly as JSON and ``.yaml``/``.yml`` files
    as YAML. Any other extension is detected from the content.

    Raises:
        SpecReadError: If the file does not exist or cannot be read.
        InvalidDocumentError: If the content cannot be decoded.
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise SpecReadError(f"Spec file not found: {path}")
    try:
        raw = file_path.read_bytes()
    except OSError as exc:
        raise SpecReadError(f"Failed to read spec file {path}: {exc}") from exc
    return load_document(raw, hint=_SUFFIX_HINTS.get(file_path.suffix.lower(), ""))


def _parse_content(content: str, hint: str = "") -> dict[str, Any]:
    # JSON first, YAML as the fallback.
    if hint == "yaml":
        return _require_object(_parse_yaml(content))
    try:
        document = json.loads(content)
    except (ValueError, RecursionError) as json_exc:
        if hint == "json":
            raise InvalidDocumentError(f"Invalid JSON: {json_exc}") from json_exc
        try:
            document = yaml.safe_load(content)
        except (yaml.YAMLError, ValueError, RecursionError) as yaml_exc:
            raise InvalidDocumentError(
                "Failed to parse document as JSON or YAML\n"
                f"  JSON error: {json_exc}\n"
                f"  YAML error: {yaml_exc}"
            ) from yaml_exc
    return _require_object(document)


def _parse_yaml(content: str) -> Any:
    try:
        return yaml.safe_load(content)
    except (yaml.YAMLError, ValueError, RecursionError) as exc:
        raise InvalidDocumentError(f"Invalid YAML: {exc}") from exc


def _require_object(result: Any) -> dict[str, Any]:
    if not isinstance(result, dict):
        kind = type(result).__name__ if result is not None else "empty document"
        raise InvalidDocumentError(f"Document must be a JSON/YAML object (got {kind})")
    return result
