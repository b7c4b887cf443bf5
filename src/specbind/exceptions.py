"""Exception hierarchy for specbind.

All exceptions inherit from :class:`SpecbindError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`specbind.exit_codes`.
The top-level error handler in :func:`specbind.app.main` catches
``SpecbindError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Per-file compilation failures are all :class:`SpecError` subclasses. The
endpoint assembler raises them; the directory walker catches them one file at
a time and reports them alongside the partial registry.

Subclass hierarchy::

    SpecbindError (exit 1)
    +-- InvalidUsageError        (exit 2)
    +-- ConfigError              (exit 1)
    +-- SpecError                (exit 3)
    |   +-- InvalidDocumentError
    |   +-- UnknownVerbError
    |   +-- TypeMismatchError
    |   +-- MissingFieldError
    |   +-- DuplicateEndpointError
    |   +-- SpecReadError        (exit 4)
    +-- CompileError             (exit 3)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from specbind.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_IO_ERROR,
    EXIT_SPEC_ERROR,
)

if TYPE_CHECKING:
    from specbind.models import FileError


class SpecbindError(Exception):
    """Base exception for all specbind errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`specbind.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(SpecbindError):
    """Raised for invalid CLI arguments or missing required parameters."""

    exit_code = EXIT_INVALID_USAGE


class ConfigError(SpecbindError):
    """Raised for configuration problems (invalid JSON, bad values)."""

    exit_code = EXIT_GENERIC_FAILURE


class SpecError(SpecbindError):
    """Base class for errors that make a single spec document unusable."""

    exit_code = EXIT_SPEC_ERROR


class InvalidDocumentError(SpecError):
    """Raised when a document is not well-formed JSON/YAML or has the wrong shape."""


class UnknownVerbError(SpecError):
    """Raised when a method token is not one of the supported HTTP verbs.

    Args:
        token: The offending token exactly as it appeared in the document.
    """

    def __init__(self, token: str):
        super().__init__(f"Unknown HTTP method: {token!r}")
        self.token = token


class TypeMismatchError(SpecError):
    """Raised when a default value does not fit the type it is read or declared as.

    Args:
        expected: Name of the type that was requested or declared.
        actual: Name of the type that was found.
        detail: Optional extra context appended to the message.
    """

    def __init__(self, expected: str, actual: str, detail: Optional[str] = None):
        message = f"Type mismatch: expected {expected}, got {actual}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)
        self.expected = expected
        self.actual = actual


class MissingFieldError(SpecError):
    """Raised when a required structural field is absent from a document.

    Args:
        field: Dotted path of the missing field (e.g. ``url.paths``).
    """

    def __init__(self, field: str):
        super().__init__(f"Missing required field: {field}")
        self.field = field


class DuplicateEndpointError(SpecError):
    """Raised when two spec files resolve to the same endpoint name.

    Args:
        name: The endpoint name.
        first_file: File identity of the endpoint that was registered first.
    """

    def __init__(self, name: str, first_file: Optional[str] = None):
        message = f"Duplicate endpoint name: {name!r}"
        if first_file:
            message = f"{message} (already defined in {first_file})"
        super().__init__(message)
        self.name = name
        self.first_file = first_file


class SpecReadError(SpecError):
    """Raised when a spec file or directory cannot be read."""

    exit_code = EXIT_IO_ERROR


class CompileError(SpecbindError):
    """Raised in strict mode when one or more spec files failed to compile.

    Args:
        errors: The per-file errors collected by the directory walker.
    """

    exit_code = EXIT_SPEC_ERROR

    def __init__(self, errors: list[FileError]):
        lines = [f"{len(errors)} spec file(s) failed to compile:"]
        lines.extend(f"  {err.file}: {err.message}" for err in errors)
        super().__init__("\n".join(lines))
        self.errors = errors
