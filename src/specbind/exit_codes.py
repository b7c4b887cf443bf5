"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~specbind.exceptions.SpecbindError` subclass.
Build scripts can inspect the exit code to tell a broken spec file apart
from a bad invocation without parsing stderr.

Example::

    $ specbind compile rest-api-spec/api --strict
    $ echo $?
    3   # EXIT_SPEC_ERROR -- at least one spec file failed to compile
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_SPEC_ERROR = 3
"""One or more spec documents could not be compiled."""

EXIT_IO_ERROR = 4
"""A spec file or directory could not be read."""
