"""specbind -- Compile REST endpoint spec files into Python client bindings.

This package reads a directory of endpoint descriptions (one JSON document per
endpoint, in the Elasticsearch ``rest-api-spec`` layout), compiles each into a
typed :class:`~specbind.models.Endpoint`, aggregates them into a
:class:`~specbind.models.Registry`, and emits deterministic Python source that
a transport layer can call.

Typical workflow::

    specbind compile rest-api-spec/api --out mycluster/api

Modules:
    app: Typer application factory and CLI entry point.
    models: Pydantic models for the typed intermediate representation.
    parser: Type and verb resolution, document loading, endpoint assembly
        and directory walking.
    generator: Binding emission from a registry.
    config: Configuration files and precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.1.0"
