"""openapi-cli -- Run the operations of OpenAPI 3.x specs as CLI commands.

This package turns an OpenAPI specification into Typer commands: one per
operation, named after its path (or its ``operationId``), with an option
per path and query parameter. Each registration can live under its own
namespace, which also gets a ``list`` command and a path-based ``call``
command.

Typical usage::

    from openapi_cli.app import main
    from openapi_cli.registry import CommandRegistry

    registry = CommandRegistry()
    registry.register("openapi.yaml", "example").bearer("s3cret")
    main(registry)

Modules:
    app: Typer application factory and CLI entry point.
    registry: Spec registrations and the fluent configuration builder.
    models: Pydantic models shared across the entire package.
    config: XDG paths, registration files, and credential sources.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr output system with Rich support.
"""

__version__ = "0.1.0"
