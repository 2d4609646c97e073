"""Typer application factory and CLI entry point for openapi-cli.

:func:`create_app` builds a fresh Typer application from a
:class:`~openapi_cli.registry.CommandRegistry`: every registration's spec is
loaded and resolved once, planned into commands, and attached either under
its namespace or at the top level.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs signal handlers, reads the registrations
file, builds the app, and invokes it. Unhandled exceptions are written to a
crash log under the data directory.

See Also:
    :mod:`openapi_cli.registry`: Programmatic registrations.
    :mod:`openapi_cli.config`: Registration files and XDG paths.
    :mod:`openapi_cli.output`: Output manager initialised in :func:`main_callback`.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from typing import TYPE_CHECKING, Any, Optional

import httpx
import typer

from openapi_cli import __version__
from openapi_cli.exit_codes import EXIT_GENERIC_FAILURE

if TYPE_CHECKING:
    from openapi_cli.client.transport import Transport
    from openapi_cli.models import CommandConfiguration
    from openapi_cli.parser import OpenApiParser
    from openapi_cli.registry import CommandRegistry

APP_NAME = "openapi-cli"


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"{APP_NAME} {__version__}")
        raise typer.Exit()


def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Show request details on stderr."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Initialises the global :class:`~openapi_cli.output.OutputManager` from
    CLI flags.

    Args:
        version: If ``True``, print the version string and exit.
        no_color: Disable all colour and Rich markup.
        quiet: Suppress non-essential diagnostic output.
        verbose: Print request debug output to stderr.
    """
    from openapi_cli.output import OutputManager, set_output

    set_output(OutputManager(no_color=no_color, quiet=quiet, verbose=verbose))


# ------------------------------------------------------------------ #
# App factory
# ------------------------------------------------------------------ #


def create_app(
    registry: Optional[CommandRegistry] = None,
    transport: Optional[Transport] = None,
    spec_transport: Optional[httpx.BaseTransport] = None,
    name: str = APP_NAME,
) -> typer.Typer:
    """Build the Typer application for every registration in *registry*.

    The registry is frozen first; registering afterwards raises
    :class:`~openapi_cli.exceptions.ConfigurationError`.

    Args:
        registry: A :class:`~openapi_cli.registry.CommandRegistry`. ``None``
            builds an app with only the root options.
        transport: Optional :class:`~openapi_cli.client.transport.Transport`
            used by every generated command.
        spec_transport: Optional :class:`httpx.BaseTransport` used to fetch
            remote specs.
        name: The executable name shown in help and hints.

    Returns:
        The configured :class:`typer.Typer` application.

    Raises:
        SpecLoadError: If a spec cannot be loaded or is not OpenAPI 3.x.
        CommandCollisionError: If command names cannot be made unique.
    """
    from openapi_cli.generator import attach_commands, plan_commands

    app = typer.Typer(
        name=name,
        help="Run OpenAPI operations as CLI commands.",
        no_args_is_help=True,
        add_completion=False,
        rich_markup_mode="rich",
    )
    app.callback()(main_callback)

    configurations = registry.freeze() if registry is not None else []
    for configuration in configurations:
        parser = load_parser(configuration, spec_transport)
        descriptors = plan_commands(parser, configuration)
        attach_commands(
            app,
            configuration,
            parser,
            descriptors,
            transport=transport,
            command_name=name,
        )
    return app


def load_parser(
    configuration: CommandConfiguration,
    spec_transport: Optional[httpx.BaseTransport] = None,
) -> OpenApiParser:
    """Load the spec of *configuration* once, through the cache for remote specs."""
    from openapi_cli.cache import SpecCache
    from openapi_cli.config import get_cache_dir
    from openapi_cli.output import debug
    from openapi_cli.parser import OpenApiParser
    from openapi_cli.parser.loader import is_url

    source = configuration.spec_source
    cache = None
    if configuration.cache.enabled and is_url(source):
        cache = SpecCache(configuration.cache.directory or get_cache_dir())

    debug(f"Loading spec from {source}")
    try:
        return OpenApiParser.from_source(
            source,
            cache=cache,
            ttl_seconds=configuration.cache.ttl_seconds,
            transport=spec_transport,
        )
    finally:
        if cache is not None:
            cache.close()


# ------------------------------------------------------------------ #
# Entry point
# ------------------------------------------------------------------ #


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path.

    Args:
        exc: The unhandled exception to log.

    Returns:
        Absolute path to the written crash log file.
    """
    from openapi_cli.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main(registry: Optional[CommandRegistry] = None) -> None:
    """CLI entry point invoked by the ``openapi-cli`` console script.

    Performs the following sequence:

    1. Install signal handlers for clean Ctrl-C behaviour.
    2. Add the registrations of ``openapi-cli.json`` / ``.yaml`` (or
       ``$OPENAPI_CLI_CONFIG``) to *registry*, or to a new one.
    3. Build the app and invoke it.

    Unhandled :class:`~openapi_cli.exceptions.OpenApiCliError` instances
    (spec load and reference errors, configuration problems) cause a clean
    exit with the error's ``exit_code``. All other exceptions produce a
    crash log and a generic failure exit.

    Args:
        registry: Programmatic registrations to start from.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        from openapi_cli.config import find_registrations_file, load_registrations_file
        from openapi_cli.registry import CommandRegistry

        if registry is None:
            registry = CommandRegistry()
        config_path = find_registrations_file()
        if config_path is not None:
            registry.add_from_file(load_registrations_file(config_path))

        app = create_app(registry)
        app(prog_name=APP_NAME)
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from openapi_cli.exceptions import OpenApiCliError
        from openapi_cli.output import error

        if isinstance(exc, OpenApiCliError):
            error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
