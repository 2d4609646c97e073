"""Attach the planned commands of one registration to a Typer app.

This is where descriptors become runnable commands.  For every
registration:

1. Pick the target app: a ``<namespace>`` sub-app when the registration
   has a namespace, otherwise the root app itself.
2. Register one command per :class:`~openapi_cli.models.CommandDescriptor`.
   Each is a dynamically generated function whose signature carries one
   ``--option`` per path and query parameter plus the built-in body and
   output flags (``--field``, ``--input``, ``--json``, ``--yaml``,
   ``--minify``, ``--headers/-H``, ``--output-html``).
3. For namespaced registrations, add ``list`` (every endpoint, preceded by
   the banner) and ``call`` (run an endpoint by its literal path).

At invocation the command collects its option values into an
:class:`~openapi_cli.models.InvocationInput` and hands it to a
:class:`~openapi_cli.client.executor.RequestExecutor`.  Local errors become
an ``Error:`` line and a non-zero exit; HTTP errors exit with the code
mapped from the status.
"""

from __future__ import annotations

from typing import Any, Callable, List, Optional

import click
import typer
from rich.markup import escape

from openapi_cli.client.executor import RequestExecutor
from openapi_cli.client.transport import Transport
from openapi_cli.exceptions import (
    InputValidationError,
    MissingRequiredOptionError,
    NetworkError,
    OpenApiCliError,
)
from openapi_cli.generator.naming import option_to_identifier
from openapi_cli.generator.planner import (
    build_list_entries,
    format_list_lines,
    resolve_endpoint,
)
from openapi_cli.models import (
    CommandConfiguration,
    CommandDescriptor,
    CommandOption,
    InvocationInput,
)
from openapi_cli.output import OutputManager, get_output
from openapi_cli.parser.query import OpenApiParser

Runner = Callable[[CommandDescriptor, InvocationInput], None]


# ---------------------------------------------------------------------------
# Built-in flags shared by every endpoint command and ``call``
# ---------------------------------------------------------------------------


def _field_option() -> Any:
    return typer.Option(
        None,
        "--field",
        help="Body field as key=value, or key=@path to upload a file. Repeatable.",
    )


def _input_option() -> Any:
    return typer.Option(None, "--input", help="Raw JSON request body.")


def _json_option() -> Any:
    return typer.Option(False, "--json", help="Print the response as JSON.")


def _yaml_option() -> Any:
    return typer.Option(False, "--yaml", help="Print the response as YAML.")


def _minify_option() -> Any:
    return typer.Option(False, "--minify", help="Print compact JSON.")


def _headers_option() -> Any:
    return typer.Option(False, "--headers", "-H", help="Include the response status line and headers.")


def _output_html_option() -> Any:
    return typer.Option(False, "--output-html", help="Show HTML response bodies.")


# (identifier, annotation, default factory, InvocationInput field)
_BUILTIN_OPTIONS: list[tuple[str, Any, Callable[[], Any], str]] = [
    ("__field", Optional[List[str]], _field_option, "fields"),
    ("__input", Optional[str], _input_option, "raw_input"),
    ("__json", bool, _json_option, "json_output"),
    ("__yaml", bool, _yaml_option, "yaml_output"),
    ("__minify", bool, _minify_option, "minify"),
    ("__headers", bool, _headers_option, "include_headers"),
    ("__output_html", bool, _output_html_option, "output_html"),
]


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------


def attach_commands(
    root: typer.Typer,
    configuration: CommandConfiguration,
    parser: OpenApiParser,
    descriptors: list[CommandDescriptor],
    transport: Optional[Transport] = None,
    command_name: str = "openapi-cli",
) -> typer.Typer:
    """Register the commands of one registration on *root*.

    Args:
        root: The top-level :class:`typer.Typer` application.
        configuration: The frozen registration configuration.
        parser: The query facade of the registration's spec.
        descriptors: The planned commands, as returned by
            :func:`~openapi_cli.generator.planner.plan_commands`.
        transport: Optional transport shared by every command (tests pass
            one backed by :class:`httpx.MockTransport`).
        command_name: The executable name, used in hints.

    Returns:
        The app the commands were attached to: the namespace sub-app, or
        *root* when the registration has no namespace.

    Example::

        descriptors = plan_commands(parser, configuration)
        attach_commands(app, configuration, parser, descriptors)
    """
    run = _make_runner(configuration, parser, transport, command_name)

    target = root
    if configuration.namespace:
        target = typer.Typer(
            name=configuration.namespace,
            help=escape(_namespace_help(configuration, parser)),
            no_args_is_help=True,
            rich_markup_mode="rich",
        )
        root.add_typer(target, name=configuration.namespace)

    for descriptor in descriptors:
        fn = _build_command_function(descriptor, run)
        target.command(name=descriptor.name, help=escape(descriptor.help_text))(fn)

    if configuration.namespace:
        target.command(name="list", help="List all available endpoints.")(
            _build_list_command(configuration, descriptors)
        )
        target.command(name="call", help="Call an endpoint by its path.")(
            _build_call_command(parser, descriptors, run, command_name)
        )

    return target


def _namespace_help(configuration: CommandConfiguration, parser: OpenApiParser) -> str:
    title = parser.title()
    if title:
        return f"Commands for {title}."
    return f"Commands for the {configuration.namespace} API."


# ---------------------------------------------------------------------------
# Dynamic command function builder
# ---------------------------------------------------------------------------


def _build_command_function(descriptor: CommandDescriptor, run: Runner) -> Callable[..., Any]:
    """Generate a Typer-compatible function for *descriptor*.

    Typer reads parameter names, annotations and defaults through
    :func:`inspect.signature`, so the function source is built as a
    string, compiled, and executed into a namespace holding the
    annotation and default objects.  Path and query options are all
    optional strings at the Click level; missing path options are
    reported together by the executor.

    Args:
        descriptor: The command to build.
        run: Called with the descriptor and the collected
            :class:`InvocationInput`.

    Returns:
        A callable suitable for :meth:`typer.Typer.command`.
    """
    namespace: dict[str, Any] = {}
    sig_parts: list[str] = []
    used: set[str] = set()

    path_idents = _add_parameter_options(
        descriptor.path_options, "path", namespace, sig_parts, used, len(sig_parts)
    )
    query_idents = _add_parameter_options(
        descriptor.query_options, "query", namespace, sig_parts, used, len(sig_parts)
    )

    for idx, (ident, annotation, factory, _) in enumerate(_BUILTIN_OPTIONS):
        ann = f"_ann_builtin_{idx}"
        sentinel = f"_default_builtin_{idx}"
        namespace[ann] = annotation
        namespace[sentinel] = factory()
        sig_parts.append(f"{ident}: {ann} = {sentinel}")

    body_lines = ["    _path_values = {}"]
    for option, ident in zip(descriptor.path_options, path_idents):
        body_lines.append(f"    _path_values[{option.param_name!r}] = {ident}")
    body_lines.append("    _query_values = {}")
    for option, ident in zip(descriptor.query_options, query_idents):
        body_lines.append(f"    _query_values[{option.param_name!r}] = {ident}")

    body_lines.append("    _run(_descriptor, _InvocationInput(")
    body_lines.append("        path_values=_path_values,")
    body_lines.append("        query_values=_query_values,")
    for ident, _, _, field_name in _BUILTIN_OPTIONS:
        value = f"list({ident} or [])" if field_name == "fields" else ident
        body_lines.append(f"        {field_name}={value},")
    body_lines.append("    ))")

    func_name = "_cmd_" + option_to_identifier(descriptor.name)
    source = f"def {func_name}({', '.join(sig_parts)}):\n" + "\n".join(body_lines) + "\n"

    namespace["_run"] = run
    namespace["_descriptor"] = descriptor
    namespace["_InvocationInput"] = InvocationInput

    code = compile(source, f"<openapi-cli:{descriptor.qualified_name}>", "exec")
    exec(code, namespace)  # noqa: S102 -- controlled code generation
    fn = namespace[func_name]

    fn.__doc__ = descriptor.help_text
    fn.__name__ = func_name
    fn.__qualname__ = func_name
    return fn


def _add_parameter_options(
    options: tuple[CommandOption, ...],
    location: str,
    namespace: dict[str, Any],
    sig_parts: list[str],
    used: set[str],
    offset: int,
) -> list[str]:
    """Append one ``Optional[str]`` option per parameter; return the identifiers."""
    idents: list[str] = []
    for idx, option in enumerate(options, start=offset):
        ident = option_to_identifier(option.option_name)
        base, suffix = ident, 2
        while ident in used:
            ident = f"{base}_{suffix}"
            suffix += 1
        used.add(ident)
        idents.append(ident)

        ann = f"_ann_opt_{idx}"
        sentinel = f"_default_opt_{idx}"
        namespace[ann] = Optional[str]
        namespace[sentinel] = typer.Option(
            None,
            f"--{option.option_name}",
            help=escape(_option_help(option, location)),
            show_default=False,
        )
        sig_parts.append(f"{ident}: {ann} = {sentinel}")
    return idents


def _option_help(option: CommandOption, location: str) -> str:
    help_text = option.description or f"The '{option.param_name}' {location} parameter."
    if option.required:
        help_text += " (required)"
    return help_text


# ---------------------------------------------------------------------------
# Execution
# ---------------------------------------------------------------------------


def _make_runner(
    configuration: CommandConfiguration,
    parser: OpenApiParser,
    transport: Optional[Transport],
    command_name: str,
) -> Runner:
    """Return the function every generated command delegates to."""

    def _run(descriptor: CommandDescriptor, invocation: InvocationInput) -> None:
        output = get_output()
        executor = RequestExecutor(configuration, parser, transport=transport, output=output)
        try:
            result = executor.execute(descriptor, invocation)
        except OpenApiCliError as exc:
            report_error(exc, output)
            if isinstance(exc, MissingRequiredOptionError):
                invoked = current_command_path() or f"{command_name} {descriptor.qualified_name}"
                output.suggest(f"Run '{invoked} --help' for usage.")
            raise typer.Exit(code=exc.exit_code)
        if not result.success:
            raise typer.Exit(code=result.exit_code)

    return _run


def report_error(exc: OpenApiCliError, output: OutputManager) -> None:
    """Print a local error the way every command reports it."""
    if isinstance(exc, MissingRequiredOptionError):
        for message in exc.messages:
            output.error(message)
        return
    output.error(str(exc))
    if isinstance(exc, NetworkError) and exc.cause:
        output.info(f"  {exc.cause}")


# ---------------------------------------------------------------------------
# ``list`` and ``call``
# ---------------------------------------------------------------------------


def _build_list_command(
    configuration: CommandConfiguration,
    descriptors: list[CommandDescriptor],
) -> Callable[[], None]:
    lines = format_list_lines(build_list_entries(descriptors))

    def list_endpoints() -> None:
        """List all available endpoints."""
        output = get_output()
        show_banner(configuration, output)
        for line in lines:
            output.print_data(line)

    return list_endpoints


def show_banner(configuration: CommandConfiguration, output: OutputManager) -> None:
    """Print the registration's banner followed by a blank line, if one is set.

    A string banner is printed as-is; a callable banner receives the
    output manager and prints whatever it likes.
    """
    banner = configuration.banner
    if banner is None:
        return
    if callable(banner):
        banner(output)
    else:
        output.print_data(banner)
    output.print_data("")


def _build_call_command(
    parser: OpenApiParser,
    descriptors: list[CommandDescriptor],
    run: Runner,
    command_name: str,
) -> Callable[..., None]:
    def call(
        path: str = typer.Argument(..., help="Request path, e.g. /projects/42."),
        method: Optional[str] = typer.Option(
            None, "--method", "-X", help="HTTP method; needed when the path supports several."
        ),
        query: Optional[List[str]] = typer.Option(
            None, "--query", help="Query parameter as key=value. Repeatable."
        ),
        field: Optional[List[str]] = _field_option(),
        raw_input: Optional[str] = _input_option(),
        json_output: bool = _json_option(),
        yaml_output: bool = _yaml_option(),
        minify: bool = _minify_option(),
        include_headers: bool = _headers_option(),
        output_html: bool = _output_html_option(),
    ) -> None:
        """Call an endpoint by its path."""
        output = get_output()
        try:
            descriptor, path_values = resolve_endpoint(
                parser,
                descriptors,
                path,
                method=method,
                command_name=f"{command_name} {_namespace_of(descriptors)}".strip(),
            )
            query_values = parse_query_pairs(query or [])
        except OpenApiCliError as exc:
            report_error(exc, output)
            raise typer.Exit(code=exc.exit_code)

        output.debug(
            f"Resolved {path} to {descriptor.method.upper()} {descriptor.path_template}"
        )
        run(
            descriptor,
            InvocationInput(
                path_values=path_values,
                query_values=query_values,
                fields=list(field or []),
                raw_input=raw_input,
                json_output=json_output,
                yaml_output=yaml_output,
                minify=minify,
                include_headers=include_headers,
                output_html=output_html,
            ),
        )

    return call


def _namespace_of(descriptors: list[CommandDescriptor]) -> str:
    return descriptors[0].namespace if descriptors else ""


def parse_query_pairs(values: list[str]) -> dict[str, str]:
    """Turn ``--query key=value`` values into a mapping.

    Raises:
        InputValidationError: If a value has no ``=``.
    """
    pairs: dict[str, str] = {}
    for raw in values:
        if "=" not in raw:
            raise InputValidationError(f"Invalid query '{raw}'. Use key=value.")
        key, value = raw.split("=", 1)
        pairs[key] = value
    return pairs


def current_command_path() -> str:
    """The full command path of the running Click context, for hints."""
    ctx = click.get_current_context(silent=True)
    return ctx.command_path if ctx is not None else ""
