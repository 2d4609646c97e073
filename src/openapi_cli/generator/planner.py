"""Plan the commands of one spec registration.

The planner turns an :class:`~openapi_cli.parser.query.OpenApiParser` and
a :class:`~openapi_cli.models.CommandConfiguration` into immutable
:class:`~openapi_cli.models.CommandDescriptor` objects, one per operation.
It owns the naming policy:

1. Every operation gets a name from :func:`~openapi_cli.generator.naming.from_path`,
   or from its ``operationId`` when the registration asks for that.
2. Names shared by two or more operations are regenerated for the whole
   group with :func:`~openapi_cli.generator.naming.from_path_disambiguated`.
3. Any collision left after that, or a clash with a built-in command name,
   raises :class:`~openapi_cli.exceptions.CommandCollisionError`.

It also prepares the rows of the ``list`` command and resolves literal
paths for the ``call`` command.
"""

from __future__ import annotations

import re
from collections import Counter
from typing import Optional

from openapi_cli.exceptions import (
    AmbiguousEndpointError,
    CommandCollisionError,
    InputValidationError,
)
from openapi_cli.generator.naming import (
    from_operation_id,
    from_path,
    from_path_disambiguated,
    parameter_to_option_name,
    query_param_to_option_name,
)
from openapi_cli.generator.path_matcher import check_ambiguity, match_path
from openapi_cli.models import (
    CommandConfiguration,
    CommandDescriptor,
    CommandOption,
    ListEntry,
)
from openapi_cli.parser.query import OpenApiParser

# Command names the CLI wiring adds to every namespace.
RESERVED_COMMAND_NAMES = frozenset({"list", "call"})

# Flags every generated command carries besides its parameter options.
BUILTIN_OPTION_NAMES = frozenset(
    {"field", "input", "json", "yaml", "minify", "headers", "output-html", "help"}
)

_METHOD_ORDER = {"GET": 1, "POST": 2, "PUT": 3, "PATCH": 4, "DELETE": 5}

_PLACEHOLDER_RE = re.compile(r"\{([^}]+)\}")


# ------------------------------------------------------------------ #
# Command planning
# ------------------------------------------------------------------ #


def plan_commands(
    parser: OpenApiParser,
    configuration: CommandConfiguration,
) -> list[CommandDescriptor]:
    """Build one :class:`CommandDescriptor` per operation.

    Path options are required; query options are always optional because
    leaving one out simply leaves that filter off the request.

    Args:
        parser: The query facade of the registration's spec.
        configuration: The frozen registration configuration.

    Returns:
        Descriptors in spec declaration order.

    Raises:
        CommandCollisionError: If two operations still share a name after
            disambiguation, or a name clashes with a built-in command.
    """
    operations = [
        (path, method)
        for path, methods in parser.paths_with_methods().items()
        for method in methods
    ]

    names = [
        _base_name(parser, configuration, path, method) for path, method in operations
    ]
    counts = Counter(names)
    names = [
        from_path_disambiguated(method, path) if counts[name] > 1 else name
        for name, (path, method) in zip(names, operations)
    ]
    _check_collisions(names, operations, configuration.namespace)

    return [
        _build_descriptor(parser, configuration.namespace, name, path, method)
        for name, (path, method) in zip(names, operations)
    ]


def _base_name(
    parser: OpenApiParser,
    configuration: CommandConfiguration,
    path: str,
    method: str,
) -> str:
    if configuration.use_operation_ids:
        operation_id = parser.operation_id(path, method)
        if operation_id:
            return from_operation_id(operation_id)
    return from_path(method, path)


def _check_collisions(
    names: list[str],
    operations: list[tuple[str, str]],
    namespace: str,
) -> None:
    seen: dict[str, tuple[str, str]] = {}
    for name, (path, method) in zip(names, operations):
        if namespace and name in RESERVED_COMMAND_NAMES:
            raise CommandCollisionError(
                f"Command name '{name}' for {method.upper()} {path} "
                "clashes with a built-in command."
            )
        if name in seen:
            other_path, other_method = seen[name]
            raise CommandCollisionError(
                f"Command name '{name}' is generated for both "
                f"{other_method.upper()} {other_path} and {method.upper()} {path}."
            )
        seen[name] = (path, method)


def _build_descriptor(
    parser: OpenApiParser,
    namespace: str,
    name: str,
    path: str,
    method: str,
) -> CommandDescriptor:
    path_options: list[CommandOption] = []
    declared: set[str] = set()
    for param in parser.path_parameters(path, method):
        declared.add(param.name)
        path_options.append(
            CommandOption(
                param_name=param.name,
                option_name=parameter_to_option_name(param.name),
                required=True,
                description=param.description,
            )
        )
    # Placeholders the spec forgot to declare still need a value.
    for placeholder in _PLACEHOLDER_RE.findall(path):
        if placeholder not in declared:
            declared.add(placeholder)
            path_options.append(
                CommandOption(
                    param_name=placeholder,
                    option_name=parameter_to_option_name(placeholder),
                    required=True,
                )
            )

    query_options = tuple(
        CommandOption(
            param_name=param.name,
            option_name=query_param_to_option_name(param.name),
            required=False,
            description=param.description,
        )
        for param in parser.query_parameters(path, method)
    )

    path_options, query_options = _settle_option_names(
        f"{method.upper()} {path}", path_options, list(query_options)
    )

    return CommandDescriptor(
        name=name,
        namespace=namespace,
        method=method.lower(),
        path_template=path,
        path_options=tuple(path_options),
        query_options=tuple(query_options),
        summary=parser.operation_summary(path, method),
        description=parser.operation_description(path, method),
        operation_id=parser.operation_id(path, method),
    )


def _settle_option_names(
    operation: str,
    path_options: list[CommandOption],
    query_options: list[CommandOption],
) -> tuple[list[CommandOption], list[CommandOption]]:
    """Keep parameter flags clear of the built-in flags and of each other.

    A parameter whose flag would shadow a built-in one is exposed as
    ``--path-<name>`` / ``--query-<name>`` instead.

    Raises:
        CommandCollisionError: If two parameters of *operation* still end
            up with the same flag.
    """
    seen: dict[str, str] = {}
    settled: dict[str, list[CommandOption]] = {"path": [], "query": []}
    for location, options in (("path", path_options), ("query", query_options)):
        for option in options:
            option_name = option.option_name or "param"
            if option_name in BUILTIN_OPTION_NAMES:
                option_name = f"{location}-{option_name}"
            if option_name in seen:
                raise CommandCollisionError(
                    f"Parameters '{seen[option_name]}' and '{option.param_name}' of "
                    f"{operation} both map to the option --{option_name}."
                )
            seen[option_name] = option.param_name
            settled[location].append(option.model_copy(update={"option_name": option_name}))
    return settled["path"], settled["query"]


# ------------------------------------------------------------------ #
# Listing
# ------------------------------------------------------------------ #


def method_sort_order(method: str) -> int:
    """Position of *method* in the listing; unknown verbs sort last."""
    return _METHOD_ORDER.get(method.upper(), 999)


def build_list_entries(descriptors: list[CommandDescriptor]) -> list[ListEntry]:
    """Rows of the ``list`` command, sorted by path then method order.

    The description is the summary, else the description, else empty.
    """
    entries = [
        ListEntry(
            method=descriptor.method.upper(),
            path=descriptor.path_template,
            command=descriptor.name,
            description=descriptor.summary or descriptor.description or "",
        )
        for descriptor in descriptors
    ]
    # Stable sort keeps declaration order for verbs outside the fixed order.
    return sorted(entries, key=lambda e: (e.path, method_sort_order(e.method)))


def format_list_lines(entries: list[ListEntry]) -> list[str]:
    """Pad the method and command columns to their widest value.

    Example::

        GET     get-projects     List projects
        DELETE  delete-projects  Delete a project
    """
    if not entries:
        return []
    method_width = max(len(entry.method) for entry in entries)
    command_width = max(len(entry.command) for entry in entries)
    return [
        f"{entry.method.ljust(method_width)}  "
        f"{entry.command.ljust(command_width)}  {entry.description}".rstrip()
        for entry in entries
    ]


# ------------------------------------------------------------------ #
# Path-based resolution
# ------------------------------------------------------------------ #


def resolve_endpoint(
    parser: OpenApiParser,
    descriptors: list[CommandDescriptor],
    input_path: str,
    method: Optional[str] = None,
    command_name: str = "openapi-cli",
) -> tuple[CommandDescriptor, dict[str, str]]:
    """Find the operation a literal request path refers to.

    Exact templates win over parameterised ones.  Without ``method`` the
    verb is the only one declared for the path, else ``GET`` when declared.

    Args:
        parser: The query facade of the registration's spec.
        descriptors: The planned commands of that registration.
        input_path: A concrete path such as ``projects/42``.
        method: Optional HTTP verb (any case).
        command_name: Used in the ambiguity hint.

    Returns:
        The matching descriptor and the path values extracted from
        *input_path*, keyed by parameter name.

    Raises:
        InputValidationError: If nothing matches or the verb is not declared.
        AmbiguousEndpointError: If several routes remain.
    """
    matches = match_path(input_path, parser.paths_with_methods())
    if not matches:
        raise InputValidationError(f"No endpoint matches path: /{input_path.strip('/')}")

    wanted = method.upper() if method else None
    if wanted is not None:
        matches = [match for match in matches if wanted in match.methods]
        if not matches:
            raise InputValidationError(
                f"Method {wanted} is not available for path: /{input_path.strip('/')}"
            )

    exact = [match for match in matches if match.is_exact]
    candidates = exact or matches
    is_ambiguous, message = check_ambiguity(candidates, command_name)
    if is_ambiguous:
        raise AmbiguousEndpointError(message or "Ambiguous endpoint.")

    match = candidates[0]
    if wanted is None:
        if len(match.methods) == 1:
            wanted = match.methods[0]
        elif "GET" in match.methods:
            wanted = "GET"
        else:
            raise AmbiguousEndpointError(
                f"Path {match.path} supports {', '.join(match.methods)}. "
                "Please specify one with --method."
            )

    for descriptor in descriptors:
        if descriptor.path_template == match.path and descriptor.method.upper() == wanted:
            return descriptor, dict(match.parameters)

    raise InputValidationError(f"Method {wanted} is not available for path: {match.path}")
