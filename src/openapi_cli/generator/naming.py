"""Derive CLI command and option names from OpenAPI paths and parameters.

Every function in this module is a pure string transformation.  The
:mod:`~openapi_cli.generator.planner` combines them into the command naming
and collision policy:

* :func:`from_path` -- ``GET /projects/{id}/errors`` becomes
  ``get-projects-errors``.
* :func:`from_path_disambiguated` -- keeps a trailing ``{param}``
  (``delete-teams-users-user-id``) and is only used when two operations
  share a :func:`from_path` name.
* :func:`from_operation_id` -- ``getHTTPErrors`` becomes ``get-http-errors``.
* :func:`parameter_to_option_name` / :func:`query_param_to_option_name` --
  ``--option`` names for path and query parameters.
* :func:`option_to_identifier` -- the Python identifier used for the
  parameter of the generated command function.
"""

from __future__ import annotations

import keyword
import re

# A path segment that is entirely a ``{param}`` placeholder.
_PARAM_SEGMENT_RE = re.compile(r"^\{(.+)\}$")

# ``key[sub]`` bracket notation, innermost first.
_BRACKET_RE = re.compile(r"\[([^\[\]]*)\]")

# Anything that may not appear in an option name.
_OPTION_JUNK_RE = re.compile(r"[^A-Za-z0-9-]+")

# Matches any character that is not alphanumeric or underscore.
_INVALID_IDENT_RE = re.compile(r"[^a-zA-Z0-9_]")


def from_path(method: str, path: str) -> str:
    """Build a command name from an HTTP method and a path template.

    Placeholder segments are dropped, the remaining segments are joined with
    dashes, and underscores and dots become dashes.  The path keeps its
    case; the method is lowercased.

    Example::

        >>> from_path("GET", "/projects/{project_id}/errors")
        'get-projects-errors'
        >>> from_path("GET", "/")
        'get'
    """
    segments = [
        segment
        for segment in path.split("/")
        if segment and not _PARAM_SEGMENT_RE.match(segment)
    ]
    return _join(method, segments)


def from_path_disambiguated(method: str, path: str) -> str:
    """Like :func:`from_path`, but keep a trailing ``{param}`` segment.

    The trailing placeholder is converted with
    :func:`parameter_to_option_name`; placeholders anywhere else are still
    dropped.

    Example::

        >>> from_path_disambiguated("DELETE", "/teams/{team_id}/users/{user_id}")
        'delete-teams-users-user-id'
    """
    raw = [segment for segment in path.split("/") if segment]
    segments: list[str] = []
    for index, segment in enumerate(raw):
        match = _PARAM_SEGMENT_RE.match(segment)
        if match is None:
            segments.append(segment)
        elif index == len(raw) - 1:
            segments.append(parameter_to_option_name(match.group(1)))
    return _join(method, segments)


def from_operation_id(operation_id: str) -> str:
    """Convert an ``operationId`` to a kebab-case command name.

    Splits lower-to-upper boundaries and acronym runs followed by a
    capitalised word, lowercases, and turns underscores into dashes.

    Example::

        >>> from_operation_id("getHTTPErrors")
        'get-http-errors'
        >>> from_operation_id("get_projects")
        'get-projects'
    """
    result = re.sub(r"([a-z])([A-Z])", r"\1-\2", operation_id)
    result = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1-\2", result)
    return result.lower().replace("_", "-")


def parameter_to_option_name(name: str) -> str:
    """Convert a camelCase or snake_case parameter name to kebab-case.

    Example::

        >>> parameter_to_option_name("projectId")
        'project-id'
    """
    result = re.sub(r"([a-z])([A-Z])", r"\1-\2", name)
    return result.lower().replace("_", "-")


def query_param_to_option_name(name: str) -> str:
    """Convert a query parameter name to a CLI-safe option name.

    Bracket notation is flattened (``page[size]`` becomes ``page-size``,
    nested brackets included).  Every run of characters outside
    ``[A-Za-z0-9-]`` then collapses to one dash, repeated dashes collapse,
    and leading or trailing dashes are trimmed before
    :func:`parameter_to_option_name` is applied.

    The original name is still what goes on the wire; this is only the
    CLI surface.

    Example::

        >>> query_param_to_option_name("filter[exception_message]")
        'filter-exception-message'
        >>> query_param_to_option_name("filter[p95:>=]")
        'filter-p95'
    """
    flattened = name
    while True:
        replaced = _BRACKET_RE.sub(r"-\1", flattened)
        if replaced == flattened:
            break
        flattened = replaced

    # Underscores survive here so the camel/snake conversion sees them.
    cleaned = re.sub(r"[^A-Za-z0-9_-]+", "-", flattened)
    cleaned = re.sub(r"-{2,}", "-", cleaned).strip("-")
    option = parameter_to_option_name(cleaned)
    option = _OPTION_JUNK_RE.sub("-", option)
    return re.sub(r"-{2,}", "-", option).strip("-")


def option_to_identifier(option_name: str) -> str:
    """Convert an option name to a valid Python identifier.

    Used for the parameters of the generated command functions, so the
    result must be a legal, non-keyword identifier.

    Example::

        >>> option_to_identifier("project-id")
        'project_id'
        >>> option_to_identifier("class")
        'class_'
        >>> option_to_identifier("2fa")
        '_2fa'
    """
    result = option_name.lower().replace("-", "_").replace(".", "_")
    result = _INVALID_IDENT_RE.sub("_", result)
    result = re.sub(r"_+", "_", result).strip("_")
    if not result:
        result = "param"
    if result[0].isdigit():
        result = f"_{result}"
    if keyword.iskeyword(result):
        result = f"{result}_"
    return result


def _join(method: str, segments: list[str]) -> str:
    method = method.lower()
    path_part = "-".join(segments).replace("_", "-").replace(".", "-")
    return f"{method}-{path_part}" if path_part else method
