"""Match concrete request paths against OpenAPI path templates.

Used by the ``call`` command, which takes a literal path such as
``projects/123`` instead of a generated command name.  Every template that
matches is returned so ambiguity can be reported; exact (parameter-free)
templates sort first so ``/projects/active`` wins over ``/projects/{id}``.
"""

from __future__ import annotations

import re
from typing import Iterable, Mapping

from openapi_cli.models import PathMatch

_PLACEHOLDER_RE = re.compile(r"\{([^}]+)\}")
_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class PathPattern:
    """A compiled path template.

    Args:
        template: An OpenAPI path template such as ``/projects/{id}``.

    Attributes:
        template: The original template.
        regex: The anchored, compiled pattern.
        groups: Mapping of regex group name to parameter name.  They only
            differ when the parameter name is not a Python identifier.
    """

    def __init__(self, template: str) -> None:
        self.template = template
        self.groups: dict[str, str] = {}
        self.regex = re.compile(self._build(template))

    def _build(self, template: str) -> str:
        parts: list[str] = []
        position = 0
        for index, match in enumerate(_PLACEHOLDER_RE.finditer(template)):
            parts.append(re.escape(template[position:match.start()]))
            name = match.group(1)
            group = name if _IDENTIFIER_RE.match(name) and name not in self.groups else f"p{index}"
            self.groups[group] = name
            parts.append(f"(?P<{group}>[^/]+)")
            position = match.end()
        parts.append(re.escape(template[position:]))
        body = "".join(parts).rstrip("/")
        return f"^{body}/?$"

    def match(self, path: str) -> dict[str, str] | None:
        """Return the extracted parameters, or ``None`` when *path* does not match."""
        found = self.regex.match(path)
        if found is None:
            return None
        return {self.groups[group]: value for group, value in found.groupdict().items()}


def convert_to_regex(template: str) -> re.Pattern[str]:
    """Compile *template* into an anchored pattern.

    Static text is escaped, each ``{name}`` becomes a named group matching
    one or more non-slash characters, and a trailing slash is optional.

    Example::

        >>> convert_to_regex("/projects/{id}").match("/projects/42").group("id")
        '42'
    """
    return PathPattern(template).regex


def match_path(user_input: str, spec_paths: Mapping[str, Iterable[str]]) -> list[PathMatch]:
    """Match *user_input* against every template in *spec_paths*.

    Args:
        user_input: A concrete path; leading and trailing slashes are
            normalised to a single leading slash.
        spec_paths: ``{template: [verb, ...]}`` as returned by
            :meth:`~openapi_cli.parser.query.OpenApiParser.paths_with_methods`.

    Returns:
        All matches, exact matches first, otherwise in declaration order.
    """
    normalized = "/" + user_input.strip("/")
    matches: list[PathMatch] = []

    for template, methods in spec_paths.items():
        parameters = PathPattern(template).match(normalized)
        if parameters is None:
            continue
        matches.append(
            PathMatch(
                path=template,
                parameters=parameters,
                methods=[method.upper() for method in methods],
                is_exact=not parameters,
            )
        )

    # sorted() is stable, so declaration order survives within each group.
    return sorted(matches, key=lambda match: not match.is_exact)


def check_ambiguity(matches: list[PathMatch], command_name: str) -> tuple[bool, str | None]:
    """Report whether *matches* is ambiguous.

    Returns:
        ``(False, None)`` for zero or one match, otherwise ``(True,
        message)`` where the message lists every candidate path with its
        methods and suggests ``--method``.
    """
    if len(matches) <= 1:
        return False, None

    lines = ["Ambiguous endpoint. Multiple paths match your input:", ""]
    for match in matches:
        lines.append(f"  {match.path} ({', '.join(match.methods)})")
    lines.append("")
    lines.append("Please specify which HTTP method you want to use with the --method flag:")
    lines.append(f"Example: {command_name} call <path> --method POST")
    return True, "\n".join(lines)
