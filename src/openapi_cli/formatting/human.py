"""Render decoded JSON as terminal-friendly, Markdown-like text.

:class:`HumanReadableFormatter` classifies a value once into a
:class:`Shape` and dispatches on it:

==================  =====================================================
Shape               Rendering
==================  =====================================================
SCALAR              ``(empty)`` for null, ``Yes``/``No``, else ``str()``
EMPTY_MAP           ``(empty)``
EMPTY_LIST          ``(empty list)``
SIMPLE_OBJECT       headerless ``| Key | value |`` table, or ``Key: value``
                    lines when the table is wider than the terminal
NESTED_OBJECT       one ``#`` heading per key with the value beneath it
SCALAR_LIST         ``- value`` bullets
HOMOGENEOUS_TABLE   table with a header row, falling back to cards and then
                    to ``Key: value`` blocks as the terminal narrows
HETEROGENEOUS_LIST  ``# Item N`` headings
==================  =====================================================

Beyond :data:`MAX_DEPTH` levels the remaining subtree is printed as
compact JSON.  Formatting is pure: the input is never mutated and the same
``(value, depth, width)`` always yields the same text.
"""

from __future__ import annotations

import enum
import json
import re
from typing import Any, Optional

MAX_DEPTH = 4

ABBREVIATIONS: dict[str, str] = {
    "id": "ID",
    "url": "URL",
    "uri": "URI",
    "api": "API",
    "ip": "IP",
    "uuid": "UUID",
    "html": "HTML",
    "css": "CSS",
    "json": "JSON",
    "xml": "XML",
    "sql": "SQL",
    "http": "HTTP",
    "https": "HTTPS",
    "ssh": "SSH",
    "ftp": "FTP",
    "cpu": "CPU",
    "gpu": "GPU",
    "ram": "RAM",
    "os": "OS",
    "io": "IO",
}


class Shape(enum.Enum):
    """Layout class of a decoded JSON value."""

    SCALAR = "scalar"
    EMPTY_MAP = "empty_map"
    EMPTY_LIST = "empty_list"
    SIMPLE_OBJECT = "simple_object"
    NESTED_OBJECT = "nested_object"
    SCALAR_LIST = "scalar_list"
    HOMOGENEOUS_TABLE = "homogeneous_table"
    HETEROGENEOUS_LIST = "heterogeneous_list"


def classify(value: Any) -> Shape:
    """Return the :class:`Shape` of *value*."""
    if isinstance(value, dict):
        if not value:
            return Shape.EMPTY_MAP
        if any(_is_structured(v) for v in value.values()):
            return Shape.NESTED_OBJECT
        return Shape.SIMPLE_OBJECT
    if isinstance(value, (list, tuple)):
        if not value:
            return Shape.EMPTY_LIST
        if not any(_is_structured(item) for item in value):
            return Shape.SCALAR_LIST
        if _is_homogeneous(value):
            return Shape.HOMOGENEOUS_TABLE
        return Shape.HETEROGENEOUS_LIST
    return Shape.SCALAR


def humanize_key(key: str) -> str:
    """Turn an API key into a Title Case label.

    Example::

        >>> humanize_key("created_at")
        'Created At'
        >>> humanize_key("projectId")
        'Project ID'
        >>> humanize_key("api_key")
        'API Key'
    """
    whole = ABBREVIATIONS.get(key.lower())
    if whole is not None:
        return whole

    spaced = re.sub(r"([a-z])([A-Z])", r"\1 \2", key)
    spaced = spaced.replace("_", " ").replace("-", " ")
    return " ".join(
        ABBREVIATIONS.get(word.lower(), word[:1].upper() + word[1:].lower())
        for word in spaced.split(" ")
    )


def format_scalar(value: Any) -> str:
    """Format a non-structured value."""
    if value is None:
        return "(empty)"
    if isinstance(value, bool):
        return "Yes" if value else "No"
    return str(value)


def compact_json(value: Any) -> str:
    """Encode *value* as single-line JSON."""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str)


class HumanReadableFormatter:
    """Format decoded JSON for a terminal of a given width.

    Args:
        terminal_width: Available columns.  ``None`` disables every
            width-based fallback.

    Example::

        >>> HumanReadableFormatter().format({"id": 1, "name": "Foo"})
        '| ID   | 1   |\\n| Name | Foo |'
    """

    def __init__(self, terminal_width: Optional[int] = None) -> None:
        self.terminal_width = terminal_width

    def format(self, value: Any, depth: int = 0) -> str:
        """Render *value* at nesting level *depth*."""
        if depth >= MAX_DEPTH:
            return compact_json(value)

        shape = classify(value)
        if shape is Shape.SCALAR:
            return format_scalar(value)
        if shape is Shape.EMPTY_MAP:
            return "(empty)"
        if shape is Shape.EMPTY_LIST:
            return "(empty list)"
        if shape is Shape.SIMPLE_OBJECT:
            return self._format_simple_object(value)
        if shape is Shape.NESTED_OBJECT:
            return self._format_nested_object(value, depth)
        if shape is Shape.SCALAR_LIST:
            return "\n".join(f"- {format_scalar(item)}" for item in value)
        if shape is Shape.HOMOGENEOUS_TABLE:
            return self._format_table(value)
        return self._format_heterogeneous_list(value, depth)

    # ------------------------------------------------------------------ #
    # Objects
    # ------------------------------------------------------------------ #

    def _format_simple_object(self, data: dict[str, Any]) -> str:
        pairs = [(humanize_key(str(key)), format_scalar(value)) for key, value in data.items()]
        table = _key_value_table(pairs)
        if self._fits(table):
            return "\n".join(table)
        return "\n".join(f"{key}: {value}" for key, value in pairs)

    def _format_nested_object(self, data: dict[str, Any], depth: int) -> str:
        prefix = "#" * min(depth + 1, 6)
        sections = []
        for key, value in data.items():
            if _is_structured(value):
                body = self.format(value, depth + 1)
            else:
                body = format_scalar(value)
            sections.append(f"{prefix} {humanize_key(str(key))}\n\n{body}")
        return "\n\n".join(sections)

    # ------------------------------------------------------------------ #
    # Lists
    # ------------------------------------------------------------------ #

    def _format_table(self, items: list[dict[str, Any]]) -> str:
        keys = list(items[0])
        headers = [humanize_key(str(key)) for key in keys]
        rows = [[_cell(item.get(key)) for key in keys] for item in items]

        widths = [len(header) for header in headers]
        for row in rows:
            for index, cell in enumerate(row):
                widths[index] = max(widths[index], len(cell))

        lines = [
            _table_line(headers, widths),
            _table_line(["-" * width for width in widths], widths),
        ]
        lines.extend(_table_line(row, widths) for row in rows)
        if self._fits(lines):
            return "\n".join(lines)

        return self._format_cards(headers, rows)

    def _format_cards(self, headers: list[str], rows: list[list[str]]) -> str:
        cards = [_key_value_table(list(zip(headers, row))) for row in rows]
        if all(self._fits(card) for card in cards):
            return _join_with_rule(cards, self.terminal_width)

        blocks = [[f"{header}: {cell}" for header, cell in zip(headers, row)] for row in rows]
        return _join_with_rule(blocks, self.terminal_width)

    def _format_heterogeneous_list(self, items: list[Any], depth: int) -> str:
        prefix = "#" * min(depth + 1, 6)
        return "\n\n".join(
            f"{prefix} Item {number}\n\n{self.format(item, depth + 1)}"
            for number, item in enumerate(items, start=1)
        )

    def _fits(self, lines: list[str]) -> bool:
        if self.terminal_width is None:
            return True
        return max((len(line) for line in lines), default=0) <= self.terminal_width


# ------------------------------------------------------------------ #
# Helpers
# ------------------------------------------------------------------ #


def _is_structured(value: Any) -> bool:
    return isinstance(value, (dict, list, tuple))


def _is_homogeneous(items: list[Any]) -> bool:
    """All items are non-empty maps sharing the same key set."""
    first: Optional[list[str]] = None
    for item in items:
        if not isinstance(item, dict) or not item:
            return False
        keys = sorted(str(key) for key in item)
        if first is None:
            first = keys
        elif keys != first:
            return False
    return True


def _cell(value: Any) -> str:
    if _is_structured(value):
        return compact_json(value)
    return format_scalar(value)


def _table_line(cells: list[str], widths: list[int]) -> str:
    return "| " + " | ".join(cell.ljust(width) for cell, width in zip(cells, widths)) + " |"


def _key_value_table(pairs: list[tuple[str, str]]) -> list[str]:
    key_width = max(len(key) for key, _ in pairs)
    value_width = max(len(value) for _, value in pairs)
    return [_table_line([key, value], [key_width, value_width]) for key, value in pairs]


def _join_with_rule(blocks: list[list[str]], terminal_width: Optional[int]) -> str:
    longest = max(len(line) for block in blocks for line in block)
    if terminal_width is not None:
        longest = min(longest, terminal_width)
    rule = "-" * max(longest, 3)
    return f"\n{rule}\n".join("\n".join(block) for block in blocks)
