"""ANSI colouring of rendered response text.

JSON and YAML are tokenised with Rich's :class:`~rich.syntax.Syntax`
(Pygments lexers) and rendered to an ANSI string.  The Markdown-like text
produced by :class:`~openapi_cli.formatting.human.HumanReadableFormatter`
is coloured line by line:

* ``# Heading`` -- bold cyan
* ``| --- |`` separators -- dim
* table pipes -- dim
* ``- `` bullet markers -- yellow
* ``Key:`` labels -- green

A disabled highlighter returns its input unchanged.
"""

from __future__ import annotations

import re

from rich.console import Console
from rich.syntax import Syntax

RESET = "\033[0m"
BOLD_CYAN = "\033[1;36m"
DIM = "\033[2m"
YELLOW = "\033[33m"
GREEN = "\033[32m"

_HEADING_RE = re.compile(r"^(#{1,6})\s+(.+)$")
_SEPARATOR_RE = re.compile(r"^\|[\s\-|]+\|$")
_ROW_RE = re.compile(r"^\|.*\|$")
_BULLET_RE = re.compile(r"^(-\s)(.+)$")
_KEY_VALUE_RE = re.compile(r"^([^:]+):\s(.+)$")

_ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")


def strip_ansi(text: str) -> str:
    """Remove ANSI SGR sequences from *text*."""
    return _ANSI_RE.sub("", text)


class OutputHighlighter:
    """Colour rendered output for a terminal.

    Args:
        enabled: When ``False`` every method is the identity function.
    """

    def __init__(self, enabled: bool = True) -> None:
        self.enabled = enabled

    def highlight_json(self, text: str) -> str:
        """Colour JSON text."""
        return self._syntax(text, "json")

    def highlight_yaml(self, text: str) -> str:
        """Colour YAML text."""
        return self._syntax(text, "yaml")

    def highlight_human(self, text: str) -> str:
        """Colour human-readable formatter output line by line."""
        if not self.enabled:
            return text
        return "\n".join(_highlight_line(line) for line in text.split("\n"))

    def _syntax(self, text: str, lexer: str) -> str:
        if not self.enabled:
            return text
        syntax = Syntax(text, lexer, theme="ansi_dark", background_color="default")
        console = Console(force_terminal=True, color_system="standard", soft_wrap=True)
        highlighted = syntax.highlight(text)
        highlighted.rstrip()
        with console.capture() as capture:
            console.print(highlighted, end="")
        return capture.get()


def _highlight_line(line: str) -> str:
    heading = _HEADING_RE.match(line)
    if heading:
        return f"{BOLD_CYAN}{heading.group(1)} {heading.group(2)}{RESET}"

    if _SEPARATOR_RE.match(line):
        return f"{DIM}{line}{RESET}"

    if _ROW_RE.match(line):
        return line.replace("|", f"{DIM}|{RESET}")

    bullet = _BULLET_RE.match(line)
    if bullet:
        return f"{YELLOW}{bullet.group(1)}{RESET}{bullet.group(2)}"

    key_value = _KEY_VALUE_RE.match(line)
    if key_value:
        return f"{GREEN}{key_value.group(1)}:{RESET} {key_value.group(2)}"

    return line
