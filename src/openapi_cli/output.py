"""Output system with strict stdout/stderr discipline.

Follows `clig.dev <https://clig.dev/>`_ conventions:

* **stdout** -- primary data only (rendered API responses, the ``list``
  table). This is what downstream tools pipe and parse.
* **stderr** -- all diagnostics (errors, HTTP status lines, suggestions,
  request debug output). Never contaminates the data stream.
* **TTY detection** -- ANSI highlighting only when stdout is an interactive
  terminal.
* **Colour control** -- respects ``NO_COLOR``, ``TERM=dumb``, and the
  ``--no-color`` CLI flag.

The module exposes two layers:

1. :class:`OutputManager` -- a stateful object holding the Rich consoles
   and quiet/verbose flags. Created once in
   :func:`~openapi_cli.app.main_callback` and installed via
   :func:`set_output`.
2. Module-level convenience functions (:func:`error`, :func:`debug`) that
   delegate to the global ``OutputManager`` instance so callers do not
   need to pass the manager around.
"""

from __future__ import annotations

import os
import sys
from typing import Optional

from rich.console import Console
from rich.markup import escape


class OutputManager:
    """Central manager for all CLI output with stdout/stderr discipline.

    Maintains two Rich :class:`~rich.console.Console` instances -- one for
    stdout (data) and one for stderr (diagnostics) -- and routes every
    output call to the correct stream.

    Args:
        no_color: Disable all colour and Rich markup.
        quiet: Suppress non-essential informational messages on stderr.
        verbose: Enable debug-level messages on stderr.
        width: Fixed terminal width.  When ``None`` the width is detected
            by Rich (``COLUMNS``, the terminal, or 80 columns).
    """

    def __init__(
        self,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
        width: Optional[int] = None,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose
        self._width = width

        # Console for stdout (data output)
        self._stdout = Console(file=sys.stdout, no_color=self._no_color, width=width)

        # Console for stderr (diagnostics)
        self._stderr = Console(
            file=sys.stderr,
            no_color=self._no_color,
            stderr=True,
            width=width,
        )

    @property
    def is_verbose(self) -> bool:
        """Whether verbose mode is enabled."""
        return self._verbose

    @property
    def no_color(self) -> bool:
        """Whether colour output is disabled."""
        return self._no_color

    @property
    def terminal_width(self) -> int:
        """Width available for rendering data on stdout."""
        if self._width is not None:
            return self._width
        return self._stdout.width

    @property
    def is_decorated(self) -> bool:
        """Whether data written to stdout may carry ANSI colour codes."""
        return not self._no_color and _is_tty()

    # ------------------------------------------------------------------ #
    # Data output (stdout)
    # ------------------------------------------------------------------ #

    def print_data(self, text: str) -> None:
        """Print raw text to stdout.

        The text is written verbatim (no Rich markup processing), so
        pre-rendered ANSI sequences pass through untouched.

        Args:
            text: The string to write. A trailing newline is appended.
        """
        print(text, file=sys.stdout, flush=True)

    # ------------------------------------------------------------------ #
    # Diagnostics (stderr)
    # ------------------------------------------------------------------ #

    def info(self, message: str) -> None:
        """Print an informational message to stderr. Suppressed by ``--quiet``.

        Args:
            message: The message text.
        """
        if not self._quiet:
            if self._no_color:
                print(message, file=sys.stderr, flush=True)
            else:
                self._stderr.print(escape(message), soft_wrap=True)

    def error(self, message: str) -> None:
        """Print a bold-red error to stderr. Never suppressed.

        Args:
            message: The error text.
        """
        if self._no_color:
            print(f"Error: {message}", file=sys.stderr, flush=True)
        else:
            self._stderr.print(f"[bold red]Error:[/bold red] {escape(message)}", soft_wrap=True)

    def alert(self, message: str) -> None:
        """Print a bold-red line and a blank line to stderr, without the ``Error:`` prefix.

        Used for HTTP status lines such as ``HTTP 404 Error``. Never
        suppressed.

        Args:
            message: The line to print.
        """
        if self._no_color:
            print(f"{message}\n", file=sys.stderr, flush=True)
        else:
            self._stderr.print(f"[bold red]{escape(message)}[/bold red]\n", soft_wrap=True)

    def suggest(self, message: str) -> None:
        """Print a dimmed next-step suggestion to stderr. Suppressed by ``--quiet``.

        Args:
            message: The suggestion text (prefixed with an arrow on output).
        """
        if not self._quiet:
            formatted = f"→ {message}"
            if self._no_color:
                print(formatted, file=sys.stderr, flush=True)
            else:
                self._stderr.print(f"[dim]{escape(formatted)}[/dim]", soft_wrap=True)

    def debug(self, message: str) -> None:
        """Print a debug message to stderr. Only shown when ``--verbose`` is active.

        Args:
            message: The debug text (prefixed with ``[debug]`` on output).
        """
        if self._verbose:
            if self._no_color:
                print(f"[debug] {message}", file=sys.stderr, flush=True)
            else:
                self._stderr.print(f"[dim]{escape(f'[debug] {message}')}[/dim]", soft_wrap=True)

    def debug_block(self, lines: list[str]) -> None:
        """Print several lines of request diagnostics verbatim to stderr.

        Only shown when ``--verbose`` is active.  Unlike :meth:`debug` the
        lines carry no prefix, so indented sections line up.

        Args:
            lines: The lines to print.
        """
        if self._verbose:
            for line in lines:
                if self._no_color:
                    print(line, file=sys.stderr, flush=True)
                else:
                    self._stderr.print(f"[dim]{escape(line)}[/dim]", soft_wrap=True)


# ------------------------------------------------------------------ #
# Module-level helpers
# ------------------------------------------------------------------ #


def _is_tty() -> bool:
    """Check if stdout is a TTY."""
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """Check if color should be disabled per clig.dev.

    Returns True when NO_COLOR env var is set (any value) or TERM=dumb.
    """
    if os.environ.get("NO_COLOR") is not None:
        return True
    if os.environ.get("TERM") == "dumb":
        return True
    return False


# ------------------------------------------------------------------ #
# Global output instance (set during app startup)
# ------------------------------------------------------------------ #

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the global :class:`OutputManager` instance.

    If no instance has been installed via :func:`set_output`, a default
    ``OutputManager`` is created lazily.

    Returns:
        The active :class:`OutputManager`.
    """
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    """Install *output* as the global :class:`OutputManager` instance.

    Called once during CLI startup from :func:`~openapi_cli.app.main_callback`.

    Args:
        output: The configured manager to install.
    """
    global _output
    _output = output


def reset_output() -> None:
    """Reset the global :class:`OutputManager` to ``None``.

    Primarily useful in test suites to ensure a clean state between tests.
    """
    global _output
    _output = None


# ------------------------------------------------------------------ #
# Convenience functions that use the global instance
# ------------------------------------------------------------------ #


def error(message: str) -> None:
    """Print error to stderr via the global OutputManager."""
    get_output().error(message)


def debug(message: str) -> None:
    """Print debug message to stderr via the global OutputManager."""
    get_output().debug(message)
