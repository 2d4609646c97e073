"""Tests for the output system.

Covers:
- NO_COLOR / TERM=dumb color disabling
- stdout vs stderr discipline
- Quiet mode suppression rules
- Verbose mode debug output
- Terminal width and decoration detection
- Global instance management
"""

from __future__ import annotations

import pytest

from openapi_cli import output as output_module
from openapi_cli.output import (
    OutputManager,
    _should_disable_color,
    get_output,
    reset_output,
    set_output,
)


# ------------------------------------------------------------------ #
# Fixtures
# ------------------------------------------------------------------ #


@pytest.fixture()
def non_tty(monkeypatch):
    """Patch stdout.isatty() to return False."""
    monkeypatch.setattr("openapi_cli.output._is_tty", lambda: False)


@pytest.fixture()
def tty(monkeypatch):
    """Patch stdout.isatty() to return True."""
    monkeypatch.setattr("openapi_cli.output._is_tty", lambda: True)


@pytest.fixture()
def plain() -> OutputManager:
    return OutputManager(no_color=True)


# ------------------------------------------------------------------ #
# NO_COLOR / TERM=dumb detection
# ------------------------------------------------------------------ #


class TestColorDisabling:
    """Test that NO_COLOR and TERM=dumb are respected."""

    def test_no_color_env_any_value(self, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "")
        assert _should_disable_color() is True

    def test_term_dumb_disables_color(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "dumb")
        assert _should_disable_color() is True

    def test_normal_term_keeps_color(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm-256color")
        assert _should_disable_color() is False

    def test_env_disables_manager_color(self, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "1")
        assert OutputManager().no_color is True


class TestDecoration:
    def test_decorated_on_colour_tty(self, tty, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("TERM", raising=False)
        assert OutputManager().is_decorated is True

    def test_not_decorated_when_piped(self, non_tty, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        assert OutputManager().is_decorated is False

    def test_not_decorated_with_no_color_flag(self, tty):
        assert OutputManager(no_color=True).is_decorated is False

    def test_fixed_width(self):
        assert OutputManager(width=42).terminal_width == 42


# ------------------------------------------------------------------ #
# stdout vs stderr discipline
# ------------------------------------------------------------------ #


class TestStdoutStderrDiscipline:
    """Test that data goes to stdout and diagnostics go to stderr."""

    def test_print_data_goes_to_stdout(self, capsys, plain):
        plain.print_data("hello [bold]world[/bold]")
        captured = capsys.readouterr()
        assert captured.out == "hello [bold]world[/bold]\n"
        assert captured.err == ""

    @pytest.mark.parametrize(
        ("method", "expected"),
        [
            ("info", "some text\n"),
            ("error", "Error: some text\n"),
            ("suggest", "→ some text\n"),
            ("alert", "some text\n\n"),
        ],
    )
    def test_diagnostics_go_to_stderr(self, capsys, plain, method, expected):
        getattr(plain, method)("some text")
        captured = capsys.readouterr()
        assert captured.out == ""
        assert captured.err == expected


# ------------------------------------------------------------------ #
# Quiet and verbose
# ------------------------------------------------------------------ #


class TestQuietMode:
    def test_quiet_suppresses_info_and_suggest(self, capsys):
        mgr = OutputManager(no_color=True, quiet=True)
        mgr.info("info")
        mgr.suggest("next")
        assert capsys.readouterr().err == ""

    def test_quiet_keeps_errors_and_alerts(self, capsys):
        mgr = OutputManager(no_color=True, quiet=True)
        mgr.error("broken")
        mgr.alert("HTTP 500 Error")
        assert capsys.readouterr().err == "Error: broken\nHTTP 500 Error\n\n"


class TestVerboseMode:
    def test_debug_hidden_by_default(self, capsys, plain):
        plain.debug("hidden")
        plain.debug_block(["  Request"])
        assert capsys.readouterr().err == ""

    def test_debug_shown_when_verbose(self, capsys):
        mgr = OutputManager(no_color=True, verbose=True)
        mgr.debug("details")
        mgr.debug_block(["", "  Request", "  -------"])
        assert capsys.readouterr().err == "[debug] details\n\n  Request\n  -------\n"


# ------------------------------------------------------------------ #
# Global instance management
# ------------------------------------------------------------------ #


class TestGlobalInstance:
    def test_lazy_default(self):
        reset_output()
        assert isinstance(get_output(), OutputManager)
        assert get_output() is get_output()

    def test_set_and_reset(self):
        mgr = OutputManager(no_color=True)
        set_output(mgr)
        assert get_output() is mgr
        reset_output()
        assert get_output() is not mgr

    def test_convenience_functions_use_global(self, capsys):
        set_output(OutputManager(no_color=True))
        output_module.debug("hidden")
        output_module.error("bad")
        captured = capsys.readouterr()
        assert captured.out == ""
        assert captured.err == "Error: bad\n"
