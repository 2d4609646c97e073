"""Shared test fixtures for openapi-cli.

Provides reusable fixtures for locating spec fixtures, creating isolated
config environments, managing output state, recording HTTP traffic, and
running CLI commands. These fixtures are automatically discovered by pytest
and available to all test modules without explicit imports.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Optional

import httpx
import pytest

from openapi_cli.client.transport import HttpxTransport
from openapi_cli.output import OutputManager, reset_output, set_output


FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time.  When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale
    ("I/O operation on closed file").  Resetting forces a fresh manager
    to be created on next use.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Spec fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def projects_spec_path() -> str:
    """Path of the YAML projects spec (servers, refs, several media types)."""
    return str(FIXTURES_DIR / "projects.yaml")


@pytest.fixture
def teams_spec_path() -> str:
    """Path of the JSON teams spec (operationIds, no servers)."""
    return str(FIXTURES_DIR / "teams.json")


@pytest.fixture
def cyclic_spec_path() -> str:
    """Path of a spec whose request schema references itself."""
    return str(FIXTURES_DIR / "cyclic.yaml")


@pytest.fixture
def projects_parser(projects_spec_path: str):
    """An OpenApiParser over the projects spec."""
    from openapi_cli.parser.query import OpenApiParser

    return OpenApiParser.from_source(projects_spec_path)


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CACHE_HOME and XDG_DATA_HOME to
    subdirectories of tmp_path so that tests never touch real user
    config. Clears OPENAPI_CLI_CONFIG and changes the working directory
    to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "cache"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.delenv("OPENAPI_CLI_CONFIG", raising=False)
    monkeypatch.delenv("NO_COLOR", raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def plain_output() -> OutputManager:
    """Install an uncoloured OutputManager as the global output."""
    output = OutputManager(no_color=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# HTTP recording
# ---------------------------------------------------------------------------


class RecordingHandler:
    """An :class:`httpx.MockTransport` handler that records every request.

    Args:
        status: Status code of every response.
        json_body: JSON body of every response (mutually exclusive with
            *content*).
        content: Raw body of every response.
        headers: Response headers.
        handler: Optional callable producing the response instead.
    """

    def __init__(
        self,
        status: int = 200,
        json_body: Any = None,
        content: bytes = b"",
        headers: Optional[dict[str, str]] = None,
        handler: Optional[Callable[[httpx.Request], httpx.Response]] = None,
    ) -> None:
        self.status = status
        self.json_body = json_body
        self.content = content
        self.headers = headers or {}
        self.handler = handler
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        request.read()
        self.requests.append(request)
        if self.handler is not None:
            return self.handler(request)
        if self.json_body is not None:
            return httpx.Response(self.status, json=self.json_body, headers=self.headers)
        return httpx.Response(self.status, content=self.content, headers=self.headers)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> Any:
        return json.loads(self.last.content)

    def transport(self) -> HttpxTransport:
        """An :class:`HttpxTransport` that sends through this handler."""
        return HttpxTransport(transport=httpx.MockTransport(self))


@pytest.fixture
def recorder() -> RecordingHandler:
    """A handler answering ``200 {"ok": true}`` to everything."""
    return RecordingHandler(json_body={"ok": True})


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner.

    Returns a CliRunner instance that captures stdout/stderr and
    provides a consistent interface for invoking Typer apps in tests.
    """
    from typer.testing import CliRunner

    try:
        return CliRunner(mix_stderr=False)
    except TypeError:
        return CliRunner()


@pytest.fixture
def make_recorder() -> Callable[..., RecordingHandler]:
    """Factory for :class:`RecordingHandler` instances with custom responses."""
    return RecordingHandler
