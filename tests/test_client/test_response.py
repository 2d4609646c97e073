"""Tests for openapi_cli.client.response."""

from __future__ import annotations

import json

import pytest

from openapi_cli.client.response import (
    decode_json,
    format_headers,
    format_non_json,
    render_response,
    to_yaml,
)
from openapi_cli.client.transport import TransportResponse
from openapi_cli.models import InvocationInput, OutputSettings
from openapi_cli.output import OutputManager


def _json_response(value, status: int = 200) -> TransportResponse:
    return TransportResponse(
        status=status,
        reason="OK",
        headers={"Content-Type": ["application/json"]},
        body=json.dumps(value).encode(),
    )


def _render(response: TransportResponse, capsys, settings: OutputSettings | None = None, **flags) -> str:
    render_response(
        response,
        InvocationInput(**flags),
        settings or OutputSettings(),
        output=OutputManager(no_color=True, width=80),
    )
    return capsys.readouterr().out


# ---------------------------------------------------------------------------
# JSON bodies
# ---------------------------------------------------------------------------


class TestJsonRendering:
    """Test the JSON / YAML / human-readable selection."""

    def test_human_readable_by_default(self, capsys) -> None:
        out = _render(_json_response({"id": 1, "name": "Foo"}), capsys)
        assert out == "| ID   | 1   |\n| Name | Foo |\n"

    def test_json_flag(self, capsys) -> None:
        out = _render(_json_response({"id": 1}), capsys, json_output=True)
        assert out == '{\n    "id": 1\n}\n'

    def test_minify_flag(self, capsys) -> None:
        out = _render(_json_response({"id": 1, "tags": ["a"]}), capsys, minify=True)
        assert out == '{"id":1,"tags":["a"]}\n'

    def test_yaml_flag(self, capsys) -> None:
        out = _render(_json_response({"id": 1, "tags": ["a", "b"]}), capsys, yaml_output=True)
        assert out == "id: 1\ntags:\n- a\n- b\n"

    def test_json_wins_over_yaml(self, capsys) -> None:
        out = _render(_json_response({"id": 1}), capsys, yaml_output=True, json_output=True)
        assert out == '{\n    "id": 1\n}\n'

    def test_minify_wins_over_yaml(self, capsys) -> None:
        out = _render(_json_response({"id": 1}), capsys, yaml_output=True, minify=True)
        assert out == '{"id":1}\n'

    def test_configured_yaml_default(self, capsys) -> None:
        out = _render(_json_response({"id": 1}), capsys, OutputSettings(output_yaml=True))
        assert out == "id: 1\n"

    def test_configured_json_default(self, capsys) -> None:
        out = _render(_json_response([1, 2]), capsys, OutputSettings(output_json=True))
        assert out == "[\n    1,\n    2\n]\n"

    def test_scalar_yaml_has_no_document_marker(self) -> None:
        assert to_yaml("plain") == "plain"
        assert to_yaml(3) == "3"


# ---------------------------------------------------------------------------
# Non-JSON bodies, 204, headers
# ---------------------------------------------------------------------------


class TestOtherBodies:
    def test_no_content_with_description(self, capsys) -> None:
        render_response(
            TransportResponse(status=204, reason="No Content"),
            InvocationInput(),
            OutputSettings(),
            no_content_description="Project deleted",
            output=OutputManager(no_color=True),
        )
        assert capsys.readouterr().out == "Project deleted (204)\n"

    def test_no_content_without_description(self, capsys) -> None:
        out = _render(TransportResponse(status=204, reason="No Content"), capsys)
        assert out == "No content (204)\n"

    def test_plain_text_body(self, capsys) -> None:
        response = TransportResponse(
            status=200, headers={"Content-Type": ["text/plain"]}, body=b"pong"
        )

        out = _render(response, capsys)

        assert out == (
            "Response is not JSON (content-type: text/plain, status: 200, content-length: 4)\n"
            "\n"
            "pong\n"
        )

    def test_empty_body_is_not_json(self, capsys) -> None:
        out = _render(TransportResponse(status=200), capsys)
        assert out.startswith("Response is not JSON (content-type: unknown, status: 200, content-length: 0)")

    def test_json_null_is_shown_as_non_json(self, capsys) -> None:
        response = TransportResponse(
            status=200, headers={"Content-Type": ["application/json"]}, body=b"null"
        )
        out = _render(response, capsys)
        assert out.startswith("Response is not JSON")
        assert out.endswith("null\n")

    def test_html_is_hidden(self) -> None:
        response = TransportResponse(
            status=200,
            headers={"Content-Type": ["text/html; charset=utf-8"], "Content-Length": ["21"]},
            body=b"<html><p>hi</p></html>",
        )

        text = format_non_json(response, InvocationInput(), OutputSettings())

        assert "content-length: 21" in text
        assert text.endswith("Use --output-html to see the full response body.")
        assert "<html>" not in text

    @pytest.mark.parametrize(
        ("invocation", "settings"),
        [
            (InvocationInput(output_html=True), OutputSettings()),
            (InvocationInput(), OutputSettings(show_html_body=True)),
        ],
    )
    def test_html_shown_on_request(self, invocation, settings) -> None:
        response = TransportResponse(
            status=200, headers={"Content-Type": ["text/html"]}, body=b"<p>hi</p>"
        )

        text = format_non_json(response, invocation, settings)

        assert text.endswith("<p>hi</p>")

    def test_headers_flag(self, capsys) -> None:
        response = TransportResponse(
            status=200,
            reason="OK",
            headers={"Content-Type": ["application/json"], "Set-Cookie": ["a=1", "b=2"]},
            body=b'{"ok": true}',
        )

        out = _render(response, capsys, include_headers=True)

        assert out.startswith(
            "HTTP/1.1 200 OK\n"
            "Content-Type: application/json\n"
            "Set-Cookie: a=1\n"
            "Set-Cookie: b=2\n"
            "\n"
        )
        assert out.endswith("| Ok | Yes |\n")

    def test_format_headers_without_reason(self) -> None:
        assert format_headers(TransportResponse(status=299)) == "HTTP/1.1 299\n"


def test_decode_json() -> None:
    assert decode_json(b'{"a": 1}') == {"a": 1}
    assert decode_json(b"\xff\xfe") is decode_json(b"not json")
