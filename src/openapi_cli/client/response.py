"""Render an HTTP response to stdout.

Bridges the transport layer and the output layer.  Given a
:class:`~openapi_cli.client.transport.TransportResponse` and the output
flags of the invocation, :func:`render_response` prints:

1. The status line and headers, when ``--headers`` was given.
2. ``<description> (204)`` for empty 204 responses.
3. A notice plus the raw body when the body is not JSON.  HTML bodies
   stay hidden unless ``--output-html`` (or the registration's
   ``show_html_body``) asks for them.
4. Otherwise the decoded JSON as YAML, JSON, or human-readable text,
   highlighted when stdout is a colour terminal.
"""

from __future__ import annotations

import json
from typing import Any, Optional

import yaml

from openapi_cli.client.transport import TransportResponse
from openapi_cli.formatting import HumanReadableFormatter, OutputHighlighter
from openapi_cli.models import InvocationInput, OutputSettings
from openapi_cli.output import OutputManager, get_output

_NOT_DECODED = object()


def render_response(
    response: TransportResponse,
    invocation: InvocationInput,
    settings: OutputSettings,
    no_content_description: Optional[str] = None,
    output: Optional[OutputManager] = None,
) -> None:
    """Print *response* according to the invocation's output flags.

    Args:
        response: The response to render.
        invocation: Supplies ``--headers``, ``--json``, ``--yaml``,
            ``--minify`` and ``--output-html``.
        settings: Registration-wide output defaults.
        no_content_description: The spec's description of the ``204``
            response, if any.
        output: The output manager; the global one when ``None``.
    """
    output = output or get_output()

    if invocation.include_headers:
        output.print_data(format_headers(response))

    if response.status == 204:
        label = no_content_description or "No content"
        output.print_data(f"{label} (204)")
        return

    decoded = decode_json(response.body)
    if decoded is _NOT_DECODED or decoded is None:
        output.print_data(format_non_json(response, invocation, settings))
        return

    highlighter = OutputHighlighter(enabled=output.is_decorated)
    output.print_data(
        format_json(decoded, invocation, settings, output.terminal_width, highlighter)
    )


def format_headers(response: TransportResponse) -> str:
    """``HTTP/1.1 <status> <reason>``, one ``Name: value`` line per value, then a blank line."""
    lines = [f"HTTP/1.1 {response.status} {response.reason}".rstrip()]
    for name, values in response.headers.items():
        lines.extend(f"{name}: {value}" for value in values)
    return "\n".join(lines) + "\n"


def decode_json(body: bytes) -> Any:
    """Decode *body* as JSON, or return a sentinel when it is not JSON."""
    try:
        return json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, ValueError):
        return _NOT_DECODED


def format_non_json(
    response: TransportResponse,
    invocation: InvocationInput,
    settings: OutputSettings,
) -> str:
    """The notice line, a blank line, and the body or the HTML hint."""
    content_type = response.header("Content-Type") or "unknown"
    content_length = response.header("Content-Length") or str(len(response.body))
    lines = [
        f"Response is not JSON (content-type: {content_type}, "
        f"status: {response.status}, content-length: {content_length})",
        "",
    ]
    if "text/html" in content_type and not (invocation.output_html or settings.show_html_body):
        lines.append("Use --output-html to see the full response body.")
    else:
        lines.append(response.text)
    return "\n".join(lines)


def format_json(
    value: Any,
    invocation: InvocationInput,
    settings: OutputSettings,
    terminal_width: Optional[int],
    highlighter: OutputHighlighter,
) -> str:
    """Render decoded JSON.

    ``--yaml`` (or the registration default) wins unless ``--json`` or
    ``--minify`` is also given; ``--json``/``--minify`` or the JSON default
    print JSON (compact when minified, 4-space indent otherwise); anything
    else goes through :class:`HumanReadableFormatter`.
    """
    use_yaml = invocation.yaml_output or settings.output_yaml
    use_json = invocation.json_output or invocation.minify or settings.output_json

    if use_yaml and not invocation.json_output and not invocation.minify:
        return highlighter.highlight_yaml(to_yaml(value))

    if use_json or use_yaml:
        if invocation.minify:
            text = json.dumps(value, separators=(",", ":"), ensure_ascii=False)
        else:
            text = json.dumps(value, indent=4, ensure_ascii=False)
        return highlighter.highlight_json(text)

    formatter = HumanReadableFormatter(terminal_width)
    return highlighter.highlight_human(formatter.format(value))


def to_yaml(value: Any) -> str:
    """Block-style YAML with key order preserved."""
    text = yaml.safe_dump(
        value,
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
        indent=2,
    ).rstrip()
    # Scalars get an explicit document end marker.
    if text.endswith("\n..."):
        text = text[: -len("\n...")]
    return text
