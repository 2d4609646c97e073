"""Execute one generated command against the API.

:class:`RequestExecutor` runs the per-invocation pipeline:

1. Check that every path option was given (all missing ones are reported).
2. Substitute path values into the template.
3. Resolve the base URL (registration override, else the spec's first
   server) and append the flattened, percent-encoded query string.
4. Parse ``--field`` / ``--input`` into a request body (multipart when a
   field reads a file, JSON for ``--input``, JSON or form for plain
   fields).
5. Add ``Accept`` from the documented response media types and the
   registration's auth headers.
6. Send the request through the :class:`~openapi_cli.client.transport.Transport`.
7. Render the response, or hand HTTP errors to the ``on_error`` hook.

Local problems (missing options, bad JSON, unreadable files, no base URL,
network failures) raise :class:`~openapi_cli.exceptions.OpenApiCliError`
subclasses before or instead of a response.  HTTP errors are not
exceptions: they come back as an :class:`ExecutionResult` with
``success=False``.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional
from urllib.parse import quote_plus

from openapi_cli.client.response import render_response
from openapi_cli.client.transport import (
    FormBody,
    HttpxTransport,
    JsonBody,
    MultipartBody,
    MultipartPart,
    NoBody,
    RequestBody,
    Transport,
    TransportResponse,
)
from openapi_cli.exceptions import (
    ConflictingInputModesError,
    InputValidationError,
    InvalidJsonInputError,
    MissingBaseUrlError,
    MissingRequiredOptionError,
    UploadFileNotFoundError,
    UploadFileUnreadableError,
)
from openapi_cli.exit_codes import EXIT_SUCCESS, exit_code_for_status
from openapi_cli.models import CommandConfiguration, CommandDescriptor, InvocationInput
from openapi_cli.output import OutputManager, get_output
from openapi_cli.parser.query import OpenApiParser


@dataclass
class CommandContext:
    """What the ``on_error`` hook gets to see besides the response.

    Attributes:
        descriptor: The command that was run.
        configuration: The registration it belongs to.
        invocation: The option values of this run.
        url: The full request URL.
        output: The output manager, for hooks that print their own message.
    """

    descriptor: CommandDescriptor
    configuration: CommandConfiguration
    invocation: InvocationInput
    url: str
    output: OutputManager


@dataclass
class ExecutionResult:
    """Outcome of one invocation."""

    success: bool
    exit_code: int
    response: Optional[TransportResponse] = None


@dataclass
class UploadFile:
    """A ``--field name=@path`` upload, read fully before sending."""

    field: str
    path: str
    content: bytes

    @property
    def filename(self) -> str:
        return os.path.basename(self.path)


class RequestExecutor:
    """Run commands of one registration.

    Args:
        configuration: The frozen registration configuration.
        parser: The query facade of the registration's spec.
        transport: Sends the request; an :class:`HttpxTransport` with the
            configured timeout when ``None``.
        output: The output manager; the global one when ``None``.
    """

    def __init__(
        self,
        configuration: CommandConfiguration,
        parser: OpenApiParser,
        transport: Optional[Transport] = None,
        output: Optional[OutputManager] = None,
    ) -> None:
        self._configuration = configuration
        self._parser = parser
        self._transport = transport or HttpxTransport(timeout=configuration.timeout)
        self._output = output

    @property
    def output(self) -> OutputManager:
        return self._output or get_output()

    def execute(self, descriptor: CommandDescriptor, invocation: InvocationInput) -> ExecutionResult:
        """Send the request of *descriptor* and render the response.

        Args:
            descriptor: The command being run.
            invocation: Option values of this run.

        Returns:
            ``success=True`` with exit code 0 below HTTP 400, otherwise
            ``success=False`` with the exit code mapped from the status.

        Raises:
            InputValidationError: On missing path options, malformed
                fields, invalid ``--input`` JSON, or ``--field`` combined
                with ``--input``.
            UploadFileError: If an upload file is missing or unreadable.
            MissingBaseUrlError: If no base URL is configured or declared.
            NetworkError: If the transport cannot reach the server.
        """
        self.validate_path_options(descriptor, invocation)
        url = self.build_url(descriptor, invocation)

        fields, file_paths = parse_fields(invocation.fields)
        uploads = read_upload_files(file_paths)
        json_data = parse_json_input(invocation.raw_input)
        if (fields or uploads) and json_data is not None:
            raise ConflictingInputModesError(
                "Cannot use both --field and --input options. "
                "Use --input for JSON data or --field for form fields, not both."
            )

        body = self.build_body(descriptor, fields, uploads, json_data)
        headers = self.build_headers(descriptor)
        method = descriptor.method.upper()

        if self.output.is_verbose:
            self.output.debug_block(self._debug_lines(method, url, headers, body))

        response = self._transport.execute(
            method, url, headers, body, self._configuration.follow_redirects
        )

        if response.status >= 400:
            return self._handle_http_error(descriptor, invocation, url, response)

        self._render(descriptor, invocation, response)
        return ExecutionResult(success=True, exit_code=EXIT_SUCCESS, response=response)

    # ------------------------------------------------------------------ #
    # Request building
    # ------------------------------------------------------------------ #

    def validate_path_options(self, descriptor: CommandDescriptor, invocation: InvocationInput) -> None:
        """Raise one :class:`MissingRequiredOptionError` listing every missing path option."""
        messages = [
            f"The --{option.option_name} option is required for path parameter '{option.param_name}'."
            for option in descriptor.path_options
            if not invocation.path_values.get(option.param_name)
        ]
        if messages:
            raise MissingRequiredOptionError(messages)

    def resolve_base_url(self) -> str:
        """The registration override, else the spec's first server URL."""
        base_url = self._configuration.base_url or self._parser.server_url()
        if not base_url:
            raise MissingBaseUrlError(
                "No base URL available. Either configure one with base_url() "
                "or ensure your OpenAPI spec has a servers array."
            )
        return base_url

    def build_url(self, descriptor: CommandDescriptor, invocation: InvocationInput) -> str:
        """Base URL, substituted path, and query string."""
        path = descriptor.path_template
        for option in descriptor.path_options:
            value = invocation.path_values.get(option.param_name)
            path = path.replace("{" + option.param_name + "}", str(value))

        url = self.resolve_base_url().rstrip("/") + path
        query = {name: value for name, value in invocation.query_values.items() if value is not None}
        if query:
            url += "?" + "&".join(flatten_query(query))
        return url

    def build_body(
        self,
        descriptor: CommandDescriptor,
        fields: dict[str, str],
        uploads: list[UploadFile],
        json_data: Any,
    ) -> RequestBody:
        """Pick the body encoding.

        Uploads force multipart; ``--input`` is sent as JSON; plain fields
        are JSON unless the request body only declares non-JSON media types.
        """
        if uploads:
            parts = [MultipartPart(u.field, u.content, u.filename) for u in uploads]
            parts.extend(MultipartPart(name, value) for name, value in fields.items())
            return MultipartBody(parts=tuple(parts))
        if json_data is not None:
            return JsonBody(json_data)
        if fields:
            if self._is_form_encoded(descriptor):
                return FormBody(fields=dict(fields))
            return JsonBody(dict(fields))
        return NoBody()

    def build_headers(self, descriptor: CommandDescriptor) -> dict[str, str]:
        """``Accept`` (when responses declare content) plus auth headers.

        A callable auth strategy is invoked here, once per request.
        """
        headers: dict[str, str] = {}
        accept = self.accept_header(descriptor)
        if accept is not None:
            headers["Accept"] = accept
        headers.update(self._configuration.auth.authenticate().headers)
        return headers

    def accept_header(self, descriptor: CommandDescriptor) -> Optional[str]:
        content_types = self._parser.response_content_types(
            descriptor.path_template, descriptor.method
        )
        return ", ".join(content_types) if content_types else None

    def _is_form_encoded(self, descriptor: CommandDescriptor) -> bool:
        content_types = self._parser.request_body_content_types(
            descriptor.path_template, descriptor.method
        )
        return bool(content_types) and "application/json" not in content_types

    # ------------------------------------------------------------------ #
    # Response handling
    # ------------------------------------------------------------------ #

    def _handle_http_error(
        self,
        descriptor: CommandDescriptor,
        invocation: InvocationInput,
        url: str,
        response: TransportResponse,
    ) -> ExecutionResult:
        exit_code = exit_code_for_status(response.status)
        failure = ExecutionResult(success=False, exit_code=exit_code, response=response)

        on_error = self._configuration.on_error
        if on_error is not None:
            context = CommandContext(
                descriptor=descriptor,
                configuration=self._configuration,
                invocation=invocation,
                url=url,
                output=self.output,
            )
            if on_error(response, context):
                return failure

        self.output.alert(f"HTTP {response.status} Error")
        self._render(descriptor, invocation, response)
        return failure

    def _render(
        self,
        descriptor: CommandDescriptor,
        invocation: InvocationInput,
        response: TransportResponse,
    ) -> None:
        description = None
        if response.status == 204:
            description = self._parser.response_description(
                descriptor.path_template, descriptor.method, 204
            )
        render_response(
            response,
            invocation,
            self._configuration.output,
            no_content_description=description,
            output=self.output,
        )

    # ------------------------------------------------------------------ #
    # Debug output
    # ------------------------------------------------------------------ #

    def _debug_lines(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        body: RequestBody,
    ) -> list[str]:
        lines = ["", "  Request", "  -------", f"  {method} {url}"]

        shown: dict[str, str] = {}
        if "Accept" in headers:
            shown["Accept"] = headers["Accept"]
        if isinstance(body, MultipartBody):
            shown["Content-Type"] = "multipart/form-data"
        elif isinstance(body, FormBody):
            shown["Content-Type"] = "application/x-www-form-urlencoded"
        else:
            shown["Content-Type"] = "application/json"
        shown.update(self._configuration.auth.describe())

        lines.extend(["", "  Request Headers", "  ---------------"])
        lines.extend(f"  {name}: {value}" for name, value in shown.items())

        body_lines = _debug_body_lines(body)
        if body_lines:
            lines.extend(["", "  Request Body", "  ------------"])
            lines.extend(body_lines)

        lines.append("")
        return lines


# ------------------------------------------------------------------ #
# Input parsing helpers
# ------------------------------------------------------------------ #


def parse_fields(values: list[str]) -> tuple[dict[str, str], dict[str, str]]:
    """Split ``--field`` values into plain fields and upload paths.

    ``key=value`` is a plain field; ``key=@path`` reads the file at
    *path*.  Only the first ``=`` separates key from value.

    Returns:
        ``(fields, files)`` keyed by field name.

    Raises:
        InputValidationError: If a value has no ``=``.
    """
    fields: dict[str, str] = {}
    files: dict[str, str] = {}
    for raw in values:
        if "=" not in raw:
            raise InputValidationError(
                f"Invalid field '{raw}'. Use key=value, or key=@path to upload a file."
            )
        key, value = raw.split("=", 1)
        if value.startswith("@"):
            files[key] = value[1:]
        else:
            fields[key] = value
    return fields, files


def read_upload_files(files: dict[str, str]) -> list[UploadFile]:
    """Check and read every upload file before anything is sent.

    Raises:
        UploadFileNotFoundError: If a file does not exist.
        UploadFileUnreadableError: If a file cannot be read.
    """
    uploads: list[UploadFile] = []
    for field_name, file_path in files.items():
        path = Path(file_path)
        if not path.exists():
            raise UploadFileNotFoundError(f"File not found: {file_path}")
        if not path.is_file() or not os.access(path, os.R_OK):
            raise UploadFileUnreadableError(f"File is not readable: {file_path}")
        try:
            content = path.read_bytes()
        except OSError as exc:
            raise UploadFileUnreadableError(f"File is not readable: {file_path}") from exc
        uploads.append(UploadFile(field=field_name, path=file_path, content=content))
    return uploads


def parse_json_input(raw: Optional[str]) -> Any:
    """Decode ``--input``; ``None`` when it was not given.

    Raises:
        InvalidJsonInputError: If the text is not valid JSON.
    """
    if not raw:
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise InvalidJsonInputError(f"Invalid JSON input: {exc.msg}") from exc


def flatten_query(params: dict[str, Any], prefix: str = "") -> list[str]:
    """Flatten nested query values into ``key=value`` pairs.

    Nested maps become ``outer[inner]`` and list items ``outer[0]``; keys
    and values are percent-encoded with :func:`urllib.parse.quote_plus`.

    Example::

        >>> flatten_query({"filter": {"status": "open"}, "q": "a b"})
        ['filter%5Bstatus%5D=open', 'q=a+b']
    """
    pairs: list[str] = []
    for key, value in params.items():
        full_key = str(key) if not prefix else f"{prefix}[{key}]"
        if isinstance(value, dict):
            pairs.extend(flatten_query(value, full_key))
        elif isinstance(value, (list, tuple)):
            pairs.extend(flatten_query(dict(enumerate(value)), full_key))
        elif value is not None:
            pairs.append(f"{quote_plus(full_key)}={quote_plus(_query_value(value))}")
    return pairs


def _query_value(value: Any) -> str:
    if isinstance(value, bool):
        return "1" if value else "0"
    return str(value)


def _debug_body_lines(body: RequestBody) -> list[str]:
    if isinstance(body, JsonBody):
        return [f"  {json.dumps(body.value, separators=(',', ':'), ensure_ascii=False)}"]
    if isinstance(body, MultipartBody):
        lines = []
        for part in body.parts:
            if part.filename is not None:
                lines.append(f"  {part.name}: {part.filename} ({len(part.content)} bytes)")
            else:
                lines.append(f"  {part.name}: {part.content}")
        return lines
    if isinstance(body, FormBody):
        return [f"  {name}: {value}" for name, value in body.fields.items()]
    return []
