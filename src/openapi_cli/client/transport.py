"""HTTP transport: request body variants, the response shape, and the httpx adapter.

The executor talks to the network only through the :class:`Transport`
protocol::

    execute(method, url, headers, body, follow_redirects) -> TransportResponse

:class:`HttpxTransport` is the production implementation backed by
:class:`httpx.Client`.  Tests inject an :class:`httpx.MockTransport` into it,
or hand the executor any object with a matching ``execute`` method.

Request bodies are one of :class:`NoBody`, :class:`JsonBody`,
:class:`FormBody` or :class:`MultipartBody`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Protocol, Union

import httpx

from openapi_cli.exceptions import NetworkError
from openapi_cli.models import DEFAULT_TIMEOUT


# ------------------------------------------------------------------ #
# Request bodies
# ------------------------------------------------------------------ #


@dataclass(frozen=True)
class NoBody:
    """The request carries no body."""


@dataclass(frozen=True)
class JsonBody:
    """A JSON-encoded body."""

    value: Any


@dataclass(frozen=True)
class FormBody:
    """An ``application/x-www-form-urlencoded`` body."""

    fields: dict[str, str]


@dataclass(frozen=True)
class MultipartPart:
    """One part of a multipart body.

    Attributes:
        name: The form field name.
        content: Field text, or the full file content for uploads.
        filename: Set for file parts; plain fields leave it ``None``.
    """

    name: str
    content: Union[str, bytes]
    filename: Optional[str] = None


@dataclass(frozen=True)
class MultipartBody:
    """A ``multipart/form-data`` body."""

    parts: tuple[MultipartPart, ...] = ()


RequestBody = Union[NoBody, JsonBody, FormBody, MultipartBody]


# ------------------------------------------------------------------ #
# Response
# ------------------------------------------------------------------ #


@dataclass
class TransportResponse:
    """What came back from the server.

    Attributes:
        status: HTTP status code.
        reason: Reason phrase (``"OK"``, ``"Not Found"``...).
        headers: Header name (as sent) to every value received for it.
        body: The raw body.
    """

    status: int
    reason: str = ""
    headers: dict[str, list[str]] = field(default_factory=dict)
    body: bytes = b""

    def header(self, name: str) -> Optional[str]:
        """First value of header *name* (case-insensitive), or ``None``."""
        wanted = name.lower()
        for key, values in self.headers.items():
            if key.lower() == wanted and values:
                return values[0]
        return None

    @property
    def text(self) -> str:
        """The body decoded as UTF-8, with undecodable bytes replaced."""
        return self.body.decode("utf-8", errors="replace")


class Transport(Protocol):
    """Anything that can send one HTTP request."""

    def execute(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        body: RequestBody,
        follow_redirects: bool,
    ) -> TransportResponse:
        ...


# ------------------------------------------------------------------ #
# httpx implementation
# ------------------------------------------------------------------ #


class HttpxTransport:
    """:class:`Transport` backed by :class:`httpx.Client`.

    A client is opened per request; the process sends at most one request
    per invocation.

    Args:
        timeout: Request timeout in seconds.
        transport: Optional :class:`httpx.BaseTransport` passed to the
            client (tests pass an :class:`httpx.MockTransport`).

    Example::

        transport = HttpxTransport(timeout=10)
        response = transport.execute(
            "GET", "https://api.example.com/me", {}, NoBody(), False,
        )
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._timeout = timeout
        self._transport = transport

    def execute(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        body: RequestBody,
        follow_redirects: bool,
    ) -> TransportResponse:
        """Send one request.

        Raises:
            NetworkError: If the connection fails or times out.
        """
        kwargs = _body_kwargs(body)
        try:
            with httpx.Client(
                transport=self._transport,
                timeout=self._timeout,
                follow_redirects=follow_redirects,
            ) as client:
                response = client.request(method.upper(), url, headers=headers, **kwargs)
        except httpx.TransportError as exc:
            raise NetworkError(
                f"Network error: Could not connect to {url}",
                url=url,
                cause=str(exc) or type(exc).__name__,
            ) from exc

        return TransportResponse(
            status=response.status_code,
            reason=response.reason_phrase,
            headers=_group_headers(response.headers),
            body=response.content,
        )


def _body_kwargs(body: RequestBody) -> dict[str, Any]:
    """Translate a :data:`RequestBody` into :meth:`httpx.Client.request` kwargs."""
    if isinstance(body, JsonBody):
        return {"json": body.value}
    if isinstance(body, FormBody):
        return {"data": dict(body.fields)}
    if isinstance(body, MultipartBody):
        files = [
            (part.name, (part.filename, part.content))
            for part in body.parts
            if part.filename is not None
        ]
        data = {part.name: part.content for part in body.parts if part.filename is None}
        return {"files": files, "data": data}
    return {}


def _group_headers(headers: httpx.Headers) -> dict[str, list[str]]:
    grouped: dict[str, list[str]] = {}
    for raw_key, raw_value in headers.raw:
        key = raw_key.decode("latin-1")
        grouped.setdefault(key, []).append(raw_value.decode("latin-1"))
    return grouped
