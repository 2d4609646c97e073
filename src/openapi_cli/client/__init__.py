"""HTTP client layer for openapi-cli.

Sends the request of one generated command and renders what comes back.

Classes:
    :class:`RequestExecutor` -- builds the URL, body and headers of an
    invocation and runs it through a transport.
    :class:`HttpxTransport` -- the production transport, backed by
    :class:`httpx.Client`.

Example::

    from openapi_cli.client import RequestExecutor

    executor = RequestExecutor(configuration, parser)
    result = executor.execute(descriptor, invocation)
"""

from openapi_cli.client.executor import CommandContext, ExecutionResult, RequestExecutor
from openapi_cli.client.response import render_response
from openapi_cli.client.transport import (
    FormBody,
    HttpxTransport,
    JsonBody,
    MultipartBody,
    MultipartPart,
    NoBody,
    Transport,
    TransportResponse,
)

__all__ = [
    "CommandContext",
    "ExecutionResult",
    "FormBody",
    "HttpxTransport",
    "JsonBody",
    "MultipartBody",
    "MultipartPart",
    "NoBody",
    "RequestExecutor",
    "Transport",
    "TransportResponse",
    "render_response",
]
