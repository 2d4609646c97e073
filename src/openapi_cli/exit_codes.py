"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~openapi_cli.exceptions.OpenApiCliError` subclass.
HTTP error responses are not exceptions; their exit code is derived from
the status code via :func:`exit_code_for_status`.

Example::

    $ openapi-cli shop get-orders --order-id 42
    $ echo $?
    4   # EXIT_NOT_FOUND -- the API answered 404
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred (also used for 4xx responses other than 401/403/404)."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid or conflicting options, or a bad upload file."""

EXIT_AUTH_FAILURE = 3
"""The API rejected the credentials (HTTP 401 or 403)."""

EXIT_NOT_FOUND = 4
"""The requested resource was not found (HTTP 404)."""

EXIT_SERVER_ERROR = 5
"""The remote API returned an HTTP 5xx server error."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""

EXIT_SPEC_PARSE_ERROR = 7
"""The OpenAPI document could not be loaded, parsed, or dereferenced."""


def exit_code_for_status(status: int) -> int:
    """Map an HTTP status code to a process exit code.

    Args:
        status: The HTTP status code of the response.

    Returns:
        :data:`EXIT_SUCCESS` below 400, otherwise the code for the error
        class of *status*.
    """
    if status < 400:
        return EXIT_SUCCESS
    if status in (401, 403):
        return EXIT_AUTH_FAILURE
    if status == 404:
        return EXIT_NOT_FOUND
    if status >= 500:
        return EXIT_SERVER_ERROR
    return EXIT_GENERIC_FAILURE
