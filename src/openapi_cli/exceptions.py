"""Exception hierarchy for openapi-cli.

All exceptions inherit from :class:`OpenApiCliError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`openapi_cli.exit_codes`.
Generated commands catch the local errors (validation, upload files, network)
and turn them into a message plus a non-zero exit. Spec-load and reference
errors propagate to :func:`openapi_cli.app.main`, which prints them and exits
with their code; unexpected exceptions produce a crash log.

Subclass hierarchy::

    OpenApiCliError (exit 1)
    +-- SpecLoadError               (exit 7)
    |   +-- SpecNotFoundError
    |   +-- SpecUnreadableError
    |   +-- UnsupportedFormatError
    |   +-- SpecParseError
    +-- SpecReferenceError          (exit 7)
    |   +-- UnsupportedReferenceKindError
    |   +-- BrokenReferenceError
    |   +-- ReferenceCycleError
    +-- ConfigurationError          (exit 1)
    |   +-- MissingBaseUrlError
    |   +-- CommandCollisionError
    +-- InputValidationError        (exit 2)
    |   +-- MissingRequiredOptionError
    |   +-- ConflictingInputModesError
    |   +-- InvalidJsonInputError
    |   +-- AmbiguousEndpointError
    +-- UploadFileError             (exit 2)
    |   +-- UploadFileNotFoundError
    |   +-- UploadFileUnreadableError
    +-- NetworkError                (exit 6)

HTTP responses with a status of 400 or above are *not* exceptions; they are
reported through :class:`~openapi_cli.client.executor.ExecutionResult`.
"""

from __future__ import annotations

from typing import Optional

from openapi_cli.exit_codes import (
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_SPEC_PARSE_ERROR,
)


class OpenApiCliError(Exception):
    """Base exception for all openapi-cli errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`openapi_cli.exit_codes`.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


# --- Spec loading ---


class SpecLoadError(OpenApiCliError):
    """Raised when an OpenAPI document cannot be turned into a tree."""

    exit_code = EXIT_SPEC_PARSE_ERROR


class SpecNotFoundError(SpecLoadError):
    """Raised when the spec file does not exist."""


class SpecUnreadableError(SpecLoadError):
    """Raised when the spec file or URL exists but cannot be read or fetched."""


class UnsupportedFormatError(SpecLoadError):
    """Raised for spec files whose extension is neither JSON nor YAML."""


class SpecParseError(SpecLoadError):
    """Raised when the spec content is malformed or not an OpenAPI 3.x document."""


# --- Reference resolution ---


class SpecReferenceError(OpenApiCliError):
    """Raised when a ``$ref`` cannot be dereferenced.

    Args:
        message: Human-readable error description.
        pointer: The offending ``$ref`` string.
    """

    exit_code = EXIT_SPEC_PARSE_ERROR

    def __init__(self, message: str, pointer: str):
        super().__init__(message)
        self.pointer = pointer


class UnsupportedReferenceKindError(SpecReferenceError):
    """Raised for ``$ref`` values that are not same-document JSON pointers."""


class BrokenReferenceError(SpecReferenceError):
    """Raised when a JSON pointer walks into a missing key or a scalar."""


class ReferenceCycleError(SpecReferenceError):
    """Raised when reference expansion nests deeper than the allowed bound."""


# --- Configuration ---


class ConfigurationError(OpenApiCliError):
    """Raised for registration and configuration problems."""

    exit_code = EXIT_GENERIC_FAILURE


class MissingBaseUrlError(ConfigurationError):
    """Raised when neither a configured base URL nor a spec server exists."""


class CommandCollisionError(ConfigurationError):
    """Raised when two operations still share a command name after disambiguation."""


# --- Invocation input ---


class InputValidationError(OpenApiCliError):
    """Raised for invalid command-line input. No request is sent."""

    exit_code = EXIT_INVALID_USAGE


class MissingRequiredOptionError(InputValidationError):
    """Raised when one or more required path options were not supplied.

    Args:
        messages: One message per missing option.
    """

    def __init__(self, messages: list[str]):
        super().__init__("\n".join(messages))
        self.messages = list(messages)


class ConflictingInputModesError(InputValidationError):
    """Raised when ``--field`` and ``--input`` are combined."""


class InvalidJsonInputError(InputValidationError):
    """Raised when ``--input`` is not valid JSON."""


class AmbiguousEndpointError(InputValidationError):
    """Raised when a concrete path matches several routes and no method disambiguates."""


class UploadFileError(OpenApiCliError):
    """Raised when a ``key=@path`` upload cannot be read. Checked before sending."""

    exit_code = EXIT_INVALID_USAGE


class UploadFileNotFoundError(UploadFileError):
    """Raised when an upload file does not exist."""


class UploadFileUnreadableError(UploadFileError):
    """Raised when an upload file exists but cannot be read."""


# --- Transport ---


class NetworkError(OpenApiCliError):
    """Raised when the transport cannot connect to or complete a request.

    Args:
        message: Human-readable error description including the target URL.
        url: The request URL.
        cause: The underlying transport failure message.
    """

    exit_code = EXIT_CONNECTION_ERROR

    def __init__(self, message: str, url: str = "", cause: Optional[str] = None):
        super().__init__(message)
        self.url = url
        self.cause = cause
