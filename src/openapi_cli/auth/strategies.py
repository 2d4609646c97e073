"""Concrete authentication strategies.

Each strategy turns configured credentials into request headers:

* :class:`BearerAuth` -- ``Authorization: Bearer <token>``.
* :class:`ApiKeyAuth` -- ``<header>: <value>``.
* :class:`BasicAuth` -- ``Authorization: Basic <base64(user:password)>``
  per :rfc:`7617`.
* :class:`CallableAuth` -- calls a function on every request and sends its
  result as a bearer token.

:func:`select_auth_strategy` applies the fixed priority order when several
credentials are configured: bearer > API key > basic > callable > none.
"""

from __future__ import annotations

import base64
from typing import Callable, Optional

from openapi_cli.auth.base import AuthResult, AuthStrategy, NoAuth


class BearerAuth(AuthStrategy):
    """Authenticate via a static bearer token.

    Args:
        token: The token sent after ``Bearer``.
    """

    def __init__(self, token: str):
        self.token = token

    @property
    def auth_type(self) -> str:
        return "bearer"

    def authenticate(self) -> AuthResult:
        return AuthResult(headers={"Authorization": f"Bearer {self.token}"})


class ApiKeyAuth(AuthStrategy):
    """Authenticate via an API key sent in a custom header.

    Args:
        header: Header name, e.g. ``X-API-Key``.
        value: The key itself.
    """

    def __init__(self, header: str, value: str):
        self.header = header
        self.value = value

    @property
    def auth_type(self) -> str:
        return "api_key"

    def authenticate(self) -> AuthResult:
        return AuthResult(headers={self.header: self.value})


class BasicAuth(AuthStrategy):
    """Authenticate via HTTP Basic authentication.

    Args:
        username: The user name.
        password: The password.
    """

    def __init__(self, username: str, password: str):
        self.username = username
        self.password = password

    @property
    def auth_type(self) -> str:
        return "basic"

    def authenticate(self) -> AuthResult:
        raw = f"{self.username}:{self.password}"
        encoded = base64.b64encode(raw.encode("utf-8")).decode("ascii")
        return AuthResult(headers={"Authorization": f"Basic {encoded}"})


class CallableAuth(AuthStrategy):
    """Authenticate with a token produced by a callable.

    The callable is invoked on every request and its result is never
    cached, so it can hand out short-lived tokens.

    Args:
        token_factory: Zero-argument callable returning the bearer token.
    """

    def __init__(self, token_factory: Callable[[], str]):
        self.token_factory = token_factory

    @property
    def auth_type(self) -> str:
        return "callable"

    def authenticate(self) -> AuthResult:
        return AuthResult(headers={"Authorization": f"Bearer {self.token_factory()}"})

    def describe(self) -> dict[str, str]:
        # The token only exists at request time.
        return {"Authorization": "Bearer (dynamic)"}


def select_auth_strategy(
    bearer: Optional[str] = None,
    api_key: Optional[tuple[str, str]] = None,
    basic: Optional[tuple[str, str]] = None,
    token_factory: Optional[Callable[[], str]] = None,
) -> AuthStrategy:
    """Pick exactly one strategy from the configured credentials.

    Priority: bearer token > API key header > basic credentials > callable
    > none.

    Args:
        bearer: Static bearer token.
        api_key: ``(header, value)`` pair.
        basic: ``(username, password)`` pair.
        token_factory: Callable producing a bearer token per request.

    Returns:
        The highest-priority configured strategy, or :class:`NoAuth`.
    """
    if bearer is not None:
        return BearerAuth(bearer)
    if api_key is not None:
        return ApiKeyAuth(*api_key)
    if basic is not None:
        return BasicAuth(*basic)
    if token_factory is not None:
        return CallableAuth(token_factory)
    return NoAuth()
