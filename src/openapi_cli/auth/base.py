"""Abstract base class for authentication strategies.

This module defines the foundational types of the auth subsystem:

- :class:`AuthResult` -- a plain container for the HTTP headers an auth
  strategy produces.
- :class:`AuthStrategy` -- the abstract base class every strategy extends.
- :class:`NoAuth` -- the strategy used when nothing is configured.

A registration holds exactly one strategy. The executor calls
:meth:`AuthStrategy.authenticate` once per request, immediately before
sending, so strategies backed by a callable see every request.

See Also:
    :mod:`openapi_cli.auth.strategies` for the concrete strategies.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class AuthResult:
    """Container for authentication headers to inject into HTTP requests.

    Args:
        headers: HTTP headers to add (e.g. ``{"Authorization": "Bearer ..."}``).

    Example::

        result = AuthResult(headers={"Authorization": "Bearer tok123"})
        assert result.headers["Authorization"] == "Bearer tok123"
    """

    def __init__(self, headers: dict[str, str] | None = None):
        self.headers = headers or {}


class AuthStrategy(ABC):
    """Abstract base class for authentication strategies.

    Every concrete strategy must provide:

    1. An :attr:`auth_type` property returning a unique identifier
       (``"none"``, ``"bearer"``, ``"api_key"``, ``"basic"``, ``"callable"``).
    2. An :meth:`authenticate` implementation returning the headers to send.

    :meth:`describe` returns the headers as they should appear in debug
    output; strategies whose value is only known at request time override it.
    """

    @property
    @abstractmethod
    def auth_type(self) -> str:
        """Return the unique auth type identifier of this strategy."""
        ...

    @abstractmethod
    def authenticate(self) -> AuthResult:
        """Return the auth headers for one outgoing request."""
        ...

    def describe(self) -> dict[str, str]:
        """Return the headers shown in ``--verbose`` request output."""
        return self.authenticate().headers

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class NoAuth(AuthStrategy):
    """Send no credentials."""

    @property
    def auth_type(self) -> str:
        return "none"

    def authenticate(self) -> AuthResult:
        return AuthResult()
