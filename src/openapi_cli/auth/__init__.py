"""Authentication strategies for generated commands.

Every registration carries exactly one :class:`AuthStrategy`. The executor
asks it for headers right before each request.

Usage::

    from openapi_cli.auth import select_auth_strategy

    strategy = select_auth_strategy(bearer="tok123")
    headers = strategy.authenticate().headers
"""

from openapi_cli.auth.base import AuthResult, AuthStrategy, NoAuth
from openapi_cli.auth.strategies import (
    ApiKeyAuth,
    BasicAuth,
    BearerAuth,
    CallableAuth,
    select_auth_strategy,
)

__all__ = [
    "AuthResult",
    "AuthStrategy",
    "NoAuth",
    "ApiKeyAuth",
    "BasicAuth",
    "BearerAuth",
    "CallableAuth",
    "select_auth_strategy",
]
