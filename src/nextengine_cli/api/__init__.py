"""API module for Next Engine CLI."""

from nextengine_cli.api.exceptions import (
    TOKEN_INVALID_CODE,
    NextEngineAPIError,
    TokenInvalidError,
    TransportError,
)
from nextengine_cli.api.models import (
    ApiCallResult,
    AuthorizationHandoff,
    ExchangeResult,
    LoginRedirectResult,
    NextEngineModel,
    TokenPair,
)
from nextengine_cli.api.transport import HttpTransport

__all__ = [
    # Transport
    "HttpTransport",
    # Exceptions
    "TOKEN_INVALID_CODE",
    "NextEngineAPIError",
    "TokenInvalidError",
    "TransportError",
    # Models
    "NextEngineModel",
    "ApiCallResult",
    "AuthorizationHandoff",
    "ExchangeResult",
    "LoginRedirectResult",
    "TokenPair",
]
