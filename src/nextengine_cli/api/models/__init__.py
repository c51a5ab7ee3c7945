"""Response and token models."""

from nextengine_cli.api.models.base import NextEngineModel
from nextengine_cli.api.models.responses import (
    ApiCallResult,
    AuthorizationHandoff,
    ExchangeResult,
    LoginRedirectResult,
    TokenFields,
)
from nextengine_cli.api.models.tokens import TokenPair

__all__ = [
    "NextEngineModel",
    "ApiCallResult",
    "AuthorizationHandoff",
    "ExchangeResult",
    "LoginRedirectResult",
    "TokenFields",
    "TokenPair",
]
