"""Response shapes validated at the boundary of the auth chain and gateway.

Each model records what was present in the response instead of raising,
so callers can check ``is_complete`` / ``is_token_invalid`` and decide.
"""

import json
from typing import Any, Self
from urllib.parse import parse_qs, urlparse

from nextengine_cli.api.exceptions import TOKEN_INVALID_CODE
from nextengine_cli.api.models.base import NextEngineModel
from nextengine_cli.api.models.tokens import TokenPair


def _decode_object(body: str) -> dict[str, Any]:
    """Decode a JSON object, returning {} for anything else."""
    try:
        data = json.loads(body)
    except (json.JSONDecodeError, TypeError):
        return {}
    return data if isinstance(data, dict) else {}


def _text(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


class AuthorizationHandoff(NextEngineModel):
    """Short-lived parameters handed from the login redirect to the token exchange."""

    uid: str
    state: str


class LoginRedirectResult(NextEngineModel):
    """Query parameters found on the URL the login POST ended up at."""

    url: str
    uid: str | None = None
    state: str | None = None

    @classmethod
    def from_url(cls, url: Any) -> Self:
        query = parse_qs(urlparse(str(url)).query)
        return cls(
            url=str(url),
            uid=_text(query.get("uid", [None])[0]),
            state=_text(query.get("state", [None])[0]),
        )

    @property
    def is_complete(self) -> bool:
        return self.uid is not None and self.state is not None

    def to_handoff(self) -> AuthorizationHandoff:
        if not self.is_complete:
            raise ValueError("uid/state missing from redirect")
        return AuthorizationHandoff(uid=self.uid, state=self.state)


class TokenFields(NextEngineModel):
    """Optional access/refresh tokens carried by a JSON response."""

    access_token: str | None = None
    refresh_token: str | None = None

    @property
    def has_tokens(self) -> bool:
        return self.access_token is not None and self.refresh_token is not None

    def to_token_pair(self) -> TokenPair | None:
        if not self.has_tokens:
            return None
        return TokenPair(access_token=self.access_token, refresh_token=self.refresh_token)


class ExchangeResult(TokenFields):
    """Response of the uid/state to token exchange."""

    @classmethod
    def from_body(cls, body: str) -> Self:
        data = _decode_object(body)
        return cls(
            access_token=_text(data.get("access_token")),
            refresh_token=_text(data.get("refresh_token")),
        )


class ApiCallResult(TokenFields):
    """Response of a forwarded API call.

    ``body`` is the raw response text, returned to the caller untouched.
    """

    body: str
    is_json: bool = False
    code: str | None = None

    @classmethod
    def from_body(cls, body: str) -> Self:
        data = _decode_object(body)
        return cls(
            body=body,
            is_json=bool(data),
            code=_text(data.get("code")),
            access_token=_text(data.get("access_token")),
            refresh_token=_text(data.get("refresh_token")),
        )

    @property
    def is_token_invalid(self) -> bool:
        return self.code == TOKEN_INVALID_CODE
