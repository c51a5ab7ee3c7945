"""Exceptions for the Next Engine API."""

# Error code the API returns when the access/refresh tokens are no longer valid
TOKEN_INVALID_CODE = "002002"


class NextEngineAPIError(Exception):
    """Base exception for Next Engine API errors."""

    def __init__(self, message: str, body: str | None = None):
        super().__init__(message)
        self.body = body


class TransportError(NextEngineAPIError):
    """The HTTP request itself failed (DNS, connect, timeout, TLS)."""


class TokenInvalidError(NextEngineAPIError):
    """The API rejected the cached tokens and re-authentication did not help."""

    def __init__(self, attempts: int, body: str | None = None):
        super().__init__(
            f"Tokens rejected (code {TOKEN_INVALID_CODE}) after {attempts} attempt(s)",
            body=body,
        )
        self.attempts = attempts
