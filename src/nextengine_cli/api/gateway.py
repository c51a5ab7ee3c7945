"""Gateway forwarding API calls with the cached tokens attached."""

import logging
from collections.abc import Mapping

from nextengine_cli.api.exceptions import TokenInvalidError
from nextengine_cli.api.models import ApiCallResult, TokenPair
from nextengine_cli.api.transport import HttpTransport
from nextengine_cli.auth.auth_chain import AuthChain
from nextengine_cli.auth.token_manager import TokenCache
from nextengine_cli.config import Settings, normalize_path

logger = logging.getLogger(__name__)

TOKEN_FIELDS = ("access_token", "refresh_token")


def build_request_body(tokens: TokenPair, params: Mapping[str, str]) -> dict[str, str]:
    """Tokens first, caller parameters on top.

    Caller parameters never replace the token fields: a parameter file that
    happens to define ``access_token``/``refresh_token`` would otherwise
    send stale credentials and defeat the re-authentication.
    """
    body = tokens.to_dict()
    for key, value in params.items():
        if key in TOKEN_FIELDS:
            logger.warning(f"Ignoring request parameter '{key}': token fields come from the cache")
            continue
        body[key] = value
    return body


class ApiGateway:
    """Executes one API call, re-authenticating when the tokens are rejected.

    Flow per attempt: resolve tokens (cache, or a full login when the cache
    is empty), POST the call, and inspect the response ``code``. On the
    token-invalid code the cookies and cached tokens are dropped and the
    call is repeated, at most ``max_token_retries`` times.
    """

    def __init__(
        self,
        settings: Settings,
        transport: HttpTransport,
        token_cache: TokenCache | None = None,
        auth_chain: AuthChain | None = None,
    ):
        self.settings = settings
        self.transport = transport
        self.token_cache = token_cache or TokenCache(settings.token_file)
        self.auth_chain = auth_chain or AuthChain(settings, transport, self.token_cache)

    def resolve_tokens(self) -> TokenPair:
        """Cached tokens, or new ones from a full login."""
        tokens = self.token_cache.get_token()
        if tokens is not None:
            logger.debug("Using cached tokens")
            return tokens
        return self.auth_chain.run()

    def invalidate(self) -> None:
        """Forget the session: cookies and cached tokens."""
        self.transport.clear_cookies()
        self.token_cache.delete_token()

    def call(self, path: str, params: Mapping[str, str] | None = None) -> str:
        """Call ``{api_server}/{path}`` and return the raw response body.

        Raises:
            TokenInvalidError: If the tokens are still rejected after the
                allowed re-authentications
            AuthChainError: If a required login fails
            TransportError: If the HTTP request fails
        """
        path = normalize_path(path)
        url = self.settings.api_url(path)
        params = params or {}
        max_attempts = self.settings.max_token_retries + 1

        for attempt in range(1, max_attempts + 1):
            tokens = self.resolve_tokens()
            logger.info(f"POST {url} (attempt {attempt}/{max_attempts})")
            response = self.transport.post(url, data=build_request_body(tokens, params))
            result = ApiCallResult.from_body(response.text)

            if not result.is_token_invalid:
                self._store_returned_tokens(result)
                return result.body

            logger.warning("API rejected the tokens, logging in again")
            self.invalidate()

        raise TokenInvalidError(max_attempts, body=result.body)

    def _store_returned_tokens(self, result: ApiCallResult) -> None:
        """Save the tokens the API echoes back; it may rotate them on any call."""
        if not result.is_json:
            logger.debug("Response is not a JSON object, cache left as is")
            return
        tokens = result.to_token_pair()
        if tokens is None:
            logger.debug("Response carries no tokens, cache left as is")
            return
        self.token_cache.save_token(tokens)
