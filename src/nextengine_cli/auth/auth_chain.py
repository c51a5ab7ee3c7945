"""Login chain: from credentials alone to a fresh access/refresh token pair.

The chain mirrors what a browser does against the sign-in page:

1. GET the sign-in page
2. Scrape the ``authenticity_token`` hidden input
3. POST the login code, password and token (same cookie session)
4. Read ``uid`` and ``state`` from the URL the redirects end at
5. POST uid/state plus client credentials to the token exchange endpoint
6. Save the resulting token pair

Every step depends on the previous one; any failure raises a subclass of
:class:`AuthChainError` and nothing is written to the token cache.
"""

import logging

from nextengine_cli.api.models import (
    AuthorizationHandoff,
    ExchangeResult,
    LoginRedirectResult,
    TokenPair,
)
from nextengine_cli.api.transport import HttpTransport
from nextengine_cli.auth.constants import (
    AUTHENTICITY_TOKEN_FIELD,
    LOGIN_CODE_FIELD,
    PASSWORD_FIELD,
)
from nextengine_cli.auth.token_manager import TokenCache
from nextengine_cli.config import Settings
from nextengine_cli.utils.html import extract_input_value

logger = logging.getLogger(__name__)


class AuthChainError(Exception):
    """Base exception for login chain errors.

    ``body`` holds the raw response that made the step fail, if any.
    """

    def __init__(self, message: str, body: str | None = None, url: str | None = None):
        super().__init__(message)
        self.body = body
        self.url = url


class ScrapeError(AuthChainError):
    """The sign-in page has no authenticity token (URL or markup changed)."""


class LoginError(AuthChainError):
    """The login redirect lacks uid/state (bad credentials or changed contract)."""


class ExchangeError(AuthChainError):
    """The token exchange response lacks access_token/refresh_token."""


class AuthChain:
    """Runs the full login sequence over a shared transport."""

    def __init__(self, settings: Settings, transport: HttpTransport, token_cache: TokenCache):
        self.settings = settings
        self.transport = transport
        self.token_cache = token_cache

    def fetch_authenticity_token(self) -> str:
        """Load the sign-in page and scrape its authenticity token.

        Raises:
            ScrapeError: If the hidden input is missing
        """
        response = self.transport.get(
            self.settings.sign_in_url,
            params={"client_id": self.settings.client_id},
        )
        token = extract_input_value(response.text, AUTHENTICITY_TOKEN_FIELD)
        if token is None:
            raise ScrapeError(
                "authenticity token not found on the sign-in page",
                body=response.text,
                url=str(response.url),
            )
        logger.debug("Scraped authenticity token")
        return token

    def submit_credentials(self, authenticity_token: str) -> AuthorizationHandoff:
        """Post the login form and harvest uid/state from the final redirect URL.

        Raises:
            LoginError: If uid or state is missing
        """
        response = self.transport.post(
            self.settings.sign_in_url,
            data={
                LOGIN_CODE_FIELD: self.settings.login_id,
                PASSWORD_FIELD: self.settings.login_password,
                AUTHENTICITY_TOKEN_FIELD: authenticity_token,
            },
            params={"client_id": self.settings.client_id},
        )
        result = LoginRedirectResult.from_url(response.url)
        if not result.is_complete:
            raise LoginError(
                "uid/state missing from the login redirect",
                body=response.text,
                url=result.url,
            )
        logger.debug("Login redirect carried uid and state")
        return result.to_handoff()

    def exchange_tokens(self, handoff: AuthorizationHandoff) -> TokenPair:
        """Exchange uid/state for an access/refresh token pair.

        Raises:
            ExchangeError: If either token is missing from the response
        """
        response = self.transport.post(
            self.settings.neauth_url,
            data={
                "uid": handoff.uid,
                "state": handoff.state,
                "client_id": self.settings.client_id,
                "client_secret": self.settings.client_secret,
            },
        )
        tokens = ExchangeResult.from_body(response.text).to_token_pair()
        if tokens is None:
            raise ExchangeError(
                "access_token/refresh_token missing from the exchange response",
                body=response.text,
                url=str(response.url),
            )
        return tokens

    def run(self) -> TokenPair:
        """Run the whole chain and save the new tokens."""
        logger.info("Logging in to obtain new tokens")
        authenticity_token = self.fetch_authenticity_token()
        handoff = self.submit_credentials(authenticity_token)
        tokens = self.exchange_tokens(handoff)
        self.token_cache.save_token(tokens)
        logger.info("Obtained and cached new tokens")
        return tokens
