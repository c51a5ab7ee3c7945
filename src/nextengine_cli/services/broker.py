"""Broker service: the operations behind the CLI commands."""

import logging
from dataclasses import dataclass
from pathlib import Path

from nextengine_cli.api.gateway import ApiGateway
from nextengine_cli.api.models import TokenPair
from nextengine_cli.api.transport import HttpTransport
from nextengine_cli.auth.auth_chain import AuthChain
from nextengine_cli.auth.constants import state_file_lock
from nextengine_cli.auth.token_manager import TokenCache
from nextengine_cli.config import DEFAULT_PARAMS_FILE, Settings, read_key_value_file

logger = logging.getLogger(__name__)


@dataclass
class TokenStatus:
    """What is currently cached on disk."""

    token_file: Path
    tokens: TokenPair | None

    @property
    def is_logged_in(self) -> bool:
        return self.tokens is not None


class BrokerService:
    """Runs each operation under the state lock with one transport session."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.token_cache = TokenCache(settings.token_file)

    def _transport(self) -> HttpTransport:
        return HttpTransport.from_settings(self.settings)

    def invoke(self, path: str, params_file: Path | str = DEFAULT_PARAMS_FILE) -> str:
        """Forward one API call; returns the raw response body."""
        params = read_key_value_file(params_file)
        with state_file_lock(self.settings.lock_file), self._transport() as transport:
            gateway = ApiGateway(self.settings, transport, self.token_cache)
            return gateway.call(path, params)

    def login(self) -> TokenPair:
        """Discard the current session and log in from scratch."""
        with state_file_lock(self.settings.lock_file), self._transport() as transport:
            transport.clear_cookies()
            self.token_cache.delete_token()
            return AuthChain(self.settings, transport, self.token_cache).run()

    def logout(self) -> bool:
        """Delete cached tokens and cookies. Returns False if nothing was cached."""
        with state_file_lock(self.settings.lock_file):
            removed = self.token_cache.delete_token()
            cookie_file = self.settings.cookie_file
            if cookie_file.exists():
                cookie_file.unlink()
                removed = True
        logger.info("Session state removed" if removed else "No session state to remove")
        return removed

    def status(self) -> TokenStatus:
        """Report the cached pair; a corrupt cache is removed while holding the lock."""
        with state_file_lock(self.settings.lock_file):
            tokens = self.token_cache.get_token()
        return TokenStatus(token_file=self.token_cache.token_file, tokens=tokens)
