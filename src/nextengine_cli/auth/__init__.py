"""Authentication module for Next Engine CLI."""

from nextengine_cli.auth.auth_chain import (
    AuthChain,
    AuthChainError,
    ExchangeError,
    LoginError,
    ScrapeError,
)
from nextengine_cli.auth.constants import state_file_lock
from nextengine_cli.auth.token_manager import TokenCache, get_token_cache

__all__ = [
    # Token cache
    "TokenCache",
    "get_token_cache",
    # Login chain
    "AuthChain",
    "AuthChainError",
    "ScrapeError",
    "LoginError",
    "ExchangeError",
    # Locking
    "state_file_lock",
]
