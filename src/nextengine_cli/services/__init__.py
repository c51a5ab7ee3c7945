"""Services module for Next Engine CLI."""

from nextengine_cli.services.broker import BrokerService, TokenStatus

__all__ = [
    "BrokerService",
    "TokenStatus",
]
