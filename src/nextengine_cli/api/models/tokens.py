"""Token models."""

from typing import Self

from pydantic import ConfigDict, Field

from nextengine_cli.api.models.base import NextEngineModel


class TokenPair(NextEngineModel):
    """Access/refresh token pair, the only record of the token cache."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    access_token: str = Field(min_length=1)
    refresh_token: str = Field(min_length=1)

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary for JSON serialization."""
        return {
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
        }

    @classmethod
    def from_dict(cls, data: dict) -> Self:
        """Create from dictionary."""
        return cls(
            access_token=data["access_token"],
            refresh_token=data["refresh_token"],
        )

    def masked(self) -> str:
        """Short preview safe to print."""
        return f"{self.access_token[:6]}…"
