"""Token cache: the access/refresh token pair persisted as one JSON file."""

import json
import logging
import os
from pathlib import Path

from pydantic import ValidationError

from nextengine_cli.api.models import TokenPair
from nextengine_cli.config import Settings

logger = logging.getLogger(__name__)


class TokenCache:
    """Stores exactly one TokenPair on disk.

    The file's presence is the only "have tokens" signal. Writes replace the
    whole record; there is no partial update.
    """

    def __init__(self, token_file: Path):
        self.token_file = Path(token_file)

    def exists(self) -> bool:
        return self.token_file.exists()

    def save_token(self, tokens: TokenPair) -> None:
        """Overwrite the cache with ``tokens``."""
        self.token_file.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.token_file.with_name(self.token_file.name + ".tmp")
        tmp_path.write_text(json.dumps(tokens.to_dict()), encoding="utf-8")
        tmp_path.chmod(0o600)
        os.replace(tmp_path, self.token_file)
        logger.debug(f"Saved tokens to {self.token_file}")

    def get_token(self) -> TokenPair | None:
        """Load the cached pair, or None if there is none.

        A corrupt record is deleted so the next run does a full login.
        """
        if not self.exists():
            return None
        try:
            data = json.loads(self.token_file.read_text(encoding="utf-8"))
            return TokenPair.from_dict(data)
        except (
            UnicodeDecodeError,
            json.JSONDecodeError,
            KeyError,
            TypeError,
            ValidationError,
        ) as e:
            logger.warning(f"Discarding unreadable token cache {self.token_file}: {e}")
            self.delete_token()
            return None

    def delete_token(self) -> bool:
        """Delete the cached pair. Returns False if there was none."""
        try:
            self.token_file.unlink()
        except FileNotFoundError:
            return False
        logger.debug(f"Deleted token cache {self.token_file}")
        return True


def get_token_cache(settings: Settings) -> TokenCache:
    """Get the token cache for these settings."""
    return TokenCache(settings.token_file)
