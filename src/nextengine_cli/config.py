"""Configuration management using Pydantic Settings."""

import logging
from pathlib import Path
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

logger = logging.getLogger(__name__)

# Default locations, relative to the working directory
ENV_PATH = Path("env")
STATE_DIR = Path("tmp")
DEFAULT_PARAMS_FILE = "api_params"


class ConfigFileError(Exception):
    """Raised when a key=value file cannot be read."""

    def __init__(self, path: Path, reason: str):
        super().__init__(f"Cannot read {path}: {reason}")
        self.path = path


def parse_key_value_lines(lines) -> dict[str, str]:
    """Parse ``key=value`` lines into a dict.

    Only lines with exactly one ``=`` are kept. Keys and values are
    whitespace-trimmed, lines with an empty key are skipped, and a later
    duplicate key overrides an earlier one.
    """
    data: dict[str, str] = {}
    for line in lines:
        parts = line.split("=")
        if len(parts) != 2:
            continue
        key, value = parts[0].strip(), parts[1].strip()
        if not key:
            continue
        data[key] = value
    return data


def normalize_path(path: str) -> str:
    """Trim surrounding whitespace and slashes from a request path."""
    return path.strip(" \t\n\r\0\x0b/")


def read_key_value_file(path: Path | str) -> dict[str, str]:
    """Read a flat ``key=value`` file (env file or request parameter file).

    Raises:
        ConfigFileError: If the file is missing or unreadable
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            data = parse_key_value_lines(f)
    except OSError as e:
        raise ConfigFileError(path, e.strerror or str(e)) from e
    except UnicodeDecodeError as e:
        raise ConfigFileError(path, "not UTF-8") from e
    logger.debug(f"Read {len(data)} entries from {path}")
    return data


class KeyValueFileSettingsSource(PydanticBaseSettingsSource):
    """Settings source that loads the flat key=value env file.

    Keys are matched case-insensitively against field names, so the
    file can keep the upper-case names (``LOGIN_ID=...``).
    """

    def __init__(self, settings_cls: type[BaseSettings], env_file: Path | str | None = None):
        super().__init__(settings_cls)
        self.env_file = Path(env_file) if env_file is not None else ENV_PATH

    def get_field_value(
        self, field: Any, field_name: str
    ) -> tuple[Any, str, bool]:
        """Get field value from the env file."""
        config = self._load_config()
        return config.get(field_name), field_name, False

    def _load_config(self) -> dict[str, str]:
        if not self.env_file.exists():
            return {}
        fields = self.settings_cls.model_fields
        return {
            key.lower(): value
            for key, value in read_key_value_file(self.env_file).items()
            if key.lower() in fields
        }

    def __call__(self) -> dict[str, Any]:
        """Return all config values."""
        return self._load_config()


class Settings(BaseSettings):
    """Credentials and runtime options, loaded once per process."""

    model_config = SettingsConfigDict(
        env_prefix="NEXTENGINE_",
        case_sensitive=False,
        frozen=True,
    )

    login_id: str = Field(description="Login code for the sign-in form")
    login_password: str = Field(description="Password for the sign-in form")
    client_id: str = Field(description="Application client id")
    client_secret: str = Field(description="Application client secret")
    base_server: str = Field(description="Login server, e.g. https://base.next-engine.org")
    api_server: str = Field(description="API server, e.g. https://api.next-engine.org")

    env_file: Path = Field(default=ENV_PATH, description="key=value file with the fields above")
    timeout: int = Field(default=30, ge=5, le=120, description="HTTP timeout in seconds")
    verify_ssl: bool = Field(default=False, description="Verify TLS certificates")
    max_redirects: int = Field(default=10, ge=1, le=30)
    max_token_retries: int = Field(
        default=1,
        ge=0,
        le=3,
        description="Re-authentications allowed per call when the API rejects the tokens",
    )
    state_dir: Path = Field(
        default=STATE_DIR,
        description="Directory for the cookie jar and token cache",
    )

    @field_validator("base_server", "api_server", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("state_dir", mode="after")
    @classmethod
    def ensure_state_dir_exists(cls, v: Path) -> Path:
        """Create state directory if it doesn't exist."""
        v.mkdir(parents=True, exist_ok=True)
        return v

    @property
    def cookie_file(self) -> Path:
        """Path to the persisted cookie jar."""
        return self.state_dir / "cookie"

    @property
    def token_file(self) -> Path:
        """Path to the token cache file."""
        return self.state_dir / "token"

    @property
    def lock_file(self) -> Path:
        return self.state_dir / ".state.lock"

    @property
    def sign_in_url(self) -> str:
        return f"{self.base_server}/users/sign_in"

    @property
    def neauth_url(self) -> str:
        """Endpoint exchanging uid/state for tokens."""
        return self.api_url("api_neauth")

    def api_url(self, path: str) -> str:
        return f"{self.api_server}/{normalize_path(path)}"

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize settings sources - priority: init > env > key=value file."""
        env_file = getattr(init_settings, "init_kwargs", {}).get("env_file")
        return (
            init_settings,
            env_settings,
            KeyValueFileSettingsSource(settings_cls, env_file),
        )


def load_settings(env_file: Path | str | None = None, **overrides: Any) -> Settings:
    """Build the settings for this process.

    Args:
        env_file: key=value file holding the credentials (default: ./env)
        **overrides: Explicit field values, highest priority
    """
    if env_file is not None:
        overrides["env_file"] = Path(env_file)
    return Settings(**overrides)
