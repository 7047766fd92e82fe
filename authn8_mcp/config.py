"""Runtime settings for the Authn8 MCP server."""

from __future__ import annotations

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigError

DEFAULT_API_URL = "https://api.authn8.com"


class Authn8Settings(BaseSettings):
    """Settings read from ``AUTHN8_*`` environment variables or ``.env``.

    Attributes:
        api_key: Personal access token from the Authn8 dashboard.
        api_url: Base URL of the Authn8 API.
        timeout: Per-request network timeout in seconds.
        cache_ttl: Lifetime of the cached account list in seconds.
        log_level: Root logging level for the server process.
    """

    api_key: str | None = None
    api_url: str = DEFAULT_API_URL
    timeout: float = 10.0
    cache_ttl: float = 60.0
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="AUTHN8_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("api_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.strip().rstrip("/") or DEFAULT_API_URL

    def require_api_key(self) -> str:
        """Return the configured token.

        Raises:
            ConfigError: if AUTHN8_API_KEY is unset or blank.
        """
        key = (self.api_key or "").strip()
        if not key:
            raise ConfigError(
                "AUTHN8_API_KEY environment variable is not set. "
                "Please set it to your PAT token from the Authn8 dashboard."
            )
        return key
