"""Application settings loaded from environment variables and .env files."""

from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SpotifySettings(BaseModel):
    """Spotify Web API connection settings.

    Hey future me - client_id/client_secret are the app credentials from
    https://developer.spotify.com/dashboard. They are optional here so the
    settings object can be built without them (tests, docs); CatalogClient
    fails with ValidationError when they are missing at construction time.
    """

    client_id: str = ""
    client_secret: str = ""
    api_base_url: str = "https://api.spotify.com/v1"
    token_url: str = "https://accounts.spotify.com/api/token"  # nosec B105 - public endpoint URL, not a password
    request_timeout: float = Field(default=30.0, gt=0)

    @field_validator("api_base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @property
    def has_credentials(self) -> bool:
        """Check if both client id and secret are configured."""
        return bool(self.client_id.strip() and self.client_secret.strip())


class Settings(BaseSettings):
    """Top-level catalogspot settings.

    Environment variables use the ``CATALOGSPOT_`` prefix and ``__`` for nesting:

        CATALOGSPOT_SPOTIFY__CLIENT_ID=abc
        CATALOGSPOT_SPOTIFY__CLIENT_SECRET=xyz
        CATALOGSPOT_LOG_LEVEL=DEBUG
    """

    model_config = SettingsConfigDict(
        env_prefix="CATALOGSPOT_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    spotify: SpotifySettings = Field(default_factory=SpotifySettings)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_json: bool = False

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: object) -> object:
        if isinstance(value, str):
            return value.upper()
        return value


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Call ``get_settings.cache_clear()`` after changing the environment (tests).
    """
    return Settings()
