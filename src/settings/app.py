"""Application settings powered by Pydantic BaseSettings."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.features.fetch.config import FetchConfig
from src.features.fetch.constants import (
    DEFAULT_MAX_BYTES,
    DEFAULT_MAX_REDIRECTS,
    DEFAULT_POOL_SIZE,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_USER_AGENT,
)


class AppSettings(BaseSettings):
    """Centralized environment configuration.

    Every field reads from a ``URLFETCH_``-prefixed variable, e.g.
    ``URLFETCH_MAX_REDIRECTS=3``.
    """

    model_config = SettingsConfigDict(
        env_prefix="URLFETCH_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    max_redirects: int = Field(default=DEFAULT_MAX_REDIRECTS)
    max_bytes: int = Field(default=DEFAULT_MAX_BYTES)
    timeout_seconds: float = Field(default=DEFAULT_TIMEOUT_SECONDS)
    pool_size: int = Field(default=DEFAULT_POOL_SIZE)
    user_agent: str = Field(default=DEFAULT_USER_AGENT)
    log_level: str = Field(default="INFO")
    json_logs: bool = Field(default=True)

    def to_fetch_config(self) -> FetchConfig:
        """Build the validated fetch configuration."""
        return FetchConfig(
            max_redirects=self.max_redirects,
            max_bytes=self.max_bytes,
            timeout_seconds=self.timeout_seconds,
            pool_size=self.pool_size,
            user_agent=self.user_agent,
        )


def get_settings() -> AppSettings:
    """Get a settings instance."""
    return AppSettings()
