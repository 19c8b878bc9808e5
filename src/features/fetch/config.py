"""Configuration models for the HTTP fetch layer."""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.features.fetch.constants import (
    DEFAULT_ACCEPT,
    DEFAULT_ACCEPT_ENCODING,
    DEFAULT_MAX_BYTES,
    DEFAULT_MAX_REDIRECTS,
    DEFAULT_POOL_SIZE,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_USER_AGENT,
    META_REFRESH_MAX_DELAY_SECONDS,
    SNIFF_PREFIX_BYTES,
)


class FetchConfig(BaseModel):
    """Configuration for the HTTP fetch layer.

    Central configuration for chain limits, request headers and
    connection pool sizing. Defaults match the observed production values.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_redirects: Annotated[int, Field(ge=0, le=50)] = DEFAULT_MAX_REDIRECTS
    max_bytes: Annotated[int, Field(ge=1024, le=100 * 1024 * 1024)] = (
        DEFAULT_MAX_BYTES
    )
    timeout_seconds: Annotated[float, Field(gt=0.0, le=300.0)] = (
        DEFAULT_TIMEOUT_SECONDS
    )
    pool_size: Annotated[int, Field(ge=1, le=1024)] = DEFAULT_POOL_SIZE
    user_agent: Annotated[str, Field(min_length=1, max_length=500)] = (
        DEFAULT_USER_AGENT
    )
    accept: Annotated[str, Field(min_length=1)] = DEFAULT_ACCEPT
    accept_encoding: Annotated[str, Field(min_length=1)] = DEFAULT_ACCEPT_ENCODING
    sniff_prefix_bytes: Annotated[int, Field(ge=256, le=1024 * 1024)] = (
        SNIFF_PREFIX_BYTES
    )
    meta_refresh_max_delay: Annotated[int, Field(ge=0, le=60)] = (
        META_REFRESH_MAX_DELAY_SECONDS
    )

    @field_validator("user_agent", "accept", "accept_encoding")
    @classmethod
    def validate_header_value(cls, v: str) -> str:
        """Reject header values that would split the request."""
        if "\r" in v or "\n" in v:
            msg = "Header values must not contain line breaks"
            raise ValueError(msg)
        return v

    def base_headers(self) -> dict[str, str]:
        """Get the browser-like headers attached to every hop.

        Returns:
            Dictionary of header name to value.
        """
        return {
            "User-Agent": self.user_agent,
            "Accept": self.accept,
            "Accept-Encoding": self.accept_encoding,
        }
