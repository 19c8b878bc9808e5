"""Data models for the HTTP fetch layer."""

from dataclasses import dataclass
from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, model_validator


class FetchErrorClass(str, Enum):
    """Classification of chain failures.

    - INVALID_SCHEME: URL is not http or https (no I/O performed)
    - UPSTREAM_STATUS: Non-2xx terminal status, or a redirect without Location
    - REDIRECT_LOOP: Redirect budget exhausted
    - PAYLOAD_TOO_LARGE: Decompressed body exceeded the byte ceiling
    - TRANSPORT_ERROR: Connection, DNS or decompression failure
    - TIMEOUT: Hop did not complete within the request timeout
    """

    INVALID_SCHEME = "INVALID_SCHEME"
    UPSTREAM_STATUS = "UPSTREAM_STATUS"
    REDIRECT_LOOP = "REDIRECT_LOOP"
    PAYLOAD_TOO_LARGE = "PAYLOAD_TOO_LARGE"
    TRANSPORT_ERROR = "TRANSPORT_ERROR"
    TIMEOUT = "TIMEOUT"


class FetchError(BaseModel):
    """Typed error from a fetch chain.

    Carries the failure kind and, for upstream failures, the status code
    returned by the remote server.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    error_class: FetchErrorClass = Field(description="Classification of the error")
    message: Annotated[str, Field(min_length=1, description="Diagnostic message")]
    status_code: int | None = Field(
        default=None, description="Upstream HTTP status code if available"
    )
    url: str | None = Field(default=None, description="URL of the failing hop")


class FetchAbortedError(Exception):
    """Raised inside a chain to terminate it with a failure outcome."""

    def __init__(self, error: FetchError) -> None:
        """Initialize the error.

        Args:
            error: Structured description of the failure.
        """
        self.error = error
        super().__init__(error.message)

    @classmethod
    def build(
        cls,
        error_class: FetchErrorClass,
        message: str,
        status_code: int | None = None,
        url: str | None = None,
    ) -> "FetchAbortedError":
        """Create the exception from its error fields."""
        return cls(
            FetchError(
                error_class=error_class,
                message=message,
                status_code=status_code,
                url=url,
            )
        )


class FetchOutcome(BaseModel):
    """Terminal outcome of one top-level fetch.

    Exactly one of ``text`` or ``error`` is set.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    url: str = Field(description="Requested URL")
    final_url: str | None = Field(
        default=None, description="URL of the hop that produced the body"
    )
    text: str | None = Field(default=None, description="Decoded body text")
    charset: str | None = Field(default=None, description="Resolved charset")
    redirect_count: Annotated[int, Field(ge=0)] = 0
    error: FetchError | None = Field(default=None, description="Failure details")

    @model_validator(mode="after")
    def check_exclusive(self) -> "FetchOutcome":
        """Ensure the outcome is either a success or a failure."""
        if (self.text is None) == (self.error is None):
            msg = "FetchOutcome requires exactly one of text or error"
            raise ValueError(msg)
        return self

    @property
    def is_success(self) -> bool:
        """Check if the chain produced decoded text."""
        return self.error is None


@dataclass(frozen=True)
class FetchRequest:
    """One hop of a chain: target URL and redirects taken so far."""

    url: str
    redirect_count: int = 0

    def follow(self, target: str) -> "FetchRequest":
        """Return the request for the next hop."""
        return FetchRequest(url=target, redirect_count=self.redirect_count + 1)


@dataclass(frozen=True)
class MetaRefresh:
    """An HTML-level redirect instruction found in markup.

    Attributes:
        delay: Delay in seconds before the browser would navigate.
        target: Raw target URL, possibly relative.
    """

    delay: int
    target: str
