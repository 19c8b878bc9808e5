"""Models for caller-facing failure responses."""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field


FAILURE_MESSAGE = "Sorry, could not fetch and convert that URL"


class ErrorResponse(BaseModel):
    """Status code and message sent to the output sink for a failed read."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    status_code: int = Field(ge=400, le=599, description="Response status code")
    message: Annotated[str, Field(min_length=1, description="User-facing message")]
