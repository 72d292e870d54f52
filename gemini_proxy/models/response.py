"""Response models for the chat proxy endpoints."""

from typing import Literal

from pydantic import BaseModel, Field


class TextDeltaEvent(BaseModel):
    """A chunk of generated text."""

    text: str = Field(..., description="Generated text delta")


class EndEvent(BaseModel):
    """Terminal event sent once the upstream stream is exhausted."""

    finishReason: Literal["STOP"] = Field(default="STOP", description="Reason for finishing")


class ErrorEvent(BaseModel):
    """Terminal event sent when the upstream stream fails mid-way."""

    error: str = Field(..., description="Error message")


class ErrorResponse(BaseModel):
    """Error response model."""

    error: str = Field(..., description="Error message")


class HealthResponse(BaseModel):
    """Liveness probe payload."""

    message: str = Field(..., description="Human readable status message")
    status: Literal["OK"] = Field(default="OK", description="Service status")
    timestamp: str = Field(..., description="ISO-8601 time of the check")
    sdk: str = Field(..., description="Upstream SDK in use")
