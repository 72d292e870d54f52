"""Data models for the application."""

from .request import ChatRequest, ContentItem, ContentKind, SUPPORTED_MIME_TYPES
from .response import TextDeltaEvent, EndEvent, ErrorEvent, ErrorResponse, HealthResponse

__all__ = [
    "ChatRequest",
    "ContentItem",
    "ContentKind",
    "SUPPORTED_MIME_TYPES",
    "TextDeltaEvent",
    "EndEvent",
    "ErrorEvent",
    "ErrorResponse",
    "HealthResponse",
]
