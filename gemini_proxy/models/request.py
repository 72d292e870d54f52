"""Request models for the chat proxy endpoint."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from gemini_proxy.errors import InvalidRequestError


class ContentKind(str, Enum):
    """Kind of a single inbound content item."""

    TEXT = "text"
    IMAGE = "image"
    AUDIO = "audio"
    VIDEO = "video"
    PDF = "pdf"


# MIME types the upstream file service accepts for prompt attachments
SUPPORTED_MIME_TYPES = frozenset(
    {
        # Images
        "image/png",
        "image/jpeg",
        "image/webp",
        "image/heic",
        "image/heif",
        # Audio
        "audio/wav",
        "audio/mp3",
        "audio/mpeg",
        "audio/aiff",
        "audio/aac",
        "audio/ogg",
        "audio/flac",
        # Video
        "video/mp4",
        "video/mpeg",
        "video/mov",
        "video/quicktime",
        "video/avi",
        "video/x-flv",
        "video/mpg",
        "video/webm",
        "video/wmv",
        "video/3gpp",
        # Documents
        "application/pdf",
        "text/plain",
    }
)


class ContentItem(BaseModel):
    """One item of the inbound prompt.

    For ``text`` items ``data`` is the literal prompt text. For every other
    kind ``data`` references the binary payload (an http(s) URL or a
    ``data:`` URL) and ``mimeType`` is required.
    """

    type: str = Field(..., description="Content kind: text, image, audio, video or pdf")
    data: str | None = Field(default=None, description="Prompt text or payload reference")
    mimeType: str | None = Field(default=None, description="MIME type of the payload")

    @property
    def is_text(self) -> bool:
        return self.type == ContentKind.TEXT.value

    def check(self) -> None:
        """Raise InvalidRequestError unless the item is complete for its kind."""
        try:
            kind = ContentKind(self.type)
        except ValueError:
            raise InvalidRequestError(f"Unsupported content type: {self.type}") from None

        if kind is ContentKind.TEXT:
            return
        if not self.mimeType or not self.data:
            raise InvalidRequestError(f"Missing mimeType or data for {kind.value} content")
        if self.mimeType not in SUPPORTED_MIME_TYPES:
            raise InvalidRequestError(
                f"Unsupported mimeType for {kind.value} content: {self.mimeType}"
            )


class ChatRequest(BaseModel):
    """Request model for the streaming chat endpoint."""

    contents: list[ContentItem] = Field(..., description="Prompt content items")
    history: list[dict[str, Any]] | None = Field(
        default=None, description="Prior conversation turns in upstream format"
    )
    config: dict[str, Any] | None = Field(
        default=None, description="Generation parameters and optional systemInstruction"
    )
    model: str | None = Field(default=None, description="Model name override")

    @property
    def has_attachments(self) -> bool:
        return any(not item.is_text for item in self.contents)

    @classmethod
    def parse(cls, body: Any) -> "ChatRequest":
        """Validate a decoded JSON body, raising InvalidRequestError on bad shape."""
        if not isinstance(body, dict):
            raise InvalidRequestError("Request body must be a JSON object")

        contents = body.get("contents")
        if not isinstance(contents, list) or not contents:
            raise InvalidRequestError("contents is required and must be a non-empty array")

        try:
            request = cls.model_validate(body)
        except ValidationError as e:
            error = e.errors()[0]
            location = ".".join(str(part) for part in error["loc"])
            raise InvalidRequestError(f"Invalid request field {location}: {error['msg']}") from e

        for item in request.contents:
            item.check()
        return request
