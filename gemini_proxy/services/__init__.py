"""Services for the application."""

from .attachments import AttachmentResolver
from .provider import GeminiProvider, GenerationMode, select_mode
from .relay import relay_stream
from .session import get_session, close_session

__all__ = [
    "AttachmentResolver",
    "GeminiProvider",
    "GenerationMode",
    "select_mode",
    "relay_stream",
    "get_session",
    "close_session",
]
