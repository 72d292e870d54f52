"""Gemini provider: prompt assembly, mode selection and streamed generation."""

from collections.abc import AsyncIterator
from enum import Enum
from typing import Any

import pydantic
from google import genai
from google.genai import errors as genai_errors
from google.genai import types
from loguru import logger

from gemini_proxy.config import Settings
from gemini_proxy.errors import InvalidRequestError, UpstreamError
from gemini_proxy.models.request import ChatRequest, ContentItem
from gemini_proxy.services.attachments import AttachmentResolver


class GenerationMode(str, Enum):
    """How a request is sent upstream."""

    MULTI_TURN = "multi_turn"
    SINGLE_TURN = "single_turn"


def select_mode(request: ChatRequest) -> GenerationMode:
    """
    Pick multi-turn generation only for text-only prompts that carry history.

    Attachment-bearing prompts are always sent as a single turn.
    """
    if request.history and not request.has_attachments:
        return GenerationMode.MULTI_TURN
    return GenerationMode.SINGLE_TURN


def build_generation_config(config: dict[str, Any] | None) -> types.GenerateContentConfig | None:
    """Convert the caller's generation parameters into the SDK config."""
    if not config:
        return None
    try:
        return types.GenerateContentConfig.model_validate(config)
    except pydantic.ValidationError as e:
        raise InvalidRequestError(f"Invalid generation config: {e.errors()[0]['msg']}") from e


_EXHAUSTED = object()


async def start_stream(chunks: AsyncIterator[Any]) -> AsyncIterator[Any]:
    """
    Pull the first chunk so invocation errors raise before streaming starts.

    Returns an iterator yielding that chunk followed by the rest.
    """
    try:
        first = await anext(chunks)
    except StopAsyncIteration:
        first = _EXHAUSTED
    return _resume(first, chunks)


async def _resume(first: Any, chunks: AsyncIterator[Any]) -> AsyncIterator[Any]:
    try:
        if first is _EXHAUSTED:
            return
        yield first
        async for chunk in chunks:
            yield chunk
    finally:
        aclose = getattr(chunks, "aclose", None)
        if aclose is not None:
            await aclose()


class GeminiProvider:
    """Provider for streamed Gemini generation."""

    def __init__(
        self,
        client: genai.Client,
        settings: Settings,
        resolver: AttachmentResolver | None = None,
    ):
        self.client = client
        self.settings = settings
        self.resolver = resolver or AttachmentResolver(client)

    async def build_parts(self, request: ChatRequest) -> list[types.Part]:
        """
        Normalize content items into prompt parts.

        Attachments are resolved one after another, each fully uploaded
        and processed before the next one starts.
        """
        parts = []
        for item in request.contents:
            part = await self._build_part(item)
            if part is not None:
                parts.append(part)

        if not parts:
            raise InvalidRequestError("No valid content parts could be built from the request")
        return parts

    async def _build_part(self, item: ContentItem) -> types.Part | None:
        if item.is_text:
            if not item.data:
                return None
            return types.Part.from_text(text=item.data)

        return await self.resolver.resolve(item.data, item.mimeType)

    async def stream(
        self, request: ChatRequest, parts: list[types.Part]
    ) -> AsyncIterator[types.GenerateContentResponse]:
        """
        Start streamed generation and return the upstream chunk iterator.

        Args:
            request: The normalized chat request
            parts: Prompt parts built by build_parts

        Returns:
            Async iterator over partial responses
        """
        model = request.model or self.settings.default_model
        config = build_generation_config(request.config)
        mode = select_mode(request)
        logger.info(
            f"Generating with {model} in {mode.value} mode "
            f"({len(parts)} parts, {len(request.history or [])} history turns)"
        )

        try:
            if mode is GenerationMode.MULTI_TURN:
                chunks = await self._stream_chat(model, config, request)
            else:
                chunks = await self.client.aio.models.generate_content_stream(
                    model=model,
                    contents=[types.Content(role="user", parts=parts)],
                    config=config,
                )
            # The SDK sends the request on the first pull
            return await start_stream(chunks)
        except genai_errors.APIError as e:
            logger.error(f"Gemini API error: {e}")
            raise UpstreamError(e.message or str(e)) from e

    async def _stream_chat(
        self,
        model: str,
        config: types.GenerateContentConfig | None,
        request: ChatRequest,
    ) -> AsyncIterator[types.GenerateContentResponse]:
        first = request.contents[0]
        if not first.is_text or not first.data:
            raise InvalidRequestError("The first content item must be non-empty text in a conversation")

        try:
            chat = self.client.aio.chats.create(
                model=model,
                config=config,
                history=request.history,
            )
        except pydantic.ValidationError as e:
            raise InvalidRequestError(f"Invalid history: {e.errors()[0]['msg']}") from e
        return await chat.send_message_stream(first.data)
