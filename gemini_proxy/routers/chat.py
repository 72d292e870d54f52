"""Streaming chat router."""

import json
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse
from google import genai
from loguru import logger

from gemini_proxy.config import Settings, get_settings
from gemini_proxy.errors import ConfigurationError, InvalidRequestError
from gemini_proxy.middleware import verify_proxy_secret
from gemini_proxy.models.request import ChatRequest
from gemini_proxy.models.response import ErrorResponse, HealthResponse
from gemini_proxy.services.provider import GeminiProvider
from gemini_proxy.services.relay import relay_stream


router = APIRouter()


SDK_NAME = "google-genai"
HEALTH_MESSAGE = "Gemini chat proxy is online and ready to receive POST requests."

STREAM_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}


def get_genai_client(settings: Settings = Depends(get_settings)) -> genai.Client | None:
    """Build the upstream client, or None when no API key is configured."""
    if not settings.gemini_api_key:
        return None
    return genai.Client(api_key=settings.gemini_api_key)


async def _read_json(request: Request):
    try:
        return await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise InvalidRequestError("Request body must be valid JSON") from e


@router.post(
    "/api/chat",
    dependencies=[Depends(verify_proxy_secret)],
    responses={
        200: {"content": {"text/event-stream": {}}, "description": "Event stream"},
        400: {"model": ErrorResponse, "description": "Bad Request"},
        401: {"model": ErrorResponse, "description": "Unauthorized"},
        500: {"model": ErrorResponse, "description": "Internal Server Error"},
    },
    summary="Stream a chat completion",
)
async def chat(
    request: Request,
    client: genai.Client | None = Depends(get_genai_client),
    settings: Settings = Depends(get_settings),
) -> StreamingResponse:
    """
    Stream generated text for a multi-modal prompt.

    Each text delta is sent as ``data: {"text": ...}`` and the stream ends
    with an ``end`` event, or an ``error`` event if generation fails
    after streaming has begun.
    """
    chat_request = ChatRequest.parse(await _read_json(request))
    if client is None:
        raise ConfigurationError("API Key is not configured on the server")
    logger.info(
        f"Received chat request: {len(chat_request.contents)} content items, "
        f"model={chat_request.model or settings.default_model}"
    )

    provider = GeminiProvider(client, settings)
    parts = await provider.build_parts(chat_request)
    chunks = await provider.stream(chat_request, parts)

    return StreamingResponse(
        relay_stream(chunks),
        media_type="text/event-stream",
        headers=STREAM_HEADERS,
    )


@router.get(
    "/api/chat",
    response_model=HealthResponse,
    summary="Health check",
)
async def chat_health() -> HealthResponse:
    """Liveness probe for the chat endpoint."""
    return HealthResponse(
        message=HEALTH_MESSAGE,
        timestamp=datetime.now(timezone.utc).isoformat(),
        sdk=SDK_NAME,
    )
