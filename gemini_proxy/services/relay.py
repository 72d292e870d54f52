"""Relay of upstream chunks as server-sent events."""

from collections.abc import AsyncIterator
from typing import Any

from loguru import logger
from pydantic import BaseModel

from gemini_proxy.models.response import EndEvent, ErrorEvent, TextDeltaEvent


def encode_sse(payload: BaseModel, event: str | None = None) -> str:
    """Frame a payload as one event-stream record."""
    data = f"data: {payload.model_dump_json()}\n\n"
    if event:
        return f"event: {event}\n{data}"
    return data


async def relay_stream(chunks: AsyncIterator[Any] | None) -> AsyncIterator[str]:
    """
    Forward upstream text deltas one at a time, then the end record.

    A failure while draining ends the stream with an ``error`` record
    instead of the ``end`` record. The upstream iterator is closed when
    the relay stops for any reason, including caller disconnect.
    """
    if chunks is None:
        return

    count = 0
    try:
        async for chunk in chunks:
            text = getattr(chunk, "text", None)
            if not text:
                continue
            count += 1
            yield encode_sse(TextDeltaEvent(text=text))
    except Exception as e:
        logger.exception(f"Upstream stream failed after {count} chunks: {e}")
        message = getattr(e, "message", None) or str(e)
        yield encode_sse(ErrorEvent(error=message), event="error")
        return
    finally:
        aclose = getattr(chunks, "aclose", None)
        if aclose is not None:
            await aclose()

    logger.info(f"Stream completed with {count} chunks")
    yield encode_sse(EndEvent(), event="end")
