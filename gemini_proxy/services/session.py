"""HTTP session management and attachment payload retrieval."""

import base64
import binascii
from urllib.parse import unquote_to_bytes

from curl_cffi.requests import AsyncSession
from curl_cffi.requests.exceptions import RequestException, Timeout
from loguru import logger

from gemini_proxy.config import settings
from gemini_proxy.errors import InvalidRequestError, UpstreamError


_session: AsyncSession | None = None


async def get_session() -> AsyncSession:
    """Get or create a shared async session."""
    global _session
    if _session is None:
        _session = AsyncSession()
    return _session


async def close_session() -> None:
    """Close the shared async session."""
    global _session
    if _session is not None:
        await _session.close()
        _session = None


def decode_data_url(reference: str) -> bytes:
    """Decode an RFC 2397 ``data:`` URL into raw bytes."""
    header, sep, payload = reference.partition(",")
    if not sep:
        raise InvalidRequestError("Malformed data URL: missing ',' separator")
    if header.endswith(";base64"):
        try:
            return base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as e:
            raise InvalidRequestError(f"Malformed data URL: {e}") from e
    return unquote_to_bytes(payload)


async def fetch_bytes(reference: str, session: AsyncSession | None = None) -> bytes:
    """
    Retrieve the binary payload behind an attachment reference.

    ``data:`` URLs are decoded locally, anything else is fetched over HTTP
    with the shared session.
    """
    if reference.startswith("data:"):
        return decode_data_url(reference)

    if session is None:
        session = await get_session()

    try:
        response = await session.get(
            reference,
            timeout=settings.timeout,
            proxy=settings.proxy,
        )
    except Timeout as e:
        logger.error(f"Attachment fetch timeout: {e}")
        raise UpstreamError(f"Attachment fetch timed out: {reference}") from e
    except RequestException as e:
        logger.error(f"Attachment fetch failed: {e}")
        raise UpstreamError(f"Attachment fetch failed: {e}") from e

    if response.status_code >= 400:
        logger.error(
            f"Attachment fetch failed - status: {response.status_code}, url: {reference}"
        )
        raise UpstreamError(
            f"Attachment fetch failed: status {response.status_code}"
        )

    return response.content
