"""Attachment upload and readiness polling against the Gemini file service."""

import asyncio
import io
import uuid

from curl_cffi.requests import AsyncSession
from google import genai
from google.genai import errors as genai_errors
from google.genai import types
from loguru import logger

from gemini_proxy.errors import UpstreamError
from gemini_proxy.services.session import fetch_bytes


# Seconds between file status checks
FILE_POLL_INTERVAL = 5


class AttachmentResolver:
    """Turns an attachment reference into a prompt part backed by an uploaded file."""

    def __init__(self, client: genai.Client, session: AsyncSession | None = None):
        self.client = client
        self.session = session

    async def resolve(self, reference: str, mime_type: str) -> types.Part | None:
        """
        Fetch, upload and wait for an attachment to become usable.

        Args:
            reference: http(s) or data: URL of the payload
            mime_type: MIME type the payload is uploaded with

        Returns:
            A part referencing the uploaded file, or None when the upstream
            did not report both a URI and a MIME type for it
        """
        payload = await fetch_bytes(reference, self.session)
        logger.info(f"Uploading attachment ({mime_type}, {len(payload)} bytes)")

        try:
            uploaded = await self.client.aio.files.upload(
                file=io.BytesIO(payload),
                config=types.UploadFileConfig(mime_type=mime_type),
            )
            name = uploaded.name or str(uuid.uuid4())
            file = await self._wait_until_processed(name)
        except genai_errors.APIError as e:
            logger.error(f"File service error: {e}")
            raise UpstreamError(f"Attachment upload failed: {e.message or e}") from e

        if file.state == types.FileState.FAILED:
            logger.warning(f"Dropping attachment {name}: upstream failed to process it")
            return None

        if not file.uri or not file.mime_type:
            logger.warning(
                f"Dropping attachment {name}: upstream returned "
                f"uri={file.uri!r}, mime_type={file.mime_type!r}"
            )
            return None

        return types.Part.from_uri(file_uri=file.uri, mime_type=file.mime_type)

    async def _wait_until_processed(self, name: str) -> types.File:
        """Poll the file until it leaves the PROCESSING state."""
        file = await self.client.aio.files.get(name=name)
        while file.state == types.FileState.PROCESSING:
            logger.debug(f"File {name} still processing, checking again in {FILE_POLL_INTERVAL}s")
            await asyncio.sleep(FILE_POLL_INTERVAL)
            file = await self.client.aio.files.get(name=name)
        logger.info(f"File {name} ready with state {file.state}")
        return file
