from __future__ import annotations

from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from google.genai import errors as genai_errors

from gemini_proxy.config import Settings, get_settings
from gemini_proxy.main import app
from gemini_proxy.routers.chat import get_genai_client

SECRET = "test-secret"
AUTH_HEADERS = {"Authorization": f"Bearer {SECRET}"}


def chunk(text):
    return SimpleNamespace(text=text)


def api_error(message, code=403, status="PERMISSION_DENIED"):
    return genai_errors.ClientError(
        code, {"error": {"code": code, "message": message, "status": status}}
    )


async def _iterate(items, error=None):
    for item in items:
        yield item
    if error is not None:
        raise error


class _StubFiles:
    def __init__(self, client):
        self._client = client
        self.uploads = []
        self.gets = []
        self.upload_name = "files/test-file"
        self.upload_error = None
        self.states = []

    async def upload(self, *, file, config=None):
        self._client.calls += 1
        if self.upload_error is not None:
            raise self.upload_error
        self.uploads.append({"payload": file.read(), "config": config})
        return SimpleNamespace(name=self.upload_name, uri=None, mime_type=None, state=None)

    async def get(self, *, name):
        self._client.calls += 1
        self.gets.append(name)
        return self.states.pop(0)


class _StubModels:
    def __init__(self, client):
        self._client = client
        self.requests = []

    async def generate_content_stream(self, *, model, contents, config=None):
        self._client.calls += 1
        self.requests.append({"model": model, "contents": contents, "config": config})
        return self._client.open_stream()


class _StubChat:
    def __init__(self, client):
        self._client = client
        self.messages = []

    async def send_message_stream(self, message):
        self._client.calls += 1
        self.messages.append(message)
        return self._client.open_stream()


class _StubChats:
    def __init__(self, client):
        self._client = client
        self.created = []
        self.last_chat = None

    def create(self, *, model, config=None, history=None):
        self._client.calls += 1
        self.created.append({"model": model, "config": config, "history": history})
        self.last_chat = _StubChat(self._client)
        return self.last_chat


class StubGenaiClient:
    """Records every upstream call and streams the configured chunks.

    Like the SDK, the returned stream does nothing until first pulled, so
    ``invoke_error`` surfaces on the first chunk rather than at call time.
    """

    def __init__(self, chunks=None, stream_error=None, invoke_error=None):
        self.calls = 0
        self.chunks = [chunk(text) for text in (chunks or [])]
        self.stream_error = stream_error
        self.invoke_error = invoke_error
        self.aio = SimpleNamespace(
            files=_StubFiles(self),
            models=_StubModels(self),
            chats=_StubChats(self),
        )

    def open_stream(self):
        if self.invoke_error is not None:
            return _iterate([], self.invoke_error)
        return _iterate(self.chunks, self.stream_error)


@pytest.fixture
def settings():
    return Settings(
        gemini_api_key="test-key",
        proxy_secret_key=SECRET,
        default_model="gemini-2.5-flash",
    )


@pytest.fixture
def stub_client():
    return StubGenaiClient(chunks=["Hel", "lo"])


@pytest.fixture
def client(settings, stub_client):
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_genai_client] = lambda: stub_client
    try:
        yield TestClient(app, raise_server_exceptions=False)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def no_sleep(monkeypatch):
    from gemini_proxy.services import attachments

    delays: list[float] = []

    async def _fake_sleep(delay):
        delays.append(delay)

    monkeypatch.setattr(attachments.asyncio, "sleep", _fake_sleep)
    return delays
