"""Unit tests for GeminiBackend against a local aiohttp server."""

import asyncio
import base64

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from clipscribe.errors import ServiceError
from clipscribe.transcription.gemini_backend import GeminiBackend


def make_app(handler):
    app = web.Application()
    app.router.add_post("/v1beta/models/{model}:generateContent", handler)
    return app


def candidate(*texts, thought=None):
    parts = [{"text": t} for t in texts]
    if thought:
        parts.insert(0, {"text": thought, "thought": True})
    return {"candidates": [{"content": {"parts": parts}}]}


def server_url(server) -> str:
    return str(server.make_url("")).rstrip("/")


@pytest.mark.unit
class TestGeminiBackendParts:

    def test_backend_requires_key(self):
        with pytest.raises(ValueError):
            GeminiBackend(api_key="")

    def test_endpoint(self):
        backend = GeminiBackend("key", model="gemini-2.5-flash", base_url="https://example.test/")

        assert backend.endpoint == "https://example.test/v1beta/models/gemini-2.5-flash:generateContent"

    def test_build_parts_with_audio(self, sample_payload):
        parts = GeminiBackend._build_parts("Transcribe", sample_payload)

        assert parts[0]["inline_data"]["mime_type"] == "audio/webm"
        assert base64.b64decode(parts[0]["inline_data"]["data"]) == sample_payload.data
        assert parts[1] == {"text": "Transcribe"}

    def test_build_parts_text_only(self):
        assert GeminiBackend._build_parts("Format this", None) == [{"text": "Format this"}]

    def test_extract_text_skips_thoughts(self):
        result = candidate("Hello ", "world", thought="thinking...")

        assert GeminiBackend._extract_text(result) == "Hello world"

    def test_extract_text_blocked(self):
        with pytest.raises(ServiceError, match="SAFETY"):
            GeminiBackend._extract_text({"promptFeedback": {"blockReason": "SAFETY"}})

    def test_extract_text_empty_parts(self):
        assert GeminiBackend._extract_text({"candidates": [{"content": {}}]}) == ""


@pytest.mark.unit
class TestGeminiBackendRequests:

    @pytest.mark.asyncio
    async def test_generate_sends_audio_and_key(self, sample_payload):
        received = {}

        async def handler(request):
            received["model"] = request.match_info["model"]
            received["key"] = request.headers.get("x-goog-api-key")
            received["body"] = await request.json()
            return web.json_response(candidate("bonjour le monde"))

        async with TestServer(make_app(handler)) as server:
            backend = GeminiBackend("secret", model="gemini-test", base_url=server_url(server))
            text = await backend.generate("Transcribe", audio=sample_payload)

        assert text == "bonjour le monde"
        assert received["model"] == "gemini-test"
        assert received["key"] == "secret"
        parts = received["body"]["contents"][0]["parts"]
        assert parts[0]["inline_data"]["mime_type"] == "audio/webm"
        assert parts[1]["text"] == "Transcribe"

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        async def handler(request):
            return web.Response(status=403, text="API key not valid")

        async with TestServer(make_app(handler)) as server:
            backend = GeminiBackend("bad", base_url=server_url(server))
            with pytest.raises(ServiceError, match="Gemini API error: 403 - API key not valid"):
                await backend.generate("Format this")

    @pytest.mark.asyncio
    async def test_request_timeout(self):
        async def handler(request):
            await asyncio.sleep(0.5)
            return web.json_response(candidate("late"))

        async with TestServer(make_app(handler)) as server:
            backend = GeminiBackend("key", base_url=server_url(server), timeout_seconds=0.05)
            with pytest.raises(ServiceError, match="timed out"):
                await backend.generate("Format this")

    @pytest.mark.asyncio
    async def test_connection_refused(self):
        async def handler(request):
            return web.json_response(candidate("unused"))

        async with TestServer(make_app(handler)) as server:
            url = server_url(server)

        backend = GeminiBackend("key", base_url=url, timeout_seconds=2.0)
        with pytest.raises(ServiceError, match="request failed"):
            await backend.generate("Format this")
