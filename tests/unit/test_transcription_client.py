"""Unit tests for TranscriptionClient."""

import pytest

from clipscribe.config import ClipscribeConfig
from clipscribe.errors import ConfigurationError, ServiceError
from clipscribe.models.transcription import SILENCE_MESSAGE
from clipscribe.transcription.client import TranscriptionClient
from clipscribe.transcription.gemini_backend import GeminiBackend


@pytest.mark.unit
class TestTranscriptionClient:

    @pytest.mark.asyncio
    async def test_success(self, make_backend, sample_payload):
        backend = make_backend(["bonjour le monde", "Bonjour le monde."])
        client = TranscriptionClient(backend)

        result = await client.transcribe(sample_payload)

        assert result.succeeded
        assert result.raw_text == "bonjour le monde"
        assert result.formatted_text == "Bonjour le monde."
        assert result.reformatted
        assert result.service == "stub"
        assert result.model == "stub-model"
        assert result.processing_time >= 0

    @pytest.mark.asyncio
    async def test_silence_makes_one_call(self, make_backend, sample_payload):
        backend = make_backend([""])
        client = TranscriptionClient(backend)

        result = await client.transcribe(sample_payload)

        assert result.succeeded
        assert result.silent
        assert result.formatted_text == SILENCE_MESSAGE
        assert len(backend.calls) == 1

    @pytest.mark.asyncio
    async def test_reformat_failure_still_succeeds(self, make_backend, sample_payload):
        backend = make_backend(["raw text", ServiceError("Gemini API error: 500 - oops")])
        client = TranscriptionClient(backend)

        result = await client.transcribe(sample_payload)

        assert result.succeeded
        assert result.formatted_text == "raw text"
        assert not result.reformatted

    @pytest.mark.asyncio
    async def test_transcribe_failure_is_failed_result(self, make_backend, sample_payload):
        backend = make_backend([ServiceError("Gemini API error: 400 - bad audio")])
        client = TranscriptionClient(backend)

        result = await client.transcribe(sample_payload)

        assert not result.succeeded
        assert result.error_detail == "Transcription failed: Gemini API error: 400 - bad audio"
        assert result.formatted_text == ""

    @pytest.mark.asyncio
    async def test_timeout_is_failed_result(self, make_backend, sample_payload):
        backend = make_backend(["slow"], delay=0.5)
        client = TranscriptionClient(backend, timeout_seconds=0.05)

        result = await client.transcribe(sample_payload)

        assert not result.succeeded
        assert "timed out" in result.error_detail

    @pytest.mark.asyncio
    async def test_reformat_disabled_makes_one_call(self, make_backend, sample_payload):
        backend = make_backend(["just the words"])
        client = TranscriptionClient(backend, reformat=False)

        result = await client.transcribe(sample_payload)

        assert result.formatted_text == "just the words"
        assert len(backend.calls) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("responses", [
        ["words", "Words."],
        ["words", ""],
        [""],
        [ServiceError("Gemini API error: 500 - x")],
        ["words", ServiceError("Gemini API error: 500 - x")],
    ])
    async def test_never_empty_on_success(self, make_backend, sample_payload, responses):
        client = TranscriptionClient(make_backend(responses))

        result = await client.transcribe(sample_payload)

        if result.succeeded:
            assert result.formatted_text
        else:
            assert result.error_detail

    @pytest.mark.asyncio
    async def test_missing_credential_raises(self, sample_payload):
        client = TranscriptionClient(None)

        assert not client.is_configured
        with pytest.raises(ConfigurationError, match="API_KEY"):
            await client.transcribe(sample_payload)


@pytest.mark.unit
class TestClientFromConfig:

    def test_without_credential(self):
        client = TranscriptionClient.from_config(ClipscribeConfig())

        assert not client.is_configured
        with pytest.raises(ConfigurationError, match="API_KEY environment variable is not set"):
            client.ensure_configured()

    def test_with_credential(self, monkeypatch):
        monkeypatch.setenv("API_KEY", "test-key")
        config = ClipscribeConfig()
        config.set('gemini.model', 'gemini-test')
        config.set('transcription.reformat', False)

        client = TranscriptionClient.from_config(config)

        assert client.is_configured
        assert isinstance(client.backend, GeminiBackend)
        assert client.backend.api_key == "test-key"
        assert client.backend.model == "gemini-test"
        assert client.pipeline.stage_names == ["transcribe"]

    def test_gemini_key_fallback(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "fallback-key")

        client = TranscriptionClient.from_config(ClipscribeConfig())

        assert client.backend.api_key == "fallback-key"
