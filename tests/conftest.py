"""Pytest configuration and fixtures for ClipScribe tests."""

import asyncio
import logging
import wave
from pathlib import Path
from typing import List, Optional
from unittest.mock import Mock, patch

import numpy as np
import pytest
from pubsub import pub

from clipscribe.errors import CapabilityError
from clipscribe.models.audio import AudioPayload
from clipscribe.transcription.base import AbstractGenerationBackend


# Configure logging for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without I/O")
    config.addinivalue_line("markers", "integration: tests spanning several components")
    config.addinivalue_line("markers", "hardware: tests that need a real microphone")


@pytest.fixture(autouse=True)
def reset_pubsub():
    """Drop pubsub listeners registered by a test."""
    yield
    pub.unsubAll()


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch):
    """Keep real credentials and .env files out of tests."""
    monkeypatch.delenv("API_KEY", raising=False)
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.setattr("clipscribe.config.load_dotenv", lambda *args, **kwargs: False)


@pytest.fixture
def sample_audio_chunk():
    """Generate a sample audio chunk for testing."""
    # Generate 1024 samples of 16-bit audio (sine wave)
    sample_rate = 16000
    duration = 1024 / sample_rate  # ~0.064 seconds
    freq = 440  # A4 note

    t = np.linspace(0, duration, 1024, False)
    wave_data = np.sin(2 * np.pi * freq * t)

    # Convert to 16-bit integers
    audio_data = (wave_data * 32767).astype(np.int16)
    return audio_data.tobytes()


@pytest.fixture
def sample_audio_file(tmp_path, sample_audio_chunk):
    """Create a sample WAV file for testing."""
    file_path = tmp_path / "test_audio.wav"

    with wave.open(str(file_path), 'wb') as wf:
        wf.setnchannels(1)  # Mono
        wf.setsampwidth(2)  # 16-bit
        wf.setframerate(16000)  # 16kHz
        for _ in range(10):
            wf.writeframes(sample_audio_chunk)

    return file_path


@pytest.fixture
def sample_payload():
    return AudioPayload(data=b"\x1aE\xdf\xa3fake-webm", mime_type="audio/webm", source_label="clip.webm")


@pytest.fixture
def mock_pyaudio():
    """Mock PyAudio for testing without actual audio hardware."""
    with patch('pyaudio.PyAudio') as mock_pyaudio_class:
        mock_pyaudio_instance = Mock()
        mock_stream = Mock()

        # Configure mock stream
        mock_stream.read.return_value = b'\x00' * 2048  # Silent audio
        mock_stream.stop_stream.return_value = None
        mock_stream.close.return_value = None

        # Configure mock PyAudio instance
        mock_pyaudio_instance.open.return_value = mock_stream
        mock_pyaudio_instance.terminate.return_value = None

        mock_pyaudio_class.return_value = mock_pyaudio_instance

        yield {
            'class': mock_pyaudio_class,
            'instance': mock_pyaudio_instance,
            'stream': mock_stream
        }


class StubBackend(AbstractGenerationBackend):
    """Generation backend returning canned responses in call order.

    A response that is an exception instance is raised instead of returned.
    """

    service_name = "stub"

    def __init__(self, responses: Optional[list] = None, delay: float = 0.0):
        super().__init__("stub-model")
        self.responses = list(responses or [])
        self.delay = delay
        self.calls: List[tuple] = []

    async def generate(self, prompt: str, audio: Optional[AudioPayload] = None) -> str:
        self.calls.append((prompt, audio))
        await asyncio.sleep(self.delay)
        response = self.responses.pop(0) if self.responses else ""
        if isinstance(response, BaseException):
            raise response
        return response


@pytest.fixture
def make_backend():
    """Factory for StubBackend instances."""
    return StubBackend


class FakeCaptureDevice:
    """Capture device driven by the test instead of a microphone."""

    def __init__(self, mime_type: Optional[str] = None, fail: bool = False):
        self.mime_type = mime_type
        self.fail = fail
        self.on_chunk = None
        self.open_count = 0
        self.close_count = 0

    def open(self, on_chunk) -> None:
        self.open_count += 1
        if self.fail:
            raise CapabilityError("Microphone access was denied.")
        self.on_chunk = on_chunk

    def push(self, chunk: bytes) -> None:
        self.on_chunk(chunk)

    def close(self) -> None:
        self.close_count += 1

    def encode(self, data: bytes) -> bytes:
        return data


@pytest.fixture
def fake_device():
    return FakeCaptureDevice()


@pytest.fixture
def make_device():
    return FakeCaptureDevice


class FakeTimer:
    """Repeating timer fired by hand."""

    def __init__(self, interval, callback):
        self.interval = interval
        self.callback = callback
        self.started = False
        self.cancel_count = 0

    def start(self) -> None:
        self.started = True

    def cancel(self) -> None:
        self.cancel_count += 1

    def fire(self, times: int = 1) -> None:
        for _ in range(times):
            self.callback()


@pytest.fixture
def fake_timers():
    """Timer factory that keeps every FakeTimer it builds in ``.timers``."""
    timers: List[FakeTimer] = []

    def factory(interval, callback):
        timer = FakeTimer(interval, callback)
        timers.append(timer)
        return timer

    factory.timers = timers
    return factory
