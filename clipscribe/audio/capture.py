"""Microphone capture devices."""

import io
import logging
import wave
from threading import Thread, Event
from typing import Callable, Optional, Protocol

import numpy as np
import pyaudio

from ..errors import CapabilityError

logger = logging.getLogger(__name__)

ChunkCallback = Callable[[bytes], None]

PERMISSION_DENIED_MESSAGE = (
    "Microphone access was denied or no input device is available. "
    "Please allow microphone access in your system settings."
)


class CaptureDevice(Protocol):
    """A source of audio fragments for the Recorder."""

    mime_type: Optional[str]

    def open(self, on_chunk: ChunkCallback) -> None:
        """Start delivering fragments to ``on_chunk``.

        Raises:
            CapabilityError: if the device cannot be opened
        """
        ...

    def close(self) -> None:
        """Stop capturing and release the device. Every fragment is delivered before this returns."""
        ...

    def encode(self, data: bytes) -> bytes:
        """Wrap concatenated fragments into the container named by ``mime_type``."""
        ...


class PyAudioCaptureDevice:
    """Captures 16-bit PCM from the default input device and encodes it as WAV."""

    mime_type = "audio/wav"

    def __init__(
        self,
        sample_rate: int = 16000,
        chunk_size: int = 1024,
        channels: int = 1,
    ):
        """Initialize capture device with specified parameters.

        Args:
            sample_rate: Audio sample rate in Hz
            chunk_size: Size of each audio chunk in samples
            channels: Number of audio channels (1 for mono)
        """
        self.sample_rate = sample_rate
        self.chunk_size = chunk_size
        self.channels = channels
        self.format = pyaudio.paInt16

        self.recording_thread: Optional[Thread] = None
        self.stop_event = Event()
        self.pyaudio_instance: Optional[pyaudio.PyAudio] = None
        self.stream = None
        self.peak_level = 0.0
        self.total_chunks = 0

    def open(self, on_chunk: ChunkCallback) -> None:
        """Open the input stream and start reading on a background thread."""
        if self.recording_thread and self.recording_thread.is_alive():
            logger.warning("Capture already in progress")
            return

        try:
            self.pyaudio_instance = pyaudio.PyAudio()
            self.stream = self.pyaudio_instance.open(
                format=self.format,
                channels=self.channels,
                rate=self.sample_rate,
                input=True,
                frames_per_buffer=self.chunk_size,
            )
        except (OSError, IOError) as e:
            logger.error(f"Could not open audio input: {e}")
            self._release()
            raise CapabilityError(PERMISSION_DENIED_MESSAGE) from e

        logger.info(f"Audio stream opened: {self.sample_rate}Hz, "
                    f"{self.chunk_size} samples/chunk")
        self.stop_event.clear()
        self.peak_level = 0.0
        self.total_chunks = 0
        self.recording_thread = Thread(target=self._record_continuously, args=(on_chunk,), daemon=True)
        self.recording_thread.name = "AudioCaptureThread"
        self.recording_thread.start()

    def close(self) -> None:
        """Stop reading and release the stream."""
        self.stop_event.set()
        if self.recording_thread and self.recording_thread.is_alive():
            self.recording_thread.join(timeout=2.0)
            if self.recording_thread.is_alive():
                logger.warning("Recording thread did not stop cleanly")
        self.recording_thread = None
        self._release()
        logger.info(f"Audio capture closed. Total chunks: {self.total_chunks}")

    def encode(self, data: bytes) -> bytes:
        """Wrap raw PCM in a WAV container."""
        buffer = io.BytesIO()
        with wave.open(buffer, 'wb') as wf:
            wf.setnchannels(self.channels)
            wf.setsampwidth(pyaudio.get_sample_size(self.format))
            wf.setframerate(self.sample_rate)
            wf.writeframes(data)
        return buffer.getvalue()

    def _record_continuously(self, on_chunk: ChunkCallback) -> None:
        """Internal method: continuous read loop in background thread."""
        while not self.stop_event.is_set():
            try:
                audio_chunk = self.stream.read(self.chunk_size, exception_on_overflow=False)
            except (OSError, IOError) as e:
                logger.error(f"Audio read failed, stopping capture: {e}")
                break
            self.total_chunks += 1
            self.peak_level = max(self.peak_level, self._peak(audio_chunk))
            on_chunk(audio_chunk)

    @staticmethod
    def _peak(audio_chunk: bytes) -> float:
        samples = np.frombuffer(audio_chunk, dtype=np.int16)
        if samples.size == 0:
            return 0.0
        return float(np.abs(samples.astype(np.int32)).max()) / 32768.0

    def _release(self) -> None:
        if self.stream is not None:
            try:
                self.stream.stop_stream()
                self.stream.close()
            except OSError as e:
                logger.warning(f"Error closing audio stream: {e}")
            self.stream = None
        if self.pyaudio_instance is not None:
            self.pyaudio_instance.terminate()
            self.pyaudio_instance = None
