"""Microphone recorder with a per-second duration counter."""

import logging
import threading
from typing import Callable, Optional

from ..errors import CapabilityError
from ..models.audio import (
    AudioPayload,
    RecordingSession,
    RecordingStats,
    DEFAULT_MIME_TYPE,
    RECORDING_LABEL,
)
from .capture import CaptureDevice
from .timer import RepeatingTimer

logger = logging.getLogger(__name__)

TimerFactory = Callable[[float, Callable[[], None]], RepeatingTimer]


class Recorder:
    """Records one clip at a time from a capture device.

    NOT_RECORDING -> start_recording() -> RECORDING -> stop_recording() (or
    start_recording() again) -> NOT_RECORDING, emitting one AudioPayload.
    """

    def __init__(
        self,
        device: CaptureDevice,
        timer_factory: TimerFactory = RepeatingTimer,
        tick_interval: float = 1.0,
        on_tick: Optional[Callable[[int], None]] = None,
        on_payload: Optional[Callable[[AudioPayload], None]] = None,
    ):
        """Initialize recorder.

        Args:
            device: Capture device delivering audio fragments
            timer_factory: Builds the repeating timer that counts seconds
            tick_interval: Seconds between timer ticks
            on_tick: Called with the elapsed seconds after every tick
            on_payload: Called with the finalized payload on every stop
        """
        self.device = device
        self.timer_factory = timer_factory
        self.tick_interval = tick_interval
        self.on_tick = on_tick
        self.on_payload = on_payload

        self.session: Optional[RecordingSession] = None
        self.last_error: Optional[str] = None
        self._timer: Optional[RepeatingTimer] = None
        self._lock = threading.Lock()

    @property
    def is_recording(self) -> bool:
        session = self.session
        return session is not None and session.active

    @property
    def elapsed_seconds(self) -> int:
        return self.session.elapsed_seconds if self.session else 0

    def start_recording(self) -> Optional[AudioPayload]:
        """Start recording, or stop if already recording.

        Returns:
            The finalized payload when this call acted as a stop, else None

        Raises:
            CapabilityError: if the microphone is denied or unavailable
        """
        if self.is_recording:
            logger.info("start_recording while recording, treating as stop")
            return self.stop_recording()

        self.last_error = None
        with self._lock:
            # Any unfinalized clip from a previous attempt is discarded
            self.session = RecordingSession()

        try:
            self.device.open(self._on_chunk)
        except CapabilityError as e:
            with self._lock:
                self.session = None
            self.last_error = str(e)
            logger.error(f"Could not start recording: {e}")
            raise

        self._timer = self.timer_factory(self.tick_interval, self._on_tick)
        self._timer.start()
        logger.info("Recording started")
        return None

    def stop_recording(self) -> Optional[AudioPayload]:
        """Stop recording and return the finalized payload (None if not recording)."""
        if not self.is_recording:
            logger.warning("No recording in progress")
            return None

        # The timer is always cancelled before the payload is finalized
        timer, self._timer = self._timer, None
        if timer is not None:
            timer.cancel()

        try:
            self.device.close()
        finally:
            with self._lock:
                session = self.session
                session.active = False
                raw = b"".join(session.chunks)

        data = self.device.encode(raw)
        mime_type = getattr(self.device, "mime_type", None) or DEFAULT_MIME_TYPE
        payload = AudioPayload(data=data, mime_type=mime_type, source_label=RECORDING_LABEL)
        logger.info(f"Recording stopped after {session.elapsed_seconds}s: "
                    f"{len(session.chunks)} chunks, {payload.size_bytes} bytes ({mime_type})")

        if self.on_payload:
            self.on_payload(payload)
        return payload

    def get_recording_stats(self) -> RecordingStats:
        """Get current recording statistics."""
        with self._lock:
            session = self.session
            if session is None:
                return RecordingStats(False, 0, 0, 0, 0.0)
            return RecordingStats(
                is_recording=session.active,
                elapsed_seconds=session.elapsed_seconds,
                total_chunks=len(session.chunks),
                total_bytes=session.total_bytes,
                peak_level=getattr(self.device, "peak_level", 0.0),
            )

    def _on_chunk(self, chunk: bytes) -> None:
        with self._lock:
            if self.session is not None and self.session.active:
                self.session.chunks.append(chunk)

    def _on_tick(self) -> None:
        with self._lock:
            if self.session is None or not self.session.active:
                return
            self.session.elapsed_seconds += 1
            elapsed = self.session.elapsed_seconds
        if self.on_tick:
            self.on_tick(elapsed)
