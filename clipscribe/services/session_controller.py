"""Session controller: owns the transcription state machine."""

import asyncio
import logging
from pathlib import Path
from typing import Callable, Optional, Set, Union

from ..audio.capture import PyAudioCaptureDevice
from ..audio.recorder import Recorder
from ..audio.source import AudioSource
from ..config import ClipscribeConfig
from ..errors import CapabilityError, ClipboardError
from ..models.audio import AudioPayload
from ..models.events import SessionEvent
from ..models.session import SessionContext, SessionState
from ..models.transcription import TranscriptionResult
from ..transcription.client import TranscriptionClient
from .clipboard import Clipboard
from .publisher import SessionPublisher

logger = logging.getLogger(__name__)

COPY_ACK_SECONDS = 2.0


class SessionController:
    """Mediates between the audio source, the recorder and the transcription client.

    States: IDLE -> PROCESSING -> IDLE | ERROR; ERROR -> IDLE on a new
    selection, clear or retry. At most one transcription is in flight.
    """

    def __init__(self,
                 client: TranscriptionClient,
                 source: Optional[AudioSource] = None,
                 recorder: Optional[Recorder] = None,
                 clipboard: Optional[Clipboard] = None,
                 publisher: Optional[SessionPublisher] = None,
                 context: Optional[SessionContext] = None,
                 ack_seconds: float = COPY_ACK_SECONDS):
        """Initialize session controller.

        Args:
            client: Transcription client
            source: Holder of the current audio payload
            recorder: Microphone recorder, None if recording is unavailable
            clipboard: Clipboard used by copy_to_clipboard
            publisher: Receives a SessionEvent on every state change
            context: Session state; a fresh one is created if omitted
            ack_seconds: How long the "copied" acknowledgment stays on
        """
        self.client = client
        self.source = source or AudioSource()
        self.recorder = recorder
        self.clipboard = clipboard or Clipboard()
        self.publisher = publisher
        self.context = context or SessionContext()
        self.ack_seconds = ack_seconds

        self._task: Optional[asyncio.Future] = None
        self._cancelled_tasks: Set[asyncio.Future] = set()
        self._ack_handle: Optional[asyncio.TimerHandle] = None

    @classmethod
    def from_config(cls, config: ClipscribeConfig) -> "SessionController":
        """Wire up the Gemini client, microphone recorder, clipboard and publisher."""
        publisher = SessionPublisher()
        device = PyAudioCaptureDevice(
            sample_rate=config.get('audio.sample_rate', 16000),
            chunk_size=config.get('audio.chunk_size', 1024),
            channels=config.get('audio.channels', 1),
        )
        recorder = Recorder(device, on_tick=publisher.publish_tick)
        return cls(
            client=TranscriptionClient.from_config(config),
            source=AudioSource(),
            recorder=recorder,
            clipboard=Clipboard(),
            publisher=publisher,
            ack_seconds=float(config.get('clipboard.ack_seconds', COPY_ACK_SECONDS)),
        )

    @property
    def state(self) -> SessionState:
        return self.context.state

    @property
    def payload(self) -> Optional[AudioPayload]:
        return self.source.payload

    @property
    def transcript(self) -> str:
        return self.context.transcript.text

    @property
    def playback_uri(self) -> Optional[str]:
        return self.source.playback.uri if self.source.playback else None

    @property
    def is_recording(self) -> bool:
        return self.recorder is not None and self.recorder.is_recording

    # Audio selection

    def select_file(self, path: Union[str, Path]) -> AudioPayload:
        """Make an audio file the current payload, discarding any result or error."""
        return self._select(lambda: self.source.set_from_file(path), "file selected")

    def use_recording(self, recording: Union[AudioPayload, bytes]) -> AudioPayload:
        """Make a recorded clip the current payload, discarding any result or error."""
        return self._select(lambda: self.source.set_from_recording(recording), "recording selected")

    def clear(self) -> None:
        """Drop the payload, result, error and transcript."""
        self.source.clear()
        self._invalidate("cleared")

    def _select(self, change: Callable[[], AudioPayload], reason: str) -> AudioPayload:
        previous = self.source.payload
        try:
            return change()
        finally:
            # Invalidate whenever the payload changed, even if the change raised
            if self.source.payload is not previous:
                self._invalidate(reason)

    def _invalidate(self, reason: str) -> None:
        self.context.generation += 1
        self._cancel_task()
        self._cancel_ack()
        self.context.reset()
        logger.info(f"Session reset ({reason}), generation {self.context.generation}")
        self._publish(reason=reason)

    # Recording

    def toggle_recording(self) -> Optional[AudioPayload]:
        """Start recording, or stop and use the clip if already recording.

        Capability errors are stored in ``context.recorder_error``.

        Returns:
            The new payload when a recording was stopped, else None
        """
        if self.recorder is None:
            self.context.recorder_error = "Recording is not available."
            return None

        self.context.recorder_error = None
        try:
            payload = self.recorder.start_recording()
        except CapabilityError as e:
            self.context.recorder_error = str(e)
            logger.error(f"Error starting recording: {e}")
            self._publish(event_type="recorder_error", reason=str(e))
            return None

        if payload is not None:
            return self.use_recording(payload)
        return None

    def stop_recording(self) -> Optional[AudioPayload]:
        """Stop recording and use the clip. No-op when not recording."""
        if not self.is_recording:
            return None
        payload = self.recorder.stop_recording()
        if payload is None:
            return None
        return self.use_recording(payload)

    # Transcription

    async def submit(self) -> Optional[TranscriptionResult]:
        """Transcribe the current payload.

        No-op (returns None) without a payload or while PROCESSING.

        Raises:
            ConfigurationError: If no credential is configured; the state
                does not change
        """
        payload = self.source.payload
        if payload is None:
            logger.debug("submit ignored: no audio selected")
            return None
        if self.context.state is SessionState.PROCESSING:
            logger.info("submit ignored: transcription already in progress")
            return None

        self.client.ensure_configured()

        generation = self.context.generation
        self.context.result = None
        self.context.error_message = None
        self.context.copied = False
        self.context.transcript.clear()
        self._set_state(SessionState.PROCESSING)

        task = asyncio.ensure_future(self.client.transcribe(payload))
        self._task = task
        try:
            result = await task
        except asyncio.CancelledError:
            if generation == self.context.generation:
                self._set_state(SessionState.IDLE)
            if task not in self._cancelled_tasks:
                raise
            logger.info("Transcription cancelled")
            return None
        except Exception as e:
            logger.exception("Unexpected error during transcription")
            if generation == self.context.generation:
                self.context.error_message = f"Failed to transcribe audio: {e}"
                self._set_state(SessionState.ERROR)
            return None
        finally:
            if self._task is task:
                self._task = None
            self._cancelled_tasks.discard(task)

        if generation != self.context.generation:
            logger.info("Discarding transcription result for a replaced payload")
            return None

        self.context.result = result
        if result.succeeded:
            self.context.transcript.seed(result)
            self._set_state(SessionState.IDLE)
        else:
            self.context.error_message = result.error_detail
            self._set_state(SessionState.ERROR)
        return result

    def cancel(self) -> bool:
        """Cancel the in-flight transcription. Returns True if one was running."""
        return self._cancel_task()

    def _cancel_task(self) -> bool:
        if self._task is None or self._task.done():
            return False
        self._cancelled_tasks.add(self._task)
        self._task.cancel()
        return True

    # Transcript

    def edit_transcript(self, text: str) -> None:
        """Replace the transcript text. Does not affect the session state."""
        self.context.transcript.edit(text)

    async def copy_to_clipboard(self) -> bool:
        """Copy the transcript to the clipboard.

        On success ``context.copied`` is True for ``ack_seconds``. Failures
        are logged and leave the session state alone.
        """
        text = self.context.transcript.text
        if not text:
            logger.info("Nothing to copy")
            return False

        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, self.clipboard.write, text)
        except ClipboardError as e:
            logger.error(f"Failed to copy text: {e}")
            return False

        self._cancel_ack()
        self.context.copied = True
        self._ack_handle = loop.call_later(self.ack_seconds, self._clear_copied)
        self._publish(event_type="copied")
        return True

    def _clear_copied(self) -> None:
        self._ack_handle = None
        self.context.copied = False

    def _cancel_ack(self) -> None:
        if self._ack_handle is not None:
            self._ack_handle.cancel()
            self._ack_handle = None
        self.context.copied = False

    # Lifecycle

    def close(self) -> None:
        """Stop recording, cancel work and release the playback resource."""
        if self.is_recording:
            self.recorder.stop_recording()
        self._cancel_task()
        self._cancel_ack()
        self.source.clear()

    def _set_state(self, state: SessionState) -> None:
        previous = self.context.state
        self.context.state = state
        logger.debug(f"Session state {previous.value} -> {state.value}")
        self._publish()

    def _publish(self, event_type: Optional[str] = None, **metadata) -> None:
        if self.publisher is None:
            return
        event = SessionEvent(
            event_type=event_type or self.context.state.value,
            metadata={
                "generation": self.context.generation,
                "error": self.context.error_message,
                **metadata,
            },
        )
        self.publisher.publish_session_event(event)
