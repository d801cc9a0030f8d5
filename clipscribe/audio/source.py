"""The current audio clip and its playback resource."""

import logging
import os
import tempfile
from pathlib import Path
from typing import Callable, Optional, Union

from ..errors import UnsupportedAudioError
from ..models.audio import AudioPayload, DEFAULT_MIME_TYPE, RECORDING_LABEL

logger = logging.getLogger(__name__)

# Extensions accepted by the file picker
SUPPORTED_AUDIO_TYPES = {
    ".mp3": "audio/mp3",
    ".wav": "audio/wav",
    ".webm": "audio/webm",
    ".ogg": "audio/ogg",
    ".m4a": "audio/m4a",
}

_EXTENSIONS_BY_MIME = {mime: ext for ext, mime in SUPPORTED_AUDIO_TYPES.items()}


def mime_type_for(path: Union[str, Path]) -> str:
    """Return the MIME type for an audio file name.

    Raises:
        UnsupportedAudioError: if the extension is not an accepted audio type
    """
    suffix = Path(path).suffix.lower()
    try:
        return SUPPORTED_AUDIO_TYPES[suffix]
    except KeyError:
        accepted = ", ".join(ext.lstrip(".").upper() for ext in SUPPORTED_AUDIO_TYPES)
        raise UnsupportedAudioError(
            f"Unsupported audio file '{Path(path).name}'. Accepted types: {accepted}"
        ) from None


class PlaybackHandle:
    """A temporary file exposing a payload for playback.

    Released exactly once; further release() calls do nothing.
    """

    def __init__(self, path: Path):
        self.path = path
        self.released = False

    @classmethod
    def acquire(cls, payload: AudioPayload) -> "PlaybackHandle":
        suffix = _EXTENSIONS_BY_MIME.get(payload.mime_type, ".audio")
        fd, name = tempfile.mkstemp(prefix="clipscribe_", suffix=suffix)
        with os.fdopen(fd, "wb") as f:
            f.write(payload.data)
        logger.debug(f"Playback file created: {name}")
        return cls(Path(name))

    @property
    def uri(self) -> str:
        return self.path.as_uri()

    def release(self) -> None:
        if self.released:
            return
        self.released = True
        try:
            self.path.unlink()
            logger.debug(f"Playback file released: {self.path}")
        except FileNotFoundError:
            logger.warning(f"Playback file already gone: {self.path}")


HandleFactory = Callable[[AudioPayload], PlaybackHandle]


class AudioSource:
    """Holds at most one AudioPayload, from a picked file or a recording."""

    def __init__(self, handle_factory: Optional[HandleFactory] = PlaybackHandle.acquire):
        """Initialize audio source.

        Args:
            handle_factory: Creates the playback resource for each payload,
                            or None to skip playback resources
        """
        self.handle_factory = handle_factory
        self.payload: Optional[AudioPayload] = None
        self.playback: Optional[PlaybackHandle] = None

    @property
    def has_payload(self) -> bool:
        return self.payload is not None

    def set_from_file(self, path: Union[str, Path]) -> AudioPayload:
        """Replace the current payload with the contents of an audio file."""
        path = Path(path)
        mime_type = mime_type_for(path)
        data = path.read_bytes()
        payload = AudioPayload(data=data, mime_type=mime_type, source_label=path.name)
        logger.info(f"Selected file {path.name} ({payload.size_mb:.2f} MB, {mime_type})")
        return self._replace(payload)

    def set_from_recording(
        self,
        recording: Union[AudioPayload, bytes],
        mime_type: Optional[str] = None,
    ) -> AudioPayload:
        """Replace the current payload with a recorded clip."""
        if isinstance(recording, AudioPayload):
            payload = recording
        else:
            payload = AudioPayload(
                data=bytes(recording),
                mime_type=mime_type or DEFAULT_MIME_TYPE,
                source_label=RECORDING_LABEL,
            )
        logger.info(f"Using recording ({payload.size_bytes} bytes, {payload.mime_type})")
        return self._replace(payload)

    def clear(self) -> None:
        """Discard the current payload and release its playback resource."""
        self._discard()
        logger.debug("Audio source cleared")

    def _replace(self, payload: AudioPayload) -> AudioPayload:
        # Acquire first: a failed acquisition leaves the current payload in place
        playback = self.handle_factory(payload) if self.handle_factory is not None else None
        try:
            self._discard()
        finally:
            self.payload = payload
            self.playback = playback
        return payload

    def _discard(self) -> None:
        # Single release path for every way a payload is removed
        try:
            if self.playback is not None:
                self.playback.release()
        finally:
            self.playback = None
            self.payload = None
