"""Session-related data models."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .transcription import EditableTranscript, TranscriptionResult


class SessionState(Enum):
    """Top-level state of a transcription session."""
    IDLE = "idle"
    PROCESSING = "processing"
    ERROR = "error"


@dataclass
class SessionContext:
    """Mutable state of one transcription session.

    Owned by a SessionController; nothing else should mutate it.
    """
    state: SessionState = SessionState.IDLE
    result: Optional[TranscriptionResult] = None
    error_message: Optional[str] = None
    recorder_error: Optional[str] = None
    transcript: EditableTranscript = field(default_factory=EditableTranscript)
    copied: bool = False
    generation: int = 0  # Bumped whenever the payload changes

    def reset(self) -> None:
        """Drop any result, error and transcript; back to IDLE."""
        self.state = SessionState.IDLE
        self.result = None
        self.error_message = None
        self.copied = False
        self.transcript.clear()
