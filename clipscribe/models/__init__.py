"""Data models for the ClipScribe application."""

from .audio import AudioPayload, RecordingSession, RecordingStats, DEFAULT_MIME_TYPE
from .transcription import (
    TranscriptionResult,
    TranscriptionStatus,
    EditableTranscript,
    SILENCE_MESSAGE,
)
from .session import SessionState, SessionContext
from .events import SessionEvent, RecorderTickEvent

__all__ = [
    "AudioPayload",
    "RecordingSession",
    "RecordingStats",
    "DEFAULT_MIME_TYPE",
    "TranscriptionResult",
    "TranscriptionStatus",
    "EditableTranscript",
    "SILENCE_MESSAGE",
    "SessionState",
    "SessionContext",
    "SessionEvent",
    "RecorderTickEvent",
]
