"""Terminal user interface."""

from .transcription_screen import TranscriptionScreen

__all__ = ["TranscriptionScreen"]
