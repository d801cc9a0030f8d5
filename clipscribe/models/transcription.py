"""Transcription-related data models."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from ..errors import ClipscribeError

SILENCE_MESSAGE = "The audio appears to be silent or could not be transcribed."
FAILURE_PREFIX = "Transcription failed"


class TranscriptionStatus(Enum):
    """Outcome of a transcription operation."""
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class TranscriptionResult:
    """Result of a transcription operation.

    Use the ``success``, ``silence`` and ``failure`` constructors. Callers
    should branch on ``status`` (or ``succeeded``), never on the text.
    """
    status: TranscriptionStatus
    raw_text: str = ""
    formatted_text: str = ""
    error: Optional[ClipscribeError] = None
    silent: bool = False
    reformatted: bool = False
    processing_time: float = 0.0
    timestamp: datetime = field(default_factory=datetime.now)
    service: str = ""
    model: str = ""

    @classmethod
    def success(cls, raw_text: str, formatted_text: str, **kwargs) -> "TranscriptionResult":
        return cls(
            status=TranscriptionStatus.SUCCEEDED,
            raw_text=raw_text,
            formatted_text=formatted_text or raw_text,
            **kwargs
        )

    @classmethod
    def silence(cls, **kwargs) -> "TranscriptionResult":
        """Canned result for audio that produced no text."""
        return cls(
            status=TranscriptionStatus.SUCCEEDED,
            raw_text="",
            formatted_text=SILENCE_MESSAGE,
            silent=True,
            **kwargs
        )

    @classmethod
    def failure(cls, error: ClipscribeError, **kwargs) -> "TranscriptionResult":
        return cls(status=TranscriptionStatus.FAILED, error=error, **kwargs)

    @property
    def succeeded(self) -> bool:
        return self.status is TranscriptionStatus.SUCCEEDED

    @property
    def error_detail(self) -> Optional[str]:
        """Human-readable failure description, or None on success."""
        if self.succeeded:
            return None
        reason = str(self.error) if self.error else "An unknown error occurred during transcription."
        return f"{FAILURE_PREFIX}: {reason}"

    @property
    def text(self) -> str:
        """Text used to seed the editable transcript."""
        return self.formatted_text or self.raw_text


class EditableTranscript:
    """User-editable transcription buffer.

    Seeded from each successful result; edits are free-form and do not
    affect the session state.
    """

    def __init__(self, text: str = ""):
        self._text = text
        self._seed = text

    @property
    def text(self) -> str:
        return self._text

    @property
    def is_edited(self) -> bool:
        return self._text != self._seed

    def seed(self, result: TranscriptionResult) -> None:
        self._seed = result.text
        self._text = result.text

    def edit(self, text: str) -> None:
        self._text = text

    def clear(self) -> None:
        self._text = ""
        self._seed = ""

    def __bool__(self) -> bool:
        return bool(self._text)

    def __str__(self) -> str:
        return self._text
