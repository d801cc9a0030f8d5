"""Audio-related data models."""

from dataclasses import dataclass, field
from typing import List

DEFAULT_MIME_TYPE = "audio/webm"
RECORDING_LABEL = "recording"


@dataclass(frozen=True)
class AudioPayload:
    """A complete audio clip ready to be transcribed."""
    data: bytes
    mime_type: str
    source_label: str  # File name, or "recording"

    @property
    def size_bytes(self) -> int:
        return len(self.data)

    @property
    def size_mb(self) -> float:
        """Size in megabytes, rounded for display."""
        return round(self.size_bytes / 1024 / 1024, 2)


@dataclass
class RecordingSession:
    """State of one microphone recording, from start until finalized."""
    active: bool = True
    elapsed_seconds: int = 0
    chunks: List[bytes] = field(default_factory=list)

    @property
    def total_bytes(self) -> int:
        return sum(len(chunk) for chunk in self.chunks)


@dataclass
class RecordingStats:
    """Recording statistics snapshot for display."""
    is_recording: bool
    elapsed_seconds: int
    total_chunks: int
    total_bytes: int
    peak_level: float
