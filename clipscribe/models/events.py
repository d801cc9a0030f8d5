"""Event models for pub/sub notifications."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict


@dataclass
class SessionEvent:
    """Session lifecycle event."""
    event_type: str  # "idle", "processing", "error", "copied", ...
    event_id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    timestamp: datetime = field(default_factory=datetime.now)
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class RecorderTickEvent:
    """Emitted once per second while recording."""
    elapsed_seconds: int
    timestamp: datetime = field(default_factory=datetime.now)
