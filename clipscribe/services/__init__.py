"""Services layer for ClipScribe application logic."""

from .clipboard import Clipboard
from .publisher import SessionPublisher, SESSION_TOPIC, RECORDER_TICK_TOPIC
from .session_controller import SessionController

__all__ = [
    "Clipboard",
    "SessionPublisher",
    "SESSION_TOPIC",
    "RECORDER_TICK_TOPIC",
    "SessionController",
]
