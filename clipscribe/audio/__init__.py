"""Audio selection and capture module."""

from .capture import CaptureDevice, PyAudioCaptureDevice
from .recorder import Recorder
from .source import AudioSource, PlaybackHandle, SUPPORTED_AUDIO_TYPES
from .timer import RepeatingTimer

__all__ = [
    'CaptureDevice',
    'PyAudioCaptureDevice',
    'Recorder',
    'AudioSource',
    'PlaybackHandle',
    'SUPPORTED_AUDIO_TYPES',
    'RepeatingTimer',
]
