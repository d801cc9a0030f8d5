"""Error taxonomy for ClipScribe."""


class ClipscribeError(Exception):
    """Base class for all ClipScribe errors."""


class ConfigurationError(ClipscribeError, ValueError):
    """Missing credential or unusable configuration. Never retried."""


class CapabilityError(ClipscribeError):
    """The environment denied access to a device (e.g. the microphone)."""


class ServiceError(ClipscribeError):
    """The remote transcription service call failed."""


class FormattingError(ServiceError):
    """The reformatting call failed. Always recovered by falling back to raw text."""


class ClipboardError(ClipscribeError):
    """Writing to the system clipboard failed."""


class UnsupportedAudioError(ClipscribeError, ValueError):
    """The selected file is not one of the accepted audio types."""
