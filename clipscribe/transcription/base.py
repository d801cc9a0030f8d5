"""Abstract base classes for generation backends."""

from abc import ABC, abstractmethod
from typing import Optional
import logging

from ..models.audio import AudioPayload

logger = logging.getLogger(__name__)


class AbstractGenerationBackend(ABC):
    """A remote model that turns an instruction (plus optional audio) into text."""

    service_name = "unknown"

    def __init__(self, model: str):
        """Initialize backend with the model identifier used for every request."""
        self.model = model

    @abstractmethod
    async def generate(self, prompt: str, audio: Optional[AudioPayload] = None) -> str:
        """Send one request and return the response text.

        Args:
            prompt: Instruction text
            audio: Audio to send alongside the instruction, if any

        Returns:
            Response text, untrimmed

        Raises:
            ServiceError: If the call fails for any reason
        """
        pass
