"""Transcription client: payload in, tagged TranscriptionResult out."""

import logging
import time
from typing import Optional

from .base import AbstractGenerationBackend
from .gemini_backend import GeminiBackend
from .pipeline import ReformatStage, TranscribeStage, TranscriptionPipeline
from ..config import ClipscribeConfig
from ..errors import ConfigurationError, ServiceError
from ..models.audio import AudioPayload
from ..models.transcription import TranscriptionResult

logger = logging.getLogger(__name__)

MISSING_CREDENTIAL_MESSAGE = "API_KEY environment variable is not set"


class TranscriptionClient:
    """Transcribes an AudioPayload and optionally reformats the text.

    Service failures come back as failed results. Only a missing
    credential is raised, as ConfigurationError.
    """

    def __init__(self,
                 backend: Optional[AbstractGenerationBackend],
                 reformat: bool = True,
                 timeout_seconds: Optional[float] = 120.0,
                 credential_error: Optional[str] = None):
        """Initialize transcription client.

        Args:
            backend: Remote generation backend, or None when no credential is configured
            reformat: Whether to run the readability reformatting stage
            timeout_seconds: Per-stage time limit
            credential_error: Message reported when backend is None
        """
        self.backend = backend
        self.credential_error = credential_error or MISSING_CREDENTIAL_MESSAGE
        self.pipeline: Optional[TranscriptionPipeline] = None

        if backend is not None:
            stages = [TranscribeStage(backend)]
            if reformat:
                stages.append(ReformatStage(backend))
            self.pipeline = TranscriptionPipeline(stages, stage_timeout=timeout_seconds)
            logger.info(f"TranscriptionClient ready: {backend.service_name} {backend.model}, "
                        f"stages={self.pipeline.stage_names}")
        else:
            logger.warning(f"TranscriptionClient has no backend: {self.credential_error}")

    @classmethod
    def from_config(cls, config: ClipscribeConfig) -> "TranscriptionClient":
        """Build a Gemini-backed client. A missing credential does not raise here."""
        timeout_seconds = float(config.get('transcription.timeout_seconds', 120.0))
        reformat = bool(config.get('transcription.reformat', True))
        try:
            api_key = config.get_api_key()
        except ConfigurationError as e:
            return cls(None, reformat=reformat, timeout_seconds=timeout_seconds, credential_error=str(e))

        backend = GeminiBackend(
            api_key=api_key,
            model=config.get('gemini.model', 'gemini-2.5-flash'),
            base_url=config.get('gemini.base_url', 'https://generativelanguage.googleapis.com'),
            timeout_seconds=timeout_seconds,
        )
        return cls(backend, reformat=reformat, timeout_seconds=timeout_seconds)

    @property
    def is_configured(self) -> bool:
        return self.pipeline is not None

    def ensure_configured(self) -> None:
        """Raise ConfigurationError if no credential is configured."""
        if not self.is_configured:
            raise ConfigurationError(self.credential_error)

    async def transcribe(self, payload: AudioPayload) -> TranscriptionResult:
        """Transcribe a payload.

        Returns:
            A succeeded result (possibly the canned silence result) or a
            failed result carrying a ServiceError

        Raises:
            ConfigurationError: If no credential is configured
        """
        self.ensure_configured()
        start_time = time.time()
        meta = {"service": self.backend.service_name, "model": self.backend.model}

        logger.info(f"Transcribing {payload.source_label} ({payload.size_bytes} bytes, {payload.mime_type})")
        try:
            run = await self.pipeline.run(payload)
        except ServiceError as e:
            logger.error(f"Error during transcription process: {e}")
            return TranscriptionResult.failure(e, processing_time=time.time() - start_time, **meta)

        processing_time = time.time() - start_time
        if not run.text:
            logger.info("Transcription is empty, audio appears to be silent")
            return TranscriptionResult.silence(processing_time=processing_time, **meta)

        logger.info(f"✅ Transcription complete in {processing_time:.2f}s "
                    f"({len(run.text)} chars, reformatted={run.reformatted})")
        return TranscriptionResult.success(
            run.raw_text,
            run.text,
            reformatted=run.reformatted,
            processing_time=processing_time,
            **meta
        )
