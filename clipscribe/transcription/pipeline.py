"""Sequential pipeline of named transcription stages."""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence

from .base import AbstractGenerationBackend
from ..errors import FormattingError, ServiceError
from ..models.audio import AudioPayload

logger = logging.getLogger(__name__)


class StagePolicy(Enum):
    """What happens when a stage fails."""
    REQUIRED = "required"   # failure fails the whole run
    FALLBACK = "fallback"   # failure keeps the previous stage's text


@dataclass
class StageOutcome:
    """Record of one stage execution."""
    name: str
    text: str
    duration: float
    fell_back: bool = False
    error: Optional[str] = None


@dataclass
class PipelineRun:
    """Output of a pipeline run."""
    raw_text: str  # Output of the first stage
    text: str      # Output of the last stage that succeeded
    outcomes: List[StageOutcome] = field(default_factory=list)
    short_circuited: bool = False

    @property
    def reformatted(self) -> bool:
        """True if any stage after the first changed the text."""
        return any(not o.fell_back for o in self.outcomes[1:])


class PipelineStage(ABC):
    """One named step of the pipeline."""

    name = "stage"
    policy = StagePolicy.REQUIRED

    def __init__(self, backend: AbstractGenerationBackend):
        self.backend = backend

    @abstractmethod
    async def run(self, payload: AudioPayload, text: str) -> str:
        """Produce this stage's text from the payload and the previous stage's text."""
        pass


class TranscribeStage(PipelineStage):
    """Verbatim transcription of the audio."""

    name = "transcribe"
    policy = StagePolicy.REQUIRED

    INSTRUCTION = (
        "Transcribe the following audio recording. Provide only the transcribed text, "
        "without any additional comments or introductions."
    )

    async def run(self, payload: AudioPayload, text: str) -> str:
        response = await self.backend.generate(self.INSTRUCTION, audio=payload)
        return response.strip()


class ReformatStage(PipelineStage):
    """Adds line breaks and paragraphs without changing the words."""

    name = "reformat"
    policy = StagePolicy.FALLBACK

    PROMPT_TEMPLATE = (
        "Please format the following text with appropriate line breaks and paragraphs "
        "to improve readability. Do not change the original words. Return only the "
        "formatted text.\n\nText to format:\n\"\"\"\n{text}\n\"\"\""
    )

    async def run(self, payload: AudioPayload, text: str) -> str:
        try:
            response = await self.backend.generate(self.PROMPT_TEMPLATE.format(text=text))
        except ServiceError as e:
            raise FormattingError(f"Reformatting failed: {e}") from e
        return response.strip()


class TranscriptionPipeline:
    """Runs stages in order, applying each stage's failure policy.

    The run stops early when a stage produces no text.
    """

    def __init__(self, stages: Sequence[PipelineStage], stage_timeout: Optional[float] = None):
        """Initialize pipeline.

        Args:
            stages: Stages in execution order; the first one produces the raw text
            stage_timeout: Seconds allowed per stage, None for no limit
        """
        if not stages:
            raise ValueError("Pipeline needs at least one stage")
        self.stages = list(stages)
        self.stage_timeout = stage_timeout

    @property
    def stage_names(self) -> List[str]:
        return [stage.name for stage in self.stages]

    async def run(self, payload: AudioPayload) -> PipelineRun:
        """Run every stage over the payload.

        Raises:
            ServiceError: If a REQUIRED stage fails
        """
        text = ""
        raw_text: Optional[str] = None
        outcomes: List[StageOutcome] = []

        for stage in self.stages:
            start_time = time.time()
            try:
                output = await self._run_stage(stage, payload, text)
            except Exception as e:
                duration = time.time() - start_time
                if stage.policy is StagePolicy.REQUIRED:
                    logger.error(f"Stage '{stage.name}' failed after {duration:.2f}s: {e}")
                    if isinstance(e, ServiceError):
                        raise
                    raise ServiceError(str(e) or type(e).__name__) from e
                logger.warning(f"Stage '{stage.name}' failed, keeping previous text: {e}")
                outcomes.append(StageOutcome(stage.name, text, duration, fell_back=True, error=str(e)))
                continue

            duration = time.time() - start_time
            if not output and stage.policy is StagePolicy.FALLBACK and text:
                logger.warning(f"Stage '{stage.name}' returned no text, keeping previous text")
                outcomes.append(StageOutcome(stage.name, text, duration, fell_back=True,
                                             error="empty response"))
                continue

            logger.debug(f"Stage '{stage.name}' done in {duration:.2f}s ({len(output)} chars)")
            outcomes.append(StageOutcome(stage.name, output, duration))
            text = output
            if raw_text is None:
                raw_text = output

            if not text:
                logger.info(f"Stage '{stage.name}' produced no text, skipping remaining stages")
                return PipelineRun(raw_text=raw_text, text="", outcomes=outcomes, short_circuited=True)

        return PipelineRun(raw_text=raw_text or "", text=text, outcomes=outcomes)

    async def _run_stage(self, stage: PipelineStage, payload: AudioPayload, text: str) -> str:
        if self.stage_timeout is None:
            return await stage.run(payload, text)
        try:
            return await asyncio.wait_for(stage.run(payload, text), timeout=self.stage_timeout)
        except asyncio.TimeoutError as e:
            raise ServiceError(f"{stage.name} stage timed out after {self.stage_timeout:g}s") from e
