"""Transcription module for ClipScribe."""

from .base import AbstractGenerationBackend
from .gemini_backend import GeminiBackend
from .pipeline import (
    PipelineStage,
    StagePolicy,
    TranscribeStage,
    ReformatStage,
    TranscriptionPipeline,
)
from .client import TranscriptionClient

__all__ = [
    "AbstractGenerationBackend",
    "GeminiBackend",
    "PipelineStage",
    "StagePolicy",
    "TranscribeStage",
    "ReformatStage",
    "TranscriptionPipeline",
    "TranscriptionClient",
]
