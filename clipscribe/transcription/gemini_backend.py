"""Gemini generateContent backend over the REST API."""

import asyncio
import base64
import logging
from typing import Any, Dict, List, Optional

import aiohttp

from .base import AbstractGenerationBackend
from ..errors import ServiceError
from ..models.audio import AudioPayload

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash"
DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com"


class GeminiBackend(AbstractGenerationBackend):
    """Sends prompts and inline audio to Gemini and returns the response text."""

    service_name = "Gemini"

    def __init__(self,
                 api_key: str,
                 model: str = DEFAULT_MODEL,
                 base_url: str = DEFAULT_BASE_URL,
                 timeout_seconds: float = 120.0):
        """Initialize Gemini backend.

        Args:
            api_key: Gemini API key
            model: Model identifier used for every request
            base_url: API root, overridable for proxies
            timeout_seconds: Total time allowed for one request
        """
        super().__init__(model)
        if not api_key:
            raise ValueError("Gemini API key is required")
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds

        logger.info(f"GeminiBackend initialized with model: {model}")

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/v1beta/models/{self.model}:generateContent"

    async def generate(self, prompt: str, audio: Optional[AudioPayload] = None) -> str:
        """Send a prompt (and optional audio) to Gemini and get the response text.

        Raises:
            ServiceError: On HTTP errors, transport errors, timeouts or a
                response without candidates
        """
        headers = {
            "x-goog-api-key": self.api_key,
            "Content-Type": "application/json"
        }
        data = {"contents": [{"parts": self._build_parts(prompt, audio)}]}
        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)

        logger.debug(f"Gemini request: model={self.model}, "
                     f"audio={audio.size_bytes if audio else 0} bytes, prompt={len(prompt)} chars")
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(self.endpoint, headers=headers, json=data) as response:
                    if response.status != 200:
                        error_text = await response.text()
                        raise ServiceError(f"Gemini API error: {response.status} - {error_text}")
                    result = await response.json()
        except asyncio.TimeoutError as e:
            raise ServiceError(f"Gemini request timed out after {self.timeout_seconds:g}s") from e
        except aiohttp.ClientError as e:
            raise ServiceError(f"Gemini request failed: {e}") from e

        return self._extract_text(result)

    @staticmethod
    def _build_parts(prompt: str, audio: Optional[AudioPayload]) -> List[Dict[str, Any]]:
        parts: List[Dict[str, Any]] = []
        if audio is not None:
            parts.append({
                "inline_data": {
                    "mime_type": audio.mime_type,
                    "data": base64.b64encode(audio.data).decode("ascii"),
                }
            })
        parts.append({"text": prompt})
        return parts

    @staticmethod
    def _extract_text(result: Dict[str, Any]) -> str:
        candidates = result.get("candidates") or []
        if not candidates:
            reason = (result.get("promptFeedback") or {}).get("blockReason", "no candidates returned")
            raise ServiceError(f"Gemini returned no transcription ({reason})")

        parts = (candidates[0].get("content") or {}).get("parts") or []
        # Skip thought summaries, keep answer text only
        return "".join(part.get("text", "") for part in parts if not part.get("thought"))
