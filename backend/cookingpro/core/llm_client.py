"""
LLM client for the Gemini generateContent API.
Handles both text-only and image-bearing turns; the request decides the model.
"""
from typing import Any

from cookingpro.core.base_client import BaseAIClient
from cookingpro.core.exceptions import ConfigurationError, ModelRequestError
from cookingpro.core.logging import get_logger
from cookingpro.models.request import ModelRequest

logger = get_logger("core.llm_client")


class GeminiClient(BaseAIClient):
    """Client for interacting with Gemini models."""

    def _api_key(self) -> str:
        if not self.settings.gemini_api_key:
            raise ConfigurationError("API Key not found: set GEMINI_API_KEY")
        return self.settings.gemini_api_key

    async def generate(self, request: ModelRequest) -> str:
        """
        Send one generateContent call.

        Args:
            request: Fully built model request

        Returns:
            Concatenated text of the first candidate, or "" when the model
            returned no text (e.g. a blocked prompt)

        Raises:
            ConfigurationError: If no API key is configured
            TransientModelError: On retryable network or provider failures
            ModelRequestError: On non-retryable provider failures
        """
        api_key = self._api_key()
        url = f"{self.settings.gemini_base_url.rstrip('/')}/models/{request.model}:generateContent"

        response_json = await self._make_request(
            url,
            request.to_payload(),
            headers={"x-goog-api-key": api_key},
            log_prefix="Gemini Client",
        )
        return extract_response_text(response_json)


def extract_response_text(response_json: Any) -> str:
    """
    Join the text parts of the first candidate.

    Raises:
        ModelRequestError: If the body does not have the generateContent shape
    """
    if not isinstance(response_json, dict):
        raise ModelRequestError("Gemini returned a malformed response body")

    candidates = response_json.get("candidates") or []
    if not candidates:
        feedback = response_json.get("promptFeedback")
        if feedback:
            logger.warning(f"Gemini returned no candidates: {feedback}")
        return ""

    candidate = candidates[0] if isinstance(candidates, list) else None
    if not isinstance(candidate, dict):
        raise ModelRequestError("Gemini returned a malformed candidate")

    content = candidate.get("content") or {}
    parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(parts, list):
        return ""
    return "".join(
        part["text"] for part in parts if isinstance(part, dict) and isinstance(part.get("text"), str)
    )
