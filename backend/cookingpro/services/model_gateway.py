"""
Model gateway: the single entry point for a chef turn.

Cache lookup, prompt assembly, the retried model call, JSON extraction and
normalization are composed here. Network and configuration failures
propagate to the caller; parse and normalization problems never do.
"""
from typing import List, Optional, Protocol, Union

from cookingpro.core.config import Settings, get_settings
from cookingpro.core.constants import PromptConstants
from cookingpro.core.llm_client import GeminiClient
from cookingpro.core.logging import get_logger
from cookingpro.core.retry import RetryPolicy
from cookingpro.models.request import ModelRequest
from cookingpro.models.schema import GenerationResult, Message, UserPreferences
from cookingpro.services.normalizer import normalize_payload
from cookingpro.services.prompt_builder import PromptBuilder
from cookingpro.services.response_cache import ResponseCache
from cookingpro.utils.json_parser import extract_json_from_llm_response, strip_json_blocks

logger = get_logger("services.model_gateway")


class ModelClient(Protocol):
    async def generate(self, request: ModelRequest) -> str:
        ...


class ModelGateway:
    """Explicitly constructed gateway owning its cache and retry policy."""

    def __init__(
        self,
        client: Optional[ModelClient] = None,
        prompt_builder: Optional[PromptBuilder] = None,
        cache: Optional[ResponseCache] = None,
        retry_policy: Optional[RetryPolicy] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.client = client or GeminiClient(settings=self.settings)
        self.prompt_builder = prompt_builder or PromptBuilder(settings=self.settings)
        self.cache = cache or ResponseCache(default_ttl=self.settings.cache_ttl_seconds)
        self.retry_policy = retry_policy or RetryPolicy.from_settings(self.settings)

    async def generate(
        self,
        history: List[Message],
        prompt_text: str,
        preferences: Optional[UserPreferences] = None,
        image: Optional[Union[bytes, str]] = None,
        zen_mode: bool = False,
        image_mime_type: str = "image/jpeg",
    ) -> GenerationResult:
        """
        Produce the assistant's reply for one turn.

        Args:
            history: Conversation so far, excluding the new turn
            prompt_text: The new user text (or a hidden prompt)
            preferences: Onboarding preferences, if any
            image: Optional attached image (raw bytes or base64)
            zen_mode: Request the calm persona variant
            image_mime_type: MIME type of the attached image

        Returns:
            GenerationResult with prose and at most one structured payload

        Raises:
            ConfigurationError: If no model credential is configured
            ModelCallError: When the model call fails after all retries
        """
        cache_key = None
        if image is None:
            cache_key = self.cache_key(history, prompt_text, preferences, zen_mode)
            cached = self.cache.get(cache_key)
            if cached is not None:
                logger.debug(f"Returning cached response for: {prompt_text[:80]}")
                return cached

        request = self.prompt_builder.build_request(
            history,
            prompt_text,
            preferences,
            image=image,
            image_mime_type=image_mime_type,
            zen_mode=zen_mode,
        )
        raw_text = await self.retry_policy.run(
            lambda: self.client.generate(request),
            description=f"{request.model} generateContent",
        )

        result = build_result(raw_text)

        if cache_key is not None:
            self.cache.set(cache_key, result)
        return result

    @staticmethod
    def cache_key(
        history: List[Message],
        prompt_text: str,
        preferences: Optional[UserPreferences],
        zen_mode: bool,
    ) -> str:
        """Key over the prompt and every context field that shapes the reply."""
        context = {
            "historyLastId": history[-1].id if history else None,
            "zen": zen_mode,
            "prefs": preferences.model_dump(mode="json") if preferences is not None else None,
        }
        return ResponseCache.key(prompt_text, context)

    def reset(self) -> None:
        """Drop every cached response (logout)."""
        self.cache.clear()


def build_result(raw_text: str) -> GenerationResult:
    """
    Split a raw model response into user-facing prose and a structured payload.

    The JSON block is removed from the prose. Empty prose next to a payload
    becomes a short acknowledgement; with neither, the raw text is shown.
    """
    raw_text = raw_text or PromptConstants.EMPTY_RESPONSE_TEXT

    parsed = extract_json_from_llm_response(raw_text)
    recipe, meal_plan = normalize_payload(parsed)

    text = strip_json_blocks(raw_text)
    if not text:
        has_payload = recipe is not None or meal_plan is not None
        text = PromptConstants.PAYLOAD_ACKNOWLEDGEMENT if has_payload else raw_text

    return GenerationResult(text=text, recipe=recipe, meal_plan=meal_plan)
