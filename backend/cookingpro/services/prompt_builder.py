"""
Prompt assembly for chef conversations.
Builds the system instruction, the per-turn context header and the turn list.
"""
import base64
from typing import List, Optional, Union

from cookingpro.core.config import Settings, get_settings
from cookingpro.core.constants import PromptConstants
from cookingpro.core.exceptions import PromptRenderError
from cookingpro.core.logging import get_logger
from cookingpro.models.request import InlineData, ModelRequest, Part, Turn
from cookingpro.models.schema import Message, UserPreferences
from cookingpro.utils.prompt_loader import PromptLoader, get_prompt_loader

logger = get_logger("services.prompt_builder")

SYSTEM_PROMPT_KEY = "chef_system_instruction"
CONTEXT_HEADER_KEY = "user_context_header"


class PromptBuilder:
    """Assembles a ModelRequest from history, preferences and the new turn."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        prompt_loader: Optional[PromptLoader] = None,
    ):
        self.settings = settings or get_settings()
        self.prompt_loader = prompt_loader or get_prompt_loader()

    def build_system_instruction(self, preferences: Optional[UserPreferences]) -> str:
        """
        Render the chef persona with the user's preferences.

        Unset preferences fall back to PromptConstants.PLACEHOLDER_DEFAULTS.

        Raises:
            PromptRenderError: If the template has a {{PLACEHOLDER}} with no value
        """
        template = self.prompt_loader.get_text(SYSTEM_PROMPT_KEY, field="system")
        values = self._placeholder_values(preferences)

        # Checked on the template; user values may contain braces themselves
        unresolved = set(self.prompt_loader.find_unresolved(template)) - set(values)
        if unresolved:
            raise PromptRenderError(f"Unresolved placeholders in system instruction: {sorted(unresolved)}")
        return self.prompt_loader.render_placeholders(template, values)

    def build_context_header(self, preferences: Optional[UserPreferences], zen_mode: bool = False) -> str:
        """Short summary of the active preferences, prepended to the user turn."""
        header = PromptConstants.ZEN_MODE_PREFIX if zen_mode else ""
        if preferences is None:
            return header

        values = self._placeholder_values(preferences)
        context = self.prompt_loader.get_prompt_template(CONTEXT_HEADER_KEY).format(
            diet=values["DIET"],
            allergies=values["ALLERGIES"],
            city=values["CITY"],
            kitchen=values["KITCHEN"],
        )
        return f"{header}\n{context}"

    def build_contents(
        self,
        history: List[Message],
        text: str,
        preferences: Optional[UserPreferences] = None,
        image: Optional[Union[bytes, str]] = None,
        image_mime_type: str = "image/jpeg",
        zen_mode: bool = False,
    ) -> List[Turn]:
        """
        Turn list for the model: prior history (minus the welcome greeting)
        followed by the new user turn. An attached image travels as its own
        inline-data part ahead of the text.
        """
        contents = [
            Turn(role=message.role, parts=[Part(text=message.text)])
            for message in history
            if message.id != PromptConstants.WELCOME_MESSAGE_ID
        ]

        parts = []
        if image is not None:
            parts.append(Part(inline_data=InlineData(mime_type=image_mime_type, data=encode_image(image))))
        parts.append(Part(text=self.build_context_header(preferences, zen_mode) + text))
        contents.append(Turn(role="user", parts=parts))
        return contents

    def build_request(
        self,
        history: List[Message],
        text: str,
        preferences: Optional[UserPreferences] = None,
        image: Optional[Union[bytes, str]] = None,
        image_mime_type: str = "image/jpeg",
        zen_mode: bool = False,
    ) -> ModelRequest:
        """Compose the full outbound request for one turn."""
        model = self.settings.gemini_image_model if image is not None else self.settings.gemini_text_model
        request = ModelRequest(
            model=model,
            system_instruction=self.build_system_instruction(preferences),
            contents=self.build_contents(history, text, preferences, image, image_mime_type, zen_mode),
            temperature=self.settings.llm_temperature,
        )
        logger.debug(f"Built request for {model} with {len(request.contents)} turns")
        return request

    @staticmethod
    def _placeholder_values(preferences: Optional[UserPreferences]) -> dict:
        values = dict(PromptConstants.PLACEHOLDER_DEFAULTS)
        if preferences is None:
            return values

        provided = {
            "DIET": preferences.diet,
            "ALLERGIES": ", ".join(preferences.allergies),
            "BUDGET": preferences.budget,
            "CITY": preferences.city_type,
            "KITCHEN": ", ".join(preferences.kitchen_setup),
            "TIME": preferences.cooking_time_per_meal,
        }
        values.update({name: value for name, value in provided.items() if value})
        return values


def encode_image(image: Union[bytes, str]) -> str:
    """
    Base64 payload for an inline image part.

    Raw bytes are encoded; strings are taken as base64 already, with any
    data-URL prefix ("data:image/png;base64,") stripped.
    """
    if isinstance(image, bytes):
        return base64.b64encode(image).decode("utf-8")
    _, sep, data = image.partition(",")
    return data if sep else image
