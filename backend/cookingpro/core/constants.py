"""
Application-wide constants.
Centralizes all hardcoded values to prevent duplication and improve maintainability.
"""
from typing import Dict, List


class MealConstants:
    """Constants related to recipes and meal plans."""

    MEAL_TYPES: List[str] = ["Breakfast", "Lunch", "Dinner"]
    DIFFICULTIES: List[str] = ["Easy", "Medium", "Hard"]
    BUDGET_TIERS: List[str] = ["Low", "Medium", "High"]

    DEFAULT_MEAL: str = "Dinner"
    DEFAULT_DIFFICULTY: str = "Medium"
    DEFAULT_RECIPE_TITLE: str = "Chef's Special"
    DEFAULT_RECIPE_EMOJI: str = "🍽️"
    DEFAULT_PLAN_TITLE: str = "Meal Plan"
    DEFAULT_BUDGET_ESTIMATE: str = "Calculated at market rates"

    @classmethod
    def match_meal(cls, value: str) -> str:
        """Case-insensitive match against known meal designations."""
        return _match(value, cls.MEAL_TYPES) or cls.DEFAULT_MEAL

    @classmethod
    def match_difficulty(cls, value: str) -> str:
        """Case-insensitive match against known difficulty levels."""
        return _match(value, cls.DIFFICULTIES) or cls.DEFAULT_DIFFICULTY


class PromptConstants:
    """Placeholder fallbacks and canned texts used around model calls."""

    # Substituted when a preference is unset so no placeholder survives rendering
    PLACEHOLDER_DEFAULTS: Dict[str, str] = {
        "DIET": "Balanced",
        "ALLERGIES": "None",
        "BUDGET": "Flexible",
        "CITY": "Metro",
        "KITCHEN": "Standard",
        "TIME": "45 mins",
    }

    ZEN_MODE_PREFIX: str = "[MODE: ZEN CHEF - CALM, SOOTHING, MINIMAL]. "

    WELCOME_MESSAGE_ID: str = "welcome"
    WELCOME_MESSAGE: str = (
        "\n# 👋 Welcome to your Kitchen Studio\n\n"
        "I'm ready to help you cook. You can:\n"
        "1. **Plan** a meal schedule using your own ingredients.\n"
        "2. **Chat** for quick ideas.\n"
        "3. **Cook** with step-by-step guidance.\n\n"
        "*What ingredients do you have today?*\n"
    )

    EMPTY_RESPONSE_TEXT: str = "I'm having trouble connecting to the kitchen."
    PAYLOAD_ACKNOWLEDGEMENT: str = "Here is the result you asked for:"
    TURN_FAILURE_MESSAGE: str = (
        "I'm having a bit of trouble connecting to the cloud kitchen right now. "
        "Please try again."
    )
    DEFAULT_RESCUE_NOTE: str = "Check perishable items like dairy and greens."


def _match(value: str, options: List[str]) -> str:
    if not isinstance(value, str):
        return ""
    wanted = value.strip().lower()
    for option in options:
        if option.lower() == wanted:
            return option
    return ""


__all__ = [
    'MealConstants',
    'PromptConstants'
]
