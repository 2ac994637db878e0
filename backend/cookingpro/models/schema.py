"""
Pydantic schemas for the domain and API models.
Wire JSON uses camelCase aliases; Python code uses snake_case attributes.
"""
import time
from typing import Literal, Optional, List

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serializing to camelCase and accepting either spelling."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Ingredient(CamelModel):
    """Ingredient line of a recipe."""
    item: str
    amount: str = ""
    is_done: bool = False
    substitution: str = ""


class Step(CamelModel):
    """Recipe step. Position in the recipe implies sequence."""
    instruction: str
    tip: Optional[str] = None
    timer_seconds: Optional[int] = None
    is_completed: bool = False


class Recipe(CamelModel):
    """Recipe produced from model output."""
    id: str
    title: str
    description: str = ""
    calories: Optional[str] = None
    time: str = ""
    difficulty: Literal["Easy", "Medium", "Hard"] = "Medium"
    ingredients: List[Ingredient] = []
    steps: List[Step] = []
    tags: List[str] = []
    emoji: str = ""
    budget: Optional[Literal["Low", "Medium", "High"]] = None


class MealSlot(CamelModel):
    """A meal designation paired with its recipe."""
    meal: Literal["Breakfast", "Lunch", "Dinner"]
    recipe: Recipe


class ScheduleOverride(CamelModel):
    """Client-side annotation of a planned day. Never sent to the model."""
    is_skipped: bool = False
    custom_time: Optional[str] = None
    rescue_note: Optional[str] = None

    @field_validator("custom_time")
    @classmethod
    def _check_time(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        hours, sep, minutes = value.partition(":")
        if (
            sep != ":"
            or not (hours.isdigit() and minutes.isdigit())
            or len(minutes) != 2
            or not (0 <= int(hours) <= 23 and 0 <= int(minutes) <= 59)
        ):
            raise ValueError(f"custom_time must be HH:MM (24h), got {value!r}")
        return f"{int(hours):02d}:{minutes}"


class DayPlan(CamelModel):
    """One day of a meal plan."""
    day: int
    slots: List[MealSlot] = []
    schedule_override: Optional[ScheduleOverride] = None


class GroceryCategory(CamelModel):
    """Grocery list section."""
    category: str
    items: List[str] = []


class MealPlan(CamelModel):
    """Multi-day meal plan produced from model output."""
    id: str
    title: str
    personalisation_proof: str = ""
    days: List[DayPlan] = []
    total_budget_estimate: str
    grocery_list: List[GroceryCategory] = []
    cooking_sequence: List[str] = []
    is_fallback: bool = False

    def get_day(self, day: int) -> Optional[DayPlan]:
        for day_plan in self.days:
            if day_plan.day == day:
                return day_plan
        return None


class UserPreferences(CamelModel):
    """Preferences collected during onboarding. Read-only for the core."""
    diet: Optional[str] = None
    allergies: List[str] = []
    budget: Optional[str] = None
    city_type: Optional[str] = None
    kitchen_setup: List[str] = []
    cooking_time_per_meal: Optional[str] = None
    name: Optional[str] = None
    avatar: Optional[str] = None
    cooking_slot: Optional[str] = None
    shopping_frequency: Optional[Literal["Daily", "Every 2 Days", "Weekly"]] = None
    reminder_enabled: bool = False


class Message(CamelModel):
    """One conversation turn."""
    id: str
    role: Literal["user", "model"]
    text: str
    image: Optional[bytes] = Field(default=None, exclude=True)
    timestamp: float = Field(default_factory=time.time)
    recipe: Optional[Recipe] = None
    meal_plan: Optional[MealPlan] = None

    @computed_field
    @property
    def has_image(self) -> bool:
        return self.image is not None


class GenerationResult(CamelModel):
    """Per-turn output handed to the chat renderer."""
    text: str
    recipe: Optional[Recipe] = None
    meal_plan: Optional[MealPlan] = None


class ChatRequest(CamelModel):
    """Request schema for chat endpoint."""
    session_id: str
    message: str
    hidden_prompt: Optional[str] = None
    image_base64: Optional[str] = None
    image_mime_type: str = "image/jpeg"
    zen_mode: bool = False
    preferences: Optional[UserPreferences] = None


class ChatResponse(CamelModel):
    """Response schema for chat endpoint."""
    reply: str
    recipe: Optional[Recipe] = None
    meal_plan: Optional[MealPlan] = None


class SessionSummary(CamelModel):
    """Snapshot of a chat session for the UI."""
    session_id: str
    messages: List[Message]
    recipes: List[Recipe]
    current_meal_plan: Optional[MealPlan] = None
    is_loading: bool = False
