"""
Partial models for structured payloads parsed out of model responses.

Every field is optional. A field holding the wrong type is dropped to None,
and a list keeps only the entries that validate, so validating untrusted
model output never fails. The normalizer turns these into domain models.
"""
from typing import Any, List, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel


class LenientModel(BaseModel):
    """Base for partial payloads: unknown keys ignored, bad values discarded."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        coerce_numbers_to_str=True,
    )

    @field_validator("*", mode="wrap")
    @classmethod
    def _discard_invalid(cls, value: Any, handler):
        try:
            return handler(value)
        except ValidationError:
            if not isinstance(value, list):
                return None
        kept = []
        for entry in value:
            try:
                kept.extend(handler([entry]))
            except ValidationError:
                continue
        return kept


class IngredientPayload(LenientModel):
    item: Optional[str] = Field(default=None, validation_alias=AliasChoices("item", "name"))
    amount: Optional[str] = Field(default=None, validation_alias=AliasChoices("amount", "quantity"))
    substitution: Optional[str] = None


class StepPayload(LenientModel):
    instruction: Optional[str] = None
    tip: Optional[str] = None
    timer_seconds: Optional[int] = None


class RecipePayload(LenientModel):
    kind: Literal["recipe"] = "recipe"
    id: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    emoji: Optional[str] = None
    time: Optional[str] = None
    calories: Optional[str] = None
    difficulty: Optional[str] = None
    budget: Optional[str] = None
    tags: Optional[List[str]] = None
    ingredients: Optional[List[IngredientPayload]] = None
    steps: Optional[List[StepPayload]] = None


class SlotPayload(LenientModel):
    meal: Optional[str] = None
    recipe: Optional[RecipePayload] = None


class DayPayload(LenientModel):
    day: Optional[int] = None
    slots: Optional[List[SlotPayload]] = None


class GroceryCategoryPayload(LenientModel):
    category: Optional[str] = None
    items: Optional[List[str]] = None


class MealPlanPayload(LenientModel):
    kind: Literal["meal_plan"] = "meal_plan"
    id: Optional[str] = None
    title: Optional[str] = None
    personalisation_proof: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("personalisationProof", "personalizationProof", "personalisation_proof"),
    )
    total_budget_estimate: Optional[str] = None
    is_fallback: Any = None
    grocery_list: Optional[List[GroceryCategoryPayload]] = None
    cooking_sequence: Optional[List[str]] = None
    days: Optional[List[DayPayload]] = None


class UnrecognizedPayload(BaseModel):
    kind: Literal["unrecognized"] = "unrecognized"


StructuredPayload = Union[RecipePayload, MealPlanPayload, UnrecognizedPayload]


def parse_payload(data: Any) -> StructuredPayload:
    """
    Classify an extracted JSON object and validate it leniently.

    A list-valued ``days`` or ``type == "meal_plan"`` marks a meal plan;
    otherwise a list-valued ``steps`` or ``type == "recipe"`` marks a recipe.
    Anything else, including non-objects, is unrecognized.
    """
    if not isinstance(data, dict):
        return UnrecognizedPayload()

    payload_type = data.get("type")
    if isinstance(data.get("days"), list) or payload_type == "meal_plan":
        return MealPlanPayload.model_validate(_without_kind(data))
    if isinstance(data.get("steps"), list) or payload_type == "recipe":
        return RecipePayload.model_validate(_without_kind(data))
    return UnrecognizedPayload()


def _without_kind(data: dict) -> dict:
    # "kind" is the union tag and is never read from the network
    return {key: value for key, value in data.items() if key != "kind"}
