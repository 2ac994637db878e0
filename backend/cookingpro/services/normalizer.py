"""
Normalization of structured model payloads into domain objects.

The model is never trusted: every output is fully defaulted, completion
flags are reset, and nothing in here raises. A malformed payload becomes a
minimally valid object instead of a failed turn.
"""
import uuid
from typing import Any, List, Optional, Tuple

from cookingpro.core.constants import MealConstants
from cookingpro.core.logging import get_logger
from cookingpro.models.payload import (
    DayPayload,
    MealPlanPayload,
    RecipePayload,
    parse_payload,
)
from cookingpro.models.schema import (
    DayPlan,
    GroceryCategory,
    Ingredient,
    MealPlan,
    MealSlot,
    Recipe,
    Step,
)

logger = get_logger("services.normalizer")

_TRUE_STRINGS = {"true", "yes", "1"}


def new_id() -> str:
    """Generate a fresh identity for objects the model left without one."""
    return uuid.uuid4().hex


def normalize_recipe(payload: Optional[RecipePayload]) -> Recipe:
    """Map a partial recipe to a fully defaulted Recipe."""
    payload = payload or RecipePayload()

    ingredients = [
        Ingredient(
            item=ingredient.item or "",
            amount=ingredient.amount or "",
            is_done=False,
            substitution=ingredient.substitution or "",
        )
        for ingredient in payload.ingredients or []
        if ingredient.item
    ]
    steps = [
        Step(
            instruction=step.instruction,
            tip=step.tip or None,
            timer_seconds=step.timer_seconds if step.timer_seconds and step.timer_seconds > 0 else None,
            is_completed=False,
        )
        for step in payload.steps or []
        if step.instruction
    ]

    budget = None
    if payload.budget:
        budget = next(
            (tier for tier in MealConstants.BUDGET_TIERS if tier.lower() == payload.budget.strip().lower()),
            None,
        )

    return Recipe(
        id=payload.id or new_id(),
        title=payload.title or MealConstants.DEFAULT_RECIPE_TITLE,
        description=payload.description or "",
        calories=payload.calories or None,
        time=payload.time or "",
        difficulty=MealConstants.match_difficulty(payload.difficulty),
        ingredients=ingredients,
        steps=steps,
        tags=_unique(payload.tags or []),
        emoji=payload.emoji or MealConstants.DEFAULT_RECIPE_EMOJI,
        budget=budget,
    )


def normalize_meal_plan(payload: Optional[MealPlanPayload]) -> MealPlan:
    """Map a partial meal plan to a fully defaulted MealPlan."""
    payload = payload or MealPlanPayload()

    days = [
        _normalize_day(day, position)
        for position, day in enumerate(payload.days or [], start=1)
    ]
    grocery_list = [
        GroceryCategory(category=section.category or "Other", items=section.items or [])
        for section in payload.grocery_list or []
    ]

    return MealPlan(
        id=payload.id or new_id(),
        title=payload.title or MealConstants.DEFAULT_PLAN_TITLE,
        personalisation_proof=payload.personalisation_proof or "",
        days=days,
        total_budget_estimate=payload.total_budget_estimate or MealConstants.DEFAULT_BUDGET_ESTIMATE,
        grocery_list=grocery_list,
        cooking_sequence=payload.cooking_sequence or [],
        is_fallback=_strict_bool(payload.is_fallback),
    )


def _normalize_day(payload: DayPayload, position: int) -> DayPlan:
    slots = [
        MealSlot(meal=MealConstants.match_meal(slot.meal), recipe=normalize_recipe(slot.recipe))
        for slot in payload.slots or []
    ]
    # Schedule overrides are client-side only; anything the model sent is dropped
    return DayPlan(day=payload.day if payload.day is not None else position, slots=slots)


def normalize_payload(data: Any) -> Tuple[Optional[Recipe], Optional[MealPlan]]:
    """
    Classify an extracted JSON object and normalize it.

    Returns:
        (recipe, meal_plan); at most one is set, both are None when the
        object is not a recognized structured payload.
    """
    payload = parse_payload(data)
    if isinstance(payload, MealPlanPayload):
        return None, normalize_meal_plan(payload)
    if isinstance(payload, RecipePayload):
        return normalize_recipe(payload), None
    if data is not None:
        logger.debug("Extracted JSON is not a recipe or meal plan, ignoring")
    return None, None


def _strict_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return bool(value)


def _unique(values: List[str]) -> List[str]:
    seen = set()
    unique = []
    for value in values:
        cleaned = value.strip()
        if cleaned and cleaned not in seen:
            seen.add(cleaned)
            unique.append(cleaned)
    return unique
