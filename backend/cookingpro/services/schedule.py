"""
Client-side schedule adjustments on top of a generated meal plan.
Every function returns a modified deep copy; the input plan is never touched.
"""
from typing import List, Optional

from cookingpro.core.constants import PromptConstants
from cookingpro.models.schema import DayPlan, MealPlan, ScheduleOverride


def apply_schedule_override(plan: MealPlan, day: int, override: ScheduleOverride) -> MealPlan:
    """
    Set the override of one day on a copy of the plan.

    Raises:
        KeyError: If the plan has no such day
    """
    updated = plan.model_copy(deep=True)
    day_plan = updated.get_day(day)
    if day_plan is None:
        raise KeyError(f"Plan {plan.id} has no day {day}")
    day_plan.schedule_override = override.model_copy()
    return updated


def skip_day(plan: MealPlan, day: int, rescue_note: Optional[str] = None) -> MealPlan:
    """Mark a day as skipped, attaching an ingredient rescue note."""
    day_plan = plan.get_day(day)
    if day_plan is None:
        raise KeyError(f"Plan {plan.id} has no day {day}")

    current = day_plan.schedule_override or ScheduleOverride()
    override = current.model_copy(
        update={"is_skipped": True, "rescue_note": rescue_note or default_rescue_note(day_plan)}
    )
    return apply_schedule_override(plan, day, override)


def reschedule_day(plan: MealPlan, day: int, custom_time: str) -> MealPlan:
    """
    Move a day's cooking to a custom "HH:MM" time.

    Raises:
        ValueError: If custom_time is not a valid 24h time
        KeyError: If the plan has no such day
    """
    day_plan = plan.get_day(day)
    if day_plan is None:
        raise KeyError(f"Plan {plan.id} has no day {day}")

    current = day_plan.schedule_override or ScheduleOverride()
    # Validate through the model, model_copy(update=...) skips validation
    override = ScheduleOverride(
        is_skipped=current.is_skipped,
        custom_time=custom_time,
        rescue_note=current.rescue_note,
    )
    return apply_schedule_override(plan, day, override)


def set_day_schedule(plan: MealPlan, day: int, override: ScheduleOverride) -> MealPlan:
    """
    Replace a day's override with one sent by the client.

    A skipped day without a note gets the ingredient rescue note, and a
    custom time goes through reschedule_day().

    Raises:
        KeyError: If the plan has no such day
    """
    updated = apply_schedule_override(plan, day, ScheduleOverride(rescue_note=override.rescue_note))
    if override.is_skipped:
        updated = skip_day(updated, day, rescue_note=override.rescue_note)
    if override.custom_time:
        updated = reschedule_day(updated, day, override.custom_time)
    return updated


def default_rescue_note(day_plan: DayPlan) -> str:
    """Suggest using up the skipped day's ingredients before they spoil."""
    ingredients: List[str] = []
    for slot in day_plan.slots:
        for ingredient in slot.recipe.ingredients:
            if ingredient.item not in ingredients:
                ingredients.append(ingredient.item)

    if not ingredients:
        return PromptConstants.DEFAULT_RESCUE_NOTE
    return (
        f"Use up {', '.join(ingredients[:5])} within the next day or two. "
        f"{PromptConstants.DEFAULT_RESCUE_NOTE}"
    )
