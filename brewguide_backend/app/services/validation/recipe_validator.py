# brewguide_backend/app/services/validation/recipe_validator.py
from __future__ import annotations

from typing import List, Optional, Sequence, Union

from brewguide_backend.app.schemas import (
    RecipeDefaults, RecipeIssue, RecipeUpdateRequest, StepTemplate, StepTemplateIn, timer_duration_s,
)

# A recipe's largest water target may be off the default yield by this much.
WATER_TOTAL_TOLERANCE_G = 1.0

_Step = Union[StepTemplate, StepTemplateIn]


def _issue(code: str, message: str, step_index: Optional[int] = None) -> RecipeIssue:
    return RecipeIssue(code=code, message=message, step_index=step_index)


def _check(name: str, dose_g: float, yield_g: float, steps: Sequence[_Step], *, by_position: bool) -> List[RecipeIssue]:
    issues: List[RecipeIssue] = []

    if not (name or "").strip():
        issues.append(_issue("empty_name", "Recipe name cannot be empty"))
    if dose_g <= 0:
        issues.append(_issue("invalid_dose", "Dose must be greater than 0"))
    if yield_g <= 0:
        issues.append(_issue("invalid_yield", "Yield must be greater than 0"))

    if not steps:
        issues.append(_issue("no_steps", "Recipe must have at least one step"))
        return issues

    for pos, step in enumerate(steps):
        idx = pos if by_position else step.order_index
        duration = timer_duration_s(step.timer)
        if duration is not None and duration < 0:
            issues.append(_issue("negative_timer", f"Step {idx + 1} has a negative timer duration", idx))
        if step.water_amount_g is not None and step.water_amount_g < 0:
            issues.append(_issue("negative_water_amount", f"Step {idx + 1} has a negative water amount", idx))

    water = [s.water_amount_g for s in steps if s.water_amount_g is not None]
    if water:
        total = max(water)
        if abs(total - yield_g) > WATER_TOTAL_TOLERANCE_G:
            issues.append(_issue(
                "water_total_mismatch",
                f"Water total ({int(total)}g) doesn't match yield ({int(yield_g)}g)",
            ))
    return issues


def validate_recipe(recipe: RecipeDefaults) -> List[RecipeIssue]:
    """Issues that make a stored recipe unusable for brewing (empty list = brewable)."""
    return _check(
        recipe.name, recipe.default_dose_g, recipe.default_yield_g, recipe.steps, by_position=False,
    )


def validate_update(request: RecipeUpdateRequest) -> List[RecipeIssue]:
    # Step indexes refer to the submitted list order, not order_index.
    return _check(
        request.name, request.default_dose_g, request.default_yield_g, request.steps, by_position=True,
    )


__all__ = ["validate_recipe", "validate_update", "WATER_TOTAL_TOLERANCE_G"]
