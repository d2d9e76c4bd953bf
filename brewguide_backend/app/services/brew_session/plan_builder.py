# brewguide_backend/app/services/brew_session/plan_builder.py
from __future__ import annotations

from typing import Sequence

from brewguide_backend.app.schemas import BrewInputs, BrewMethod, BrewPlan, ScaledStep, StepTemplate
from .errors import InvalidInputsError, MethodMismatchError, NoStepsError

__all__ = ["build_plan", "scale_step"]


# What it does:
# Combine the recipe's ordered step templates with the confirmed inputs into
# an immutable BrewPlan. Water amounts scale by target yield / recipe yield;
# every other field passes through. Same count, same order, nothing dropped.
def scale_step(step: StepTemplate, factor: float) -> ScaledStep:
    water = step.water_amount_g * factor if step.water_amount_g is not None else None
    return ScaledStep(
        step_id=step.step_id,
        order_index=step.order_index,
        instruction_text=step.instruction_text,
        step_kind=step.step_kind,
        timer=step.timer,
        water_amount_g=water,
        is_cumulative_water_target=step.is_cumulative_water_target,
    )


def build_plan(
    steps: Sequence[StepTemplate],
    default_yield_g: float,
    inputs: BrewInputs,
    *,
    recipe_method: BrewMethod,
) -> BrewPlan:
    """
    Raises:
        NoStepsError: the recipe has no steps (a zero-step plan is never built).
        MethodMismatchError: the recipe method differs from inputs.method.
        InvalidInputsError: the recipe yield is not positive.
    """
    if not steps:
        raise NoStepsError()
    # str enum: compares equal to its raw value
    if recipe_method != inputs.method:
        raise MethodMismatchError()
    if default_yield_g <= 0:
        raise InvalidInputsError("Recipe default yield must be greater than 0")

    factor = inputs.yield_g / default_yield_g
    return BrewPlan(
        inputs=inputs.model_copy(),
        steps=tuple(scale_step(s, factor) for s in steps),
    )
