import pytest
from pydantic import ValidationError

from brewguide_backend.app.schemas import BrewMethod, NoTimer, StepKind, StepTemplate
from brewguide_backend.app.services.brew_session.errors import (
    InvalidInputsError, MethodMismatchError, NoStepsError,
)
from brewguide_backend.app.services.brew_session.plan_builder import build_plan


def test_plan_scales_water_and_keeps_everything_else(balanced_steps, make_inputs):
    plan = build_plan(balanced_steps, 250.0, make_inputs(dose_g=18.0, yield_g=300.0), recipe_method=BrewMethod.V60)

    assert len(plan.steps) == len(balanced_steps)
    assert [s.order_index for s in plan.steps] == [0, 1, 2, 3, 4, 5]
    assert [s.water_amount_g for s in plan.steps] == [None, None, pytest.approx(54), pytest.approx(180), pytest.approx(300), None]
    for src, out in zip(balanced_steps, plan.steps):
        assert out.step_id == src.step_id
        assert out.instruction_text == src.instruction_text
        assert out.step_kind is src.step_kind
        assert out.timer == src.timer
        assert out.is_cumulative_water_target == src.is_cumulative_water_target
    assert plan.total_water_g == pytest.approx(300)
    assert plan.inputs.dose_g == 18.0


def test_default_yield_keeps_water_unchanged(balanced_plan):
    assert [s.water_amount_g for s in balanced_plan.steps if s.water_amount_g is not None] == [45, 150, 250]


def test_empty_steps_raise_no_steps(make_inputs):
    with pytest.raises(NoStepsError):
        build_plan([], 250.0, make_inputs(), recipe_method=BrewMethod.V60)


def test_method_mismatch(balanced_steps, make_inputs):
    inputs = make_inputs().model_copy(update={"method": "chemex"})
    with pytest.raises(MethodMismatchError):
        build_plan(balanced_steps, 250.0, inputs, recipe_method=BrewMethod.V60)


def test_zero_recipe_yield_is_rejected(balanced_steps, make_inputs):
    with pytest.raises(InvalidInputsError):
        build_plan(balanced_steps, 0.0, make_inputs(), recipe_method=BrewMethod.V60)


def test_plan_is_immutable(balanced_plan):
    with pytest.raises(ValidationError):
        balanced_plan.steps = ()


def test_plan_inputs_are_locked(balanced_plan):
    with pytest.raises(ValidationError):
        balanced_plan.inputs.dose_g = 99.0
    with pytest.raises(ValidationError):
        balanced_plan.inputs.last_edited = "dose"
    assert balanced_plan.inputs.dose_g == 15.0


def test_incremental_steps_sum_for_total(make_inputs):
    steps = [
        StepTemplate(order_index=0, instruction_text="Pour 100g", step_kind=StepKind.POUR,
                     timer=NoTimer(), water_amount_g=100, is_cumulative_water_target=False),
        StepTemplate(order_index=1, instruction_text="Pour 150g", step_kind=StepKind.POUR,
                     timer=NoTimer(), water_amount_g=150, is_cumulative_water_target=False),
    ]
    plan = build_plan(steps, 250.0, make_inputs(), recipe_method=BrewMethod.V60)
    assert plan.total_water_g == pytest.approx(250)
