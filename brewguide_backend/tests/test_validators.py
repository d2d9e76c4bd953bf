from brewguide_backend.app.schemas import (
    CountdownTimer, RecipeDefaults, RecipeUpdateRequest, StepKind, StepTemplate, StepTemplateIn,
)
from brewguide_backend.app.services.validation import NOTE_MAX_CHARS, validate_brew_log, validate_recipe, validate_update


def _codes(issues):
    return [i.code for i in issues]


def test_starter_shaped_recipe_is_valid(balanced_steps):
    recipe = RecipeDefaults(name="V60 Balanced", steps=tuple(balanced_steps))
    assert validate_recipe(recipe) == []


def test_recipe_collects_every_issue():
    recipe = RecipeDefaults(name="  ", default_dose_g=0, default_yield_g=-1)
    assert _codes(validate_recipe(recipe)) == ["empty_name", "invalid_dose", "invalid_yield", "no_steps"]


def test_negative_step_values_point_at_the_step():
    recipe = RecipeDefaults(
        name="Broken",
        steps=(
            StepTemplate(order_index=0, instruction_text="Bloom", step_kind=StepKind.BLOOM,
                         timer=CountdownTimer(seconds=-5), water_amount_g=45),
            StepTemplate(order_index=1, instruction_text="Pour", step_kind=StepKind.POUR, water_amount_g=-10),
            StepTemplate(order_index=2, instruction_text="Finish", step_kind=StepKind.POUR, water_amount_g=250),
        ),
    )
    issues = validate_recipe(recipe)
    assert [(i.code, i.step_index) for i in issues] == [
        ("negative_timer", 0), ("negative_water_amount", 1),
    ]
    assert issues[0].message == "Step 1 has a negative timer duration"


def test_water_total_must_match_yield_within_a_gram(balanced_steps):
    off_by_one = [s if s.water_amount_g != 250 else s.model_copy(update={"water_amount_g": 249}) for s in balanced_steps]
    assert validate_recipe(RecipeDefaults(name="ok", steps=tuple(off_by_one))) == []

    short = [s if s.water_amount_g != 250 else s.model_copy(update={"water_amount_g": 240}) for s in balanced_steps]
    issues = validate_recipe(RecipeDefaults(name="short", steps=tuple(short)))
    assert _codes(issues) == ["water_total_mismatch"]
    assert issues[0].message == "Water total (240g) doesn't match yield (250g)"


def test_update_indexes_follow_submitted_order():
    req = RecipeUpdateRequest(
        name="Mine", default_dose_g=15, default_yield_g=250,
        steps=[
            StepTemplateIn(order_index=7, instruction_text="A", water_amount_g=250),
            StepTemplateIn(order_index=3, instruction_text="B", water_amount_g=-1),
        ],
    )
    issues = validate_update(req)
    assert [(i.code, i.step_index) for i in issues] == [("negative_water_amount", 1)]


def test_brew_log_rules():
    assert validate_brew_log(rating=3, recipe_name="V60 Balanced", dose_g=15, yield_g=250) == []

    issues = validate_brew_log(rating=6, recipe_name="", dose_g=0, yield_g=0, note="x" * (NOTE_MAX_CHARS + 1))
    assert _codes(issues) == ["invalid_rating", "empty_recipe_name", "invalid_dose", "invalid_yield", "note_too_long"]


def test_note_length_boundary():
    ok = validate_brew_log(rating=1, recipe_name="r", dose_g=1, yield_g=1, note="x" * NOTE_MAX_CHARS)
    assert ok == []
