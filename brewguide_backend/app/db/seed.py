import logging

from sqlmodel import Session, select

from brewguide_backend.app.rules.loader import get_starter_recipes
from brewguide_backend.app.schemas import BrewMethod, RecipeDefaults
from .models import Recipe, RecipeStep

log = logging.getLogger("brewguide.db.seed")


def insert_recipe(session: Session, recipe: RecipeDefaults) -> Recipe:
    row = Recipe(
        id=recipe.recipe_id,
        name=recipe.name,
        method=recipe.method.value,
        is_starter=recipe.is_starter,
        origin=recipe.origin.value,
        default_dose_g=recipe.default_dose_g,
        default_yield_g=recipe.default_yield_g,
        default_temperature_c=recipe.default_temperature_c,
        default_grind_label=recipe.default_grind_label.value,
        grind_tactile_descriptor=recipe.grind_tactile_descriptor,
        bloom_ratio=recipe.bloom_ratio,
    )
    session.add(row)
    for step in recipe.steps:
        session.add(RecipeStep(
            id=step.step_id,
            recipe_id=row.id,
            order_index=step.order_index,
            instruction_text=step.instruction_text,
            step_kind=step.step_kind.value,
            timer_type=step.timer.type,
            timer_seconds=step.timer_duration_s,
            water_amount_g=step.water_amount_g,
            is_cumulative_water_target=step.is_cumulative_water_target,
        ))
    return row


def seed_starter_recipes(session: Session, method: BrewMethod = BrewMethod.V60) -> str:
    """Insert the starter recipes once; a database that already has starters is left alone."""
    existing = session.exec(
        select(Recipe).where(Recipe.is_starter == True, Recipe.method == method.value)  # noqa: E712
    ).first()
    if existing is not None:
        return "skipped"

    recipes = get_starter_recipes(method)
    for recipe in recipes:
        insert_recipe(session, recipe)
    session.commit()
    log.info("Seeded %d starter recipes for %s", len(recipes), method.value)
    return "seeded"


def seed_defaults() -> str:
    from .session import engine
    with Session(engine) as session:
        return seed_starter_recipes(session)
