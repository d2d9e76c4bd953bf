# brewguide_backend/app/services/data_stores/recipes.py
from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from brewguide_backend.app.db.models import Recipe, RecipeStep
from brewguide_backend.app.db.seed import insert_recipe
from brewguide_backend.app.schemas import (
    BrewMethod, CountdownTimer, GrindLabel, MilestoneTimer, NoTimer, RecipeDefaults,
    RecipeDetail, RecipeOrigin, RecipeSummary, RecipeUpdateRequest, StepKind, StepTemplate, new_id,
    timer_duration_s,
)
from brewguide_backend.app.services.brew_session.errors import (
    PersistenceError, RecipeNotFoundError, RecipeValidationError, StarterRecipeError,
)
from brewguide_backend.app.services.validation import validate_recipe, validate_update

log = logging.getLogger("brewguide.recipes")


# ---- row <-> domain ----
def _timer_from_row(step: RecipeStep):
    if step.timer_type == "countdown" and step.timer_seconds is not None:
        return CountdownTimer(seconds=step.timer_seconds)
    if step.timer_type == "milestone" and step.timer_seconds is not None:
        return MilestoneTimer(elapsed_target_s=step.timer_seconds)
    return NoTimer()


def to_defaults(recipe: Recipe, steps: List[RecipeStep]) -> RecipeDefaults:
    ordered = sorted(steps, key=lambda s: s.order_index)
    return RecipeDefaults(
        recipe_id=recipe.id,
        name=recipe.name,
        method=BrewMethod(recipe.method),
        is_starter=recipe.is_starter,
        origin=RecipeOrigin(recipe.origin),
        default_dose_g=recipe.default_dose_g,
        default_yield_g=recipe.default_yield_g,
        default_temperature_c=recipe.default_temperature_c,
        default_grind_label=GrindLabel(recipe.default_grind_label),
        grind_tactile_descriptor=recipe.grind_tactile_descriptor,
        bloom_ratio=recipe.bloom_ratio,
        steps=tuple(
            StepTemplate(
                step_id=s.id,
                order_index=s.order_index,
                instruction_text=s.instruction_text,
                step_kind=StepKind(s.step_kind),
                timer=_timer_from_row(s),
                water_amount_g=s.water_amount_g,
                is_cumulative_water_target=s.is_cumulative_water_target,
            )
            for s in ordered
        ),
    )


def to_summary(recipe: RecipeDefaults) -> RecipeSummary:
    return RecipeSummary(
        recipe_id=recipe.recipe_id,
        name=recipe.name,
        method=recipe.method,
        is_starter=recipe.is_starter,
        origin=recipe.origin,
        default_dose_g=recipe.default_dose_g,
        default_yield_g=recipe.default_yield_g,
        default_ratio=recipe.default_ratio,
    )


class RecipeRepository:
    """Recipe queries and the starter/custom business rules, over one DB session."""

    def __init__(self, session: Session) -> None:
        self.session = session

    # ---- reads ----
    def _row(self, recipe_id: str) -> Optional[Recipe]:
        return self.session.get(Recipe, recipe_id)

    def _steps(self, recipe_id: str) -> List[RecipeStep]:
        return list(self.session.exec(select(RecipeStep).where(RecipeStep.recipe_id == recipe_id)).all())

    def fetch_recipe(self, recipe_id: str) -> Optional[RecipeDefaults]:
        row = self._row(recipe_id)
        return to_defaults(row, self._steps(row.id)) if row is not None else None

    def fetch_starter_recipe(self, method: BrewMethod) -> Optional[RecipeDefaults]:
        row = self.session.exec(
            select(Recipe)
            .where(Recipe.is_starter == True, Recipe.method == BrewMethod(method).value)  # noqa: E712
            .order_by(Recipe.name)
        ).first()
        return to_defaults(row, self._steps(row.id)) if row is not None else None

    def fetch_recipes(self, method: BrewMethod) -> List[RecipeDefaults]:
        """Starters first, then alphabetical by name."""
        rows = self.session.exec(select(Recipe).where(Recipe.method == BrewMethod(method).value)).all()
        rows = sorted(rows, key=lambda r: (not r.is_starter, r.name.lower()))
        return [to_defaults(r, self._steps(r.id)) for r in rows]

    def fetch_detail(self, recipe_id: str) -> RecipeDetail:
        recipe = self.fetch_recipe(recipe_id)
        if recipe is None:
            raise RecipeNotFoundError()
        issues = validate_recipe(recipe)
        return RecipeDetail(recipe=recipe, is_valid=not issues, issues=issues)

    # ---- writes ----
    @contextmanager
    def _writing(self) -> Iterator[None]:
        # flushes inside the block and the final commit fail the same way
        try:
            yield
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            log.error("Recipe save failed: %s", e)
            raise PersistenceError() from e

    def duplicate(self, recipe_id: str) -> RecipeDefaults:
        source = self.fetch_recipe(recipe_id)
        if source is None:
            raise RecipeNotFoundError()
        copy = source.model_copy(update={
            "recipe_id": new_id(),
            "name": f"{source.name} Copy",
            "is_starter": False,
            "origin": RecipeOrigin.CUSTOM,
            "steps": tuple(s.model_copy(update={"step_id": new_id()}) for s in source.steps),
        })
        with self._writing():
            insert_recipe(self.session, copy)
        log.info("Duplicated recipe %s as %s", source.recipe_id, copy.recipe_id)
        return copy

    def delete_custom_recipe(self, recipe_id: str) -> None:
        # deleting a missing recipe counts as success
        row = self._row(recipe_id)
        if row is None:
            return
        if row.is_starter:
            raise StarterRecipeError("Starter recipes cannot be deleted")
        with self._writing():
            for step in self._steps(row.id):
                self.session.delete(step)
            self.session.delete(row)
        log.info("Deleted recipe %s", recipe_id)

    def update_custom_recipe(self, recipe_id: str, request: RecipeUpdateRequest) -> RecipeDefaults:
        """
        Replace a custom recipe's defaults and steps. Steps are re-numbered
        0..n-1 following their submitted order_index.

        Raises:
            RecipeNotFoundError, StarterRecipeError, RecipeValidationError, PersistenceError
        """
        row = self._row(recipe_id)
        if row is None:
            raise RecipeNotFoundError()
        if row.is_starter:
            raise StarterRecipeError("Starter recipes cannot be modified. Please duplicate it first.")
        issues = validate_update(request)
        if issues:
            raise RecipeValidationError(issues)

        ordered = sorted(request.steps, key=lambda s: s.order_index)
        with self._writing():
            row.name = request.name.strip()
            row.default_dose_g = request.default_dose_g
            row.default_yield_g = request.default_yield_g
            row.default_temperature_c = request.default_temperature_c
            row.default_grind_label = GrindLabel(request.default_grind_label).value
            row.grind_tactile_descriptor = request.grind_tactile_descriptor
            row.bloom_ratio = request.bloom_ratio
            row.modified_at = datetime.now(timezone.utc)
            self.session.add(row)

            for step in self._steps(row.id):
                self.session.delete(step)
            # flush deletes first so re-used step ids don't collide
            self.session.flush()
            for index, dto in enumerate(ordered):
                self.session.add(RecipeStep(
                    id=dto.step_id or new_id(),
                    recipe_id=row.id,
                    order_index=index,
                    instruction_text=dto.instruction_text,
                    step_kind=StepKind(dto.step_kind).value,
                    timer_type=dto.timer.type,
                    timer_seconds=timer_duration_s(dto.timer),
                    water_amount_g=dto.water_amount_g,
                    is_cumulative_water_target=dto.is_cumulative_water_target,
                ))
        log.info("Updated recipe %s (%d steps)", recipe_id, len(ordered))
        return self.fetch_recipe(recipe_id)


__all__ = ["RecipeRepository", "to_defaults", "to_summary"]
