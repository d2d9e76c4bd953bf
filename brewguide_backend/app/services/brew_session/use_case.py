# brewguide_backend/app/services/brew_session/use_case.py
from __future__ import annotations

import logging
from typing import Optional, Tuple

from brewguide_backend.app.schemas import (
    BrewInputs, BrewMethod, BrewPlan, GrindLabel, LastEdited, RecipeDefaults, ScaleResult,
)
from brewguide_backend.app.services.data_stores.recipes import RecipeRepository
from brewguide_backend.app.services.scaling import scale
from brewguide_backend.app.services.validation import validate_recipe
from .errors import MethodMismatchError, RecipeNotBrewableError, RecipeNotFoundError
from .plan_builder import build_plan

log = logging.getLogger("brewguide.session.use_case")


class BrewSessionUseCase:
    """Recipe -> inputs -> plan, before a session exists."""

    def __init__(self, recipes: RecipeRepository) -> None:
        self.recipes = recipes

    def load_recipe_for_brewing(self, recipe_id: Optional[str], fallback_method: BrewMethod) -> RecipeDefaults:
        """The requested recipe, else the method's starter recipe."""
        if recipe_id:
            recipe = self.recipes.fetch_recipe(recipe_id)
            if recipe is not None:
                return recipe
            log.info("Recipe %s not found; falling back to starter", recipe_id)
        starter = self.recipes.fetch_starter_recipe(fallback_method)
        if starter is not None:
            return starter
        raise RecipeNotFoundError()

    @staticmethod
    def create_inputs(recipe: RecipeDefaults) -> BrewInputs:
        return BrewInputs(
            recipe_id=recipe.recipe_id,
            recipe_name=recipe.name,
            method=recipe.method,
            dose_g=recipe.default_dose_g,
            yield_g=recipe.default_yield_g,
            temperature_c=recipe.default_temperature_c,
            grind_label=recipe.default_grind_label,
            last_edited=LastEdited.YIELD,
        )

    @staticmethod
    def apply_edits(
        recipe: RecipeDefaults,
        inputs: BrewInputs,
        *,
        dose_g: Optional[float] = None,
        yield_g: Optional[float] = None,
        temperature_c: Optional[float] = None,
        grind_label: Optional[GrindLabel] = None,
        last_edited: LastEdited = LastEdited.YIELD,
    ) -> Tuple[BrewInputs, ScaleResult]:
        """
        Apply user edits on top of recipe inputs. Dose/yield go through the
        scaling engine so the untouched one follows the recipe ratio.
        """
        temperature = temperature_c if temperature_c is not None else inputs.temperature_c
        result = scale(
            recipe.default_dose_g,
            recipe.default_yield_g,
            dose_g if dose_g is not None else inputs.dose_g,
            yield_g if yield_g is not None else inputs.yield_g,
            last_edited,
            temperature,
            bloom_ratio=recipe.bloom_ratio,
        )
        updated = inputs.model_copy(update={
            "dose_g": result.scaled_dose_g,
            "yield_g": float(result.scaled_yield_g),
            "temperature_c": temperature,
            "grind_label": grind_label if grind_label is not None else inputs.grind_label,
            "last_edited": LastEdited(last_edited),
        })
        return updated, result

    def create_plan(self, inputs: BrewInputs) -> BrewPlan:
        """
        Raises:
            RecipeNotFoundError, MethodMismatchError, RecipeNotBrewableError,
            NoStepsError, InvalidInputsError
        """
        recipe = self.recipes.fetch_recipe(inputs.recipe_id)
        if recipe is None:
            raise RecipeNotFoundError()
        if recipe.method != inputs.method:
            raise MethodMismatchError()
        issues = validate_recipe(recipe)
        if issues:
            raise RecipeNotBrewableError(issues)

        steps = sorted(recipe.steps, key=lambda s: s.order_index)
        plan = build_plan(steps, recipe.default_yield_g, inputs, recipe_method=recipe.method)
        log.info("Built plan for %s: %d steps, %.0f g", recipe.name, len(plan.steps), plan.total_water_g)
        return plan


__all__ = ["BrewSessionUseCase"]
