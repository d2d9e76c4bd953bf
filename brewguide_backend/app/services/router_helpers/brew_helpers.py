from __future__ import annotations

from fastapi import HTTPException, status
from sqlmodel import Session

from brewguide_backend.app.schemas import BrewInputs, BrewPlan, ScaleRequest, ScaleResult
from brewguide_backend.app.services.brew_session.errors import BrewSessionError, RecipeNotFoundError
from brewguide_backend.app.services.brew_session.use_case import BrewSessionUseCase
from brewguide_backend.app.services.data_stores import RecipeRepository
from brewguide_backend.app.services.scaling import scale
from brewguide_backend.app.services.scaling.engine import DEFAULT_BLOOM_RATIO
from .http_errors import to_http


# ----------------------------------------------------------------------
# Scaling
# ----------------------------------------------------------------------

def scale_inputs(req: ScaleRequest, db: Session) -> ScaleResult:
    """
    Recipe defaults come from the stored recipe when recipe_id is given,
    otherwise from the request body.
    """
    bloom_ratio = DEFAULT_BLOOM_RATIO
    default_dose, default_yield = req.recipe_default_dose_g, req.recipe_default_yield_g

    if req.recipe_id:
        recipe = RecipeRepository(db).fetch_recipe(req.recipe_id)
        if recipe is None:
            raise to_http(RecipeNotFoundError())
        default_dose, default_yield = recipe.default_dose_g, recipe.default_yield_g
        bloom_ratio = recipe.bloom_ratio

    if default_dose is None or default_yield is None:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="recipe_id or recipe_default_dose_g + recipe_default_yield_g required",
        )

    return scale(
        default_dose, default_yield,
        req.user_dose_g, req.user_yield_g,
        req.last_edited, req.temperature_c,
        bloom_ratio=bloom_ratio,
    )


# ----------------------------------------------------------------------
# Plan
# ----------------------------------------------------------------------

def create_plan(inputs: BrewInputs, db: Session) -> BrewPlan:
    try:
        return BrewSessionUseCase(RecipeRepository(db)).create_plan(inputs)
    except BrewSessionError as e:
        raise to_http(e) from e
