# brewguide_backend/app/services/router_helpers/recipes_helpers.py
from __future__ import annotations

from typing import Dict, List

from sqlmodel import Session

from brewguide_backend.app.schemas import BrewMethod, RecipeDefaults, RecipeDetail, RecipeSummary, RecipeUpdateRequest
from brewguide_backend.app.services.brew_session.errors import BrewSessionError
from brewguide_backend.app.services.data_stores import RecipeRepository, recipe_summary
from .http_errors import to_http


def list_recipes(method: BrewMethod, db: Session) -> Dict[str, List[RecipeSummary]]:
    """Grouped the way the recipe list shows them: starters, then the user's own."""
    summaries = [recipe_summary(r) for r in RecipeRepository(db).fetch_recipes(method)]
    return {
        "starter": [s for s in summaries if s.is_starter],
        "custom": [s for s in summaries if not s.is_starter],
    }


def read_one(recipe_id: str, db: Session) -> RecipeDetail:
    try:
        return RecipeRepository(db).fetch_detail(recipe_id)
    except BrewSessionError as e:
        raise to_http(e) from e


def duplicate_one(recipe_id: str, db: Session) -> RecipeDefaults:
    try:
        return RecipeRepository(db).duplicate(recipe_id)
    except BrewSessionError as e:
        raise to_http(e) from e


def update_one(recipe_id: str, req: RecipeUpdateRequest, db: Session) -> RecipeDefaults:
    try:
        return RecipeRepository(db).update_custom_recipe(recipe_id, req)
    except BrewSessionError as e:
        raise to_http(e) from e


def drop_one(recipe_id: str, db: Session) -> None:
    try:
        RecipeRepository(db).delete_custom_recipe(recipe_id)
    except BrewSessionError as e:
        raise to_http(e) from e
