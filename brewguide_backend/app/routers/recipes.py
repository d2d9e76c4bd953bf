from __future__ import annotations
from typing import Dict, List
from fastapi import APIRouter, Depends, Response, status
from sqlmodel import Session

from brewguide_backend.app.db.session import get_session
from brewguide_backend.app.schemas import BrewMethod, RecipeDefaults, RecipeDetail, RecipeSummary, RecipeUpdateRequest
from brewguide_backend.app.services.router_helpers import recipes_helpers as H

router = APIRouter(prefix="/recipes", tags=["recipes"])

@router.get("")
def list_recipes(method: BrewMethod = BrewMethod.V60, db: Session = Depends(get_session)) -> Dict[str, List[RecipeSummary]]:
    return H.list_recipes(method, db)

@router.get("/{recipe_id}")
def get_recipe(recipe_id: str, db: Session = Depends(get_session)) -> RecipeDetail:
    return H.read_one(recipe_id, db)

@router.post("/{recipe_id}/duplicate", status_code=status.HTTP_201_CREATED)
def duplicate_recipe(recipe_id: str, db: Session = Depends(get_session)) -> RecipeDefaults:
    return H.duplicate_one(recipe_id, db)

@router.put("/{recipe_id}")
def update_recipe(recipe_id: str, req: RecipeUpdateRequest, db: Session = Depends(get_session)) -> RecipeDefaults:
    """Custom recipes only; starters answer 409 and must be duplicated first."""
    return H.update_one(recipe_id, req, db)

@router.delete("/{recipe_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_recipe(recipe_id: str, db: Session = Depends(get_session)) -> Response:
    H.drop_one(recipe_id, db)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
