# models.py  (recipes, recipe steps, brew logs)

from __future__ import annotations
from typing import Optional
from datetime import datetime, timezone
from sqlmodel import SQLModel, Field

from brewguide_backend.app.schemas import new_id


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------- Recipes ----------

class Recipe(SQLModel, table=True):
    id: str = Field(default_factory=new_id, primary_key=True)
    name: str
    method: str = Field(default="v60", index=True)     # BrewMethod value
    is_starter: bool = Field(default=False, index=True)
    origin: str = "custom"                              # RecipeOrigin value
    default_dose_g: float = 15.0
    default_yield_g: float = 250.0
    default_temperature_c: float = 94.0
    default_grind_label: str = "medium"                 # GrindLabel value
    grind_tactile_descriptor: Optional[str] = None
    bloom_ratio: float = 3.0
    created_at: datetime = Field(default_factory=_utcnow)
    modified_at: datetime = Field(default_factory=_utcnow)

class RecipeStep(SQLModel, table=True):
    id: str = Field(default_factory=new_id, primary_key=True)
    recipe_id: str = Field(foreign_key="recipe.id", index=True)
    order_index: int
    instruction_text: str
    step_kind: str                                      # StepKind value
    # countdown -> timer_seconds is the wait; milestone -> the brew time target
    timer_type: str = "none"
    timer_seconds: Optional[float] = None
    water_amount_g: Optional[float] = None
    is_cumulative_water_target: bool = True


# ---------- Brew logs ----------
# Snapshot of the brew; recipe_id is a loose back-reference (no FK) so
# deleting or editing the recipe never touches history.

class BrewLog(SQLModel, table=True):
    id: str = Field(default_factory=new_id, primary_key=True)
    timestamp: float = Field(index=True)                # unix seconds
    method: str = Field(default="v60", index=True)
    recipe_name_at_brew: str
    dose_g: float
    yield_g: float
    temperature_c: float
    grind_label: str
    rating: int
    taste_tag: Optional[str] = None
    note: Optional[str] = None
    recipe_id: Optional[str] = None
