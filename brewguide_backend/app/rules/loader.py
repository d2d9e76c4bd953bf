# brewguide_backend/app/rules/loader.py
from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml  # PyYAML

from brewguide_backend.app.config.paths import resolve_rules_file
from brewguide_backend.app.schemas import (
    BrewMethod, RecipeDefaults, RecipeOrigin, StepTemplate,
)

# -----------------------------------------------------------------------------
# Logger
# -----------------------------------------------------------------------------
log = logging.getLogger("brewguide.rules")
if not log.handlers:
    handler = logging.StreamHandler()
    log.addHandler(handler)
    log.setLevel(logging.INFO)

STARTER_RECIPES_FILE = "starter_recipes.yaml"

# -----------------------------------------------------------------------------
# Internal IO helpers
# -----------------------------------------------------------------------------
def _load_yaml_from(path: Path) -> Any:
    try:
        txt = path.read_text(encoding="utf-8")
        return yaml.safe_load(txt)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e

# -----------------------------------------------------------------------------
# Public loader API
# -----------------------------------------------------------------------------
@lru_cache(maxsize=16)
def load_yaml_rules(filename: str) -> Any:
    """
    Load a YAML rules file from app/rules (or RULES_DIR).
    Raises FileNotFoundError if it is not there.
    """
    path = resolve_rules_file(filename)
    if not path.exists():
        raise FileNotFoundError(f"Rules file not found: {path}")
    obj = _load_yaml_from(path)
    log.info(f"[rules] loaded {filename} from {path}")
    return obj

def has_rules_file(filename: str) -> bool:
    return resolve_rules_file(filename).exists()

# -----------------------------------------------------------------------------
# Starter recipes
# -----------------------------------------------------------------------------
def _recipe_from_rule(raw: Dict[str, Any]) -> RecipeDefaults:
    # order_index follows file order; ids are fresh on every load
    steps: Tuple[StepTemplate, ...] = tuple(
        StepTemplate(order_index=i, **step) for i, step in enumerate(raw.get("steps") or [])
    )
    fields = {k: v for k, v in raw.items() if k != "steps"}
    return RecipeDefaults(
        **fields,
        is_starter=True,
        origin=RecipeOrigin.STARTER_TEMPLATE,
        steps=steps,
    )

def get_starter_recipes(method: Optional[BrewMethod] = None) -> List[RecipeDefaults]:
    """Parsed starter recipes, optionally only those for `method`."""
    data = load_yaml_rules(STARTER_RECIPES_FILE) or {}
    if not isinstance(data, dict) or not isinstance(data.get("recipes"), list):
        raise ValueError(f"{STARTER_RECIPES_FILE}: expected a top-level 'recipes' list")
    out = [_recipe_from_rule(r) for r in data["recipes"]]
    if method is not None:
        out = [r for r in out if r.method is BrewMethod(method)]
    return out


__all__ = ["load_yaml_rules", "has_rules_file", "get_starter_recipes", "STARTER_RECIPES_FILE"]
