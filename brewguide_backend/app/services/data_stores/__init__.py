# brewguide_backend/app/services/data_stores/__init__.py
"""
Unified export surface for data store helpers.

Import from here in routers/use-case code, e.g.:
    from brewguide_backend.app.services.data_stores import (
        # Recipes
        RecipeRepository, recipe_summary,
        # Brew logs
        BrewLogRepository, BrewLogUseCase,
        # Preferences
        PreferencesStore,
    )
"""

from __future__ import annotations

# ---- Recipes (SQLModel) ----
from .recipes import (  # noqa: F401
    RecipeRepository,
    to_defaults as recipe_defaults,
    to_summary as recipe_summary,
)

# ---- Brew logs (SQLModel) ----
from .brew_logs import (  # noqa: F401
    BrewLogRepository,
    BrewLogUseCase,
)

# ---- Preferences (JSON under DATA_DIR) ----
from .preferences import PreferencesStore, PREFERENCES_FILE  # noqa: F401

__all__ = [
    # recipes
    "RecipeRepository", "recipe_defaults", "recipe_summary",
    # brew logs
    "BrewLogRepository", "BrewLogUseCase",
    # preferences
    "PreferencesStore", "PREFERENCES_FILE",
]
