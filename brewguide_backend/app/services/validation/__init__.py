# brewguide_backend/app/services/validation/__init__.py
from .recipe_validator import validate_recipe, validate_update
from .brew_log_validator import validate_brew_log, NOTE_MAX_CHARS

__all__ = ["validate_recipe", "validate_update", "validate_brew_log", "NOTE_MAX_CHARS"]
