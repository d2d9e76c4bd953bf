# brewguide_backend/app/config/__init__.py
from __future__ import annotations

# Config surface used across the app: env flags and brew tuning from
# manifest.py, file locations from paths.py.

from .manifest import (
    DB_URL,
    APP_ENV,
    DEBUG_MODE,
    API_HOST,
    API_PORT,
    BREW_TICK_INTERVAL_S,
    BREW_CONFIRM_BLOOM_POUR,
    SESSION_IDLE_TTL_S,
    RULES_REQUIRED,
    validate_manifest,
)
from .paths import (
    REPO_ROOT,
    get_data_dir,
    get_rules_dir,
    resolve_rules_file,
    path_under_data,
)

__all__ = [
    "DB_URL", "APP_ENV", "DEBUG_MODE", "API_HOST", "API_PORT",
    "BREW_TICK_INTERVAL_S", "BREW_CONFIRM_BLOOM_POUR", "SESSION_IDLE_TTL_S",
    "RULES_REQUIRED", "validate_manifest",
    "REPO_ROOT", "get_data_dir", "get_rules_dir",
    "resolve_rules_file", "path_under_data",
]
