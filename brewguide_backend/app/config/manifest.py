# brewguide_backend/app/config/manifest.py
from __future__ import annotations

import os
from typing import Dict, List

from .paths import REPO_ROOT, resolve_rules_file

def _flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default) not in ("", "0", "false", "False")

# ---- Database / environment ----
# SQLite file next to the repo unless DATABASE_URL says otherwise
DB_URL: str = os.getenv("DATABASE_URL", "").strip() or f"sqlite:///{(REPO_ROOT / 'brewguide.sqlite3').resolve()}"
APP_ENV: str = os.getenv("APP_ENV", "development")
DEBUG_MODE: bool = _flag("DEBUG")
API_HOST: str = os.getenv("API_HOST", "127.0.0.1")
API_PORT: int = int(os.getenv("API_PORT", "8000"))

# ---- Brew session tuning ----
# Countdown tick; small relative to step durations so the display stays smooth.
BREW_TICK_INTERVAL_S: float = float(os.getenv("BREW_TICK_INTERVAL_S", "0.1"))

# Bloom steps wait for an explicit "pour done" before their countdown starts.
BREW_CONFIRM_BLOOM_POUR: bool = _flag("BREW_CONFIRM_BLOOM_POUR")

# Live sessions nobody has touched for this long are discarded.
SESSION_IDLE_TTL_S: float = float(os.getenv("SESSION_IDLE_TTL_S", "7200"))

# ---- Rules manifest ----
RULES_REQUIRED: List[str] = [
    "starter_recipes.yaml",
]

def validate_manifest() -> Dict[str, object]:
    """Report required rules files missing from RULES_DIR (seeding needs them)."""
    missing = [name for name in RULES_REQUIRED if not resolve_rules_file(name).exists()]
    return {
        "status": "ok" if not missing else "missing_required",
        "required": RULES_REQUIRED,
        "missing_required": missing,
    }


__all__ = [
    "DB_URL", "APP_ENV", "DEBUG_MODE", "API_HOST", "API_PORT",
    "BREW_TICK_INTERVAL_S", "BREW_CONFIRM_BLOOM_POUR", "SESSION_IDLE_TTL_S",
    "RULES_REQUIRED", "validate_manifest",
]
