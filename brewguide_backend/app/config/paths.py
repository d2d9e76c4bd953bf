# brewguide_backend/app/config/paths.py
from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

# Purpose:
# Where BrewGuide keeps its files.
#   DATA_DIR   user data (preferences.json); default <repo_root>/data
#   RULES_DIR  shipped YAML rules (starter recipes); default app/rules
# Both are read from the environment on every call so tests can point them
# at a tmp dir after import.

_THIS_FILE = Path(__file__).resolve()
APP_ROOT: Path = _THIS_FILE.parents[1]

def _find_repo_root() -> Path:
    # first ancestor holding brewguide_backend/app; installed copies fall back
    # to the directory above the package
    for parent in _THIS_FILE.parents:
        if (parent / "brewguide_backend" / "app").is_dir():
            return parent
    return APP_ROOT.parents[1]

REPO_ROOT: Path = _find_repo_root()

def _env_path(name: str) -> Optional[Path]:
    raw = (os.getenv(name) or "").strip().strip('"').strip("'")
    return Path(raw).expanduser().resolve() if raw else None

# ---- getters ----
def get_data_dir() -> Path:
    return _env_path("DATA_DIR") or (REPO_ROOT / "data")

def get_rules_dir() -> Path:
    return _env_path("RULES_DIR") or (APP_ROOT / "rules")

# ---- resolvers ----
def resolve_rules_file(name: str) -> Path:
    return get_rules_dir() / name

def path_under_data(*parts: str) -> Path:
    """File path under DATA_DIR; its parent directory is created."""
    p = get_data_dir().joinpath(*parts)
    p.parent.mkdir(parents=True, exist_ok=True)
    return p


__all__ = [
    "APP_ROOT", "REPO_ROOT",
    "get_data_dir", "get_rules_dir",
    "resolve_rules_file", "path_under_data",
]
