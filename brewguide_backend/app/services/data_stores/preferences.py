# brewguide_backend/app/services/data_stores/preferences.py
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

from brewguide_backend.app.config.paths import path_under_data
from brewguide_backend.app.utils.storage import read_json, write_json

# File: ./data/preferences.json
PREFERENCES_FILE = "preferences.json"

_LAST_SELECTED_RECIPE_ID = "last_selected_recipe_id"
_HAS_SEEN_ONBOARDING = "has_seen_onboarding"


class PreferencesStore:
    """Small key/value preferences persisted as one JSON document."""

    def __init__(self, path: Optional[Path] = None) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        # resolved lazily so DATA_DIR overrides apply
        return self._path or path_under_data(PREFERENCES_FILE)

    def _load(self) -> Dict[str, Any]:
        data = read_json(self.path, default={})
        return data if isinstance(data, dict) else {}

    def _set(self, key: str, value: Any) -> None:
        data = self._load()
        if value is None:
            data.pop(key, None)
        else:
            data[key] = value
        write_json(self.path, data)

    # ---- last selected recipe ----
    @property
    def last_selected_recipe_id(self) -> Optional[str]:
        value = self._load().get(_LAST_SELECTED_RECIPE_ID)
        return value if isinstance(value, str) and value else None

    @last_selected_recipe_id.setter
    def last_selected_recipe_id(self, recipe_id: Optional[str]) -> None:
        self._set(_LAST_SELECTED_RECIPE_ID, recipe_id)

    # ---- onboarding ----
    @property
    def has_seen_onboarding(self) -> bool:
        return bool(self._load().get(_HAS_SEEN_ONBOARDING, False))

    @has_seen_onboarding.setter
    def has_seen_onboarding(self, value: bool) -> None:
        self._set(_HAS_SEEN_ONBOARDING, bool(value))

    def reset_all(self) -> None:
        write_json(self.path, {})
