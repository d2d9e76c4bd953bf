# brewguide_backend/app/utils/storage.py
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Union

PathLike = Union[str, Path]

log = logging.getLogger("brewguide.storage")


def read_json(path: PathLike, default: Any = None) -> Any:
    """Missing, empty or unreadable files give `default`."""
    p = Path(path)
    if not p.is_file():
        return default
    try:
        raw = p.read_text(encoding="utf-8")
        return json.loads(raw) if raw.strip() else default
    except (OSError, json.JSONDecodeError) as e:
        log.warning("Ignoring unreadable JSON at %s: %s", p, e)
        return default


def write_json(path: PathLike, obj: Any) -> None:
    # write-then-rename so readers never see half a file
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    tmp = p.with_name(p.name + ".tmp")
    tmp.write_text(json.dumps(obj, ensure_ascii=False, indent=2), encoding="utf-8")
    tmp.replace(p)


__all__ = ["read_json", "write_json"]
