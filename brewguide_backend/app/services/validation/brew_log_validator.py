# brewguide_backend/app/services/validation/brew_log_validator.py
from __future__ import annotations

from typing import List, Optional

from brewguide_backend.app.schemas import BrewLogIssue

NOTE_MAX_CHARS = 280
RATING_RANGE = (1, 5)


def validate_brew_log(
    *,
    rating: int,
    recipe_name: str,
    dose_g: float,
    yield_g: float,
    note: Optional[str] = None,
) -> List[BrewLogIssue]:
    """Collects every problem instead of stopping at the first one."""
    issues: List[BrewLogIssue] = []
    lo, hi = RATING_RANGE

    if not (lo <= rating <= hi):
        issues.append(BrewLogIssue(code="invalid_rating", message=f"Rating must be between {lo} and {hi} (got {rating})"))
    if not (recipe_name or "").strip():
        issues.append(BrewLogIssue(code="empty_recipe_name", message="Recipe name cannot be empty"))
    if dose_g <= 0:
        issues.append(BrewLogIssue(code="invalid_dose", message="Dose must be greater than 0"))
    if yield_g <= 0:
        issues.append(BrewLogIssue(code="invalid_yield", message="Yield must be greater than 0"))
    if note is not None and len(note) > NOTE_MAX_CHARS:
        issues.append(BrewLogIssue(
            code="note_too_long",
            message=f"Note is too long ({len(note)} characters; max {NOTE_MAX_CHARS})",
        ))
    return issues


__all__ = ["validate_brew_log", "NOTE_MAX_CHARS", "RATING_RANGE"]
