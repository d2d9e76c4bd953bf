# brewguide_backend/app/services/brew_session/outcome.py
from __future__ import annotations

import logging
import time
from typing import Optional, Protocol

from brewguide_backend.app.schemas import BrewInputs, BrewLogEntry, TasteTag
from brewguide_backend.app.services.validation import validate_brew_log
from .errors import BrewLogValidationError

log = logging.getLogger("brewguide.session.outcome")


class LogStore(Protocol):
    def insert(self, entry: BrewLogEntry) -> None: ...
    def save(self) -> None: ...


def record_outcome(
    inputs: BrewInputs,
    rating: int,
    taste_tag: Optional[TasteTag] = None,
    note: Optional[str] = None,
    *,
    log_store: LogStore,
    timestamp: Optional[float] = None,
) -> str:
    """
    Persist one brew log built from the confirmed inputs and the user's rating.

    Validation runs before anything is written. The entry copies the recipe
    name and parameters so later recipe edits don't rewrite history.

    Returns the new log id.

    Raises:
        BrewLogValidationError: rating/note/inputs invalid; nothing written.
        PersistenceError: the store could not save (raised by the store).
    """
    if note is not None and not note.strip():
        note = None
    issues = validate_brew_log(
        rating=rating,
        recipe_name=inputs.recipe_name,
        dose_g=inputs.dose_g,
        yield_g=inputs.yield_g,
        note=note,
    )
    if issues:
        raise BrewLogValidationError(issues)

    entry = BrewLogEntry(
        timestamp=timestamp if timestamp is not None else time.time(),
        method=inputs.method,
        recipe_name_at_brew=inputs.recipe_name,
        dose_g=inputs.dose_g,
        yield_g=inputs.yield_g,
        temperature_c=inputs.temperature_c,
        grind_label=inputs.grind_label,
        rating=rating,
        taste_tag=TasteTag(taste_tag) if taste_tag is not None else None,
        note=note,
        recipe_id=inputs.recipe_id,
    )
    log.info("Saving brew log: rating=%d", rating)
    log_store.insert(entry)
    log_store.save()
    log.info("Brew log %s saved", entry.id)
    return entry.id


__all__ = ["record_outcome", "LogStore"]
