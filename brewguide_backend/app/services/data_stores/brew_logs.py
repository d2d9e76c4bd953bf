# brewguide_backend/app/services/data_stores/brew_logs.py
from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from brewguide_backend.app.db.models import BrewLog
from brewguide_backend.app.schemas import (
    BrewLogDetail, BrewLogEntry, BrewLogSummary, BrewMethod, GrindLabel, TasteTag,
)
from brewguide_backend.app.services.brew_session.errors import PersistenceError

log = logging.getLogger("brewguide.brew_logs")


def to_entry(row: BrewLog) -> BrewLogEntry:
    return BrewLogEntry(
        id=row.id,
        timestamp=row.timestamp,
        method=BrewMethod(row.method),
        recipe_name_at_brew=row.recipe_name_at_brew,
        dose_g=row.dose_g,
        yield_g=row.yield_g,
        temperature_c=row.temperature_c,
        grind_label=GrindLabel(row.grind_label),
        rating=row.rating,
        taste_tag=TasteTag(row.taste_tag) if row.taste_tag else None,
        note=row.note,
        recipe_id=row.recipe_id,
    )


def to_summary(entry: BrewLogEntry) -> BrewLogSummary:
    return BrewLogSummary(
        id=entry.id,
        timestamp=entry.timestamp,
        method=entry.method,
        recipe_name_at_brew=entry.recipe_name_at_brew,
        rating=entry.rating,
        taste_tag=entry.taste_tag,
        recipe_id=entry.recipe_id,
    )


def to_detail(entry: BrewLogEntry) -> BrewLogDetail:
    return BrewLogDetail(
        summary=to_summary(entry),
        dose_g=entry.dose_g,
        yield_g=entry.yield_g,
        temperature_c=entry.temperature_c,
        grind_label=entry.grind_label,
        note=entry.note,
    )


class BrewLogRepository:
    """
    Brew log store. insert() only stages the row; save() commits and turns
    any storage failure into PersistenceError after rolling back.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def insert(self, entry: BrewLogEntry) -> None:
        self.session.add(BrewLog(
            id=entry.id,
            timestamp=entry.timestamp,
            method=entry.method.value,
            recipe_name_at_brew=entry.recipe_name_at_brew,
            dose_g=entry.dose_g,
            yield_g=entry.yield_g,
            temperature_c=entry.temperature_c,
            grind_label=entry.grind_label.value,
            rating=entry.rating,
            taste_tag=entry.taste_tag.value if entry.taste_tag else None,
            note=entry.note,
            recipe_id=entry.recipe_id,
        ))

    def save(self) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            log.error("Brew log save failed: %s", e)
            raise PersistenceError() from e

    # ---- reads (newest first) ----
    def fetch_all(self) -> List[BrewLogEntry]:
        rows = self.session.exec(select(BrewLog).order_by(BrewLog.timestamp.desc())).all()
        return [to_entry(r) for r in rows]

    def fetch_recent(self, limit: int = 10) -> List[BrewLogEntry]:
        rows = self.session.exec(
            select(BrewLog).order_by(BrewLog.timestamp.desc()).limit(max(0, limit))
        ).all()
        return [to_entry(r) for r in rows]

    def fetch_for_method(self, method: BrewMethod) -> List[BrewLogEntry]:
        rows = self.session.exec(
            select(BrewLog)
            .where(BrewLog.method == BrewMethod(method).value)
            .order_by(BrewLog.timestamp.desc())
        ).all()
        return [to_entry(r) for r in rows]

    def fetch_for_recipe(self, recipe_id: str) -> List[BrewLogEntry]:
        rows = self.session.exec(
            select(BrewLog).where(BrewLog.recipe_id == recipe_id).order_by(BrewLog.timestamp.desc())
        ).all()
        return [to_entry(r) for r in rows]

    def fetch_by_id(self, log_id: str) -> Optional[BrewLogEntry]:
        row = self.session.get(BrewLog, log_id)
        return to_entry(row) if row is not None else None

    def delete(self, log_id: str) -> bool:
        row = self.session.get(BrewLog, log_id)
        if row is None:
            return False
        self.session.delete(row)
        self.save()
        return True


class BrewLogUseCase:
    """History screen operations."""

    def __init__(self, repository: BrewLogRepository) -> None:
        self.repository = repository

    def fetch_all_summaries(self) -> List[BrewLogSummary]:
        return [to_summary(e) for e in self.repository.fetch_all()]

    def fetch_detail(self, log_id: str) -> Optional[BrewLogDetail]:
        entry = self.repository.fetch_by_id(log_id)
        return to_detail(entry) if entry is not None else None

    def delete_log(self, log_id: str) -> None:
        # a log that is already gone is not an error
        if self.repository.delete(log_id):
            log.info("Deleted brew log %s", log_id)


__all__ = ["BrewLogRepository", "BrewLogUseCase", "to_entry", "to_summary", "to_detail"]
