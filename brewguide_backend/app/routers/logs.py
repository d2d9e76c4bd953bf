from __future__ import annotations
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlmodel import Session

from brewguide_backend.app.db.session import get_session
from brewguide_backend.app.schemas import BrewLogDetail, BrewLogSummary, BrewMethod
from brewguide_backend.app.services.data_stores import BrewLogRepository, BrewLogUseCase
from brewguide_backend.app.services.data_stores.brew_logs import to_summary

router = APIRouter(prefix="/logs", tags=["logs"])

@router.get("")
def list_logs(
    method: Optional[BrewMethod] = None,
    limit: Optional[int] = None,
    db: Session = Depends(get_session),
) -> List[BrewLogSummary]:
    """Newest first."""
    repo = BrewLogRepository(db)
    if method is not None:
        entries = repo.fetch_for_method(method)
        return [to_summary(e) for e in (entries[:limit] if limit else entries)]
    if limit:
        return [to_summary(e) for e in repo.fetch_recent(limit)]
    return BrewLogUseCase(repo).fetch_all_summaries()

@router.get("/{log_id}")
def get_log(log_id: str, db: Session = Depends(get_session)) -> BrewLogDetail:
    detail = BrewLogUseCase(BrewLogRepository(db)).fetch_detail(log_id)
    if detail is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="log not found")
    return detail

@router.delete("/{log_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_log(log_id: str, db: Session = Depends(get_session)) -> Response:
    # idempotent: deleting a missing log is still 204
    BrewLogUseCase(BrewLogRepository(db)).delete_log(log_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
