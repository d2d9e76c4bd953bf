from __future__ import annotations
from typing import Any, Dict, Optional
from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool
from sqlmodel import Session

from brewguide_backend.app.db.session import get_session
from brewguide_backend.app.schemas import ExitRequest, OutcomeAck, OutcomeRequest, SessionOut, StartSessionRequest
from brewguide_backend.app.services.router_helpers.sessions_helpers import (
    prepare_plan as _prepare_plan,
    open_session as _open_session,
    read_one as _read_one,
    apply_intent as _apply_intent,
    exit_session as _exit,
    outcome_target as _outcome_target,
    record_session_outcome as _record_outcome,
    release_saved as _release_saved,
)

# Session endpoints are async: the countdown loop lives on the server's event loop.
# Database work goes to the threadpool so a slow commit doesn't stall the ticks.
router = APIRouter(prefix="/sessions", tags=["sessions"])

@router.post("/start", status_code=201)
async def start_session(req: StartSessionRequest, db: Session = Depends(get_session)) -> SessionOut:
    plan = await run_in_threadpool(_prepare_plan, req, db)
    return _open_session(plan)

@router.get("/{sid}")
async def get_session_state(sid: str) -> SessionOut:
    return _read_one(sid)

@router.post("/{sid}/exit")
async def exit_session(sid: str, req: Optional[ExitRequest] = None) -> Dict[str, Any]:
    """409 while the brew is still running unless confirmed=true."""
    return _exit(sid, req or ExitRequest())

@router.post("/{sid}/outcome")
async def save_outcome(sid: str, req: OutcomeRequest, db: Session = Depends(get_session)) -> OutcomeAck:
    """Saving releases the session; a second save answers 409 with the first log id."""
    ctrl = _outcome_target(sid)
    log_id = await run_in_threadpool(_record_outcome, ctrl, req, db)
    return _release_saved(sid, log_id)

# pause | resume | toggle | next | restart | confirm-pour | background | foreground
@router.post("/{sid}/{intent}")
async def apply_intent(sid: str, intent: str) -> SessionOut:
    return _apply_intent(sid, intent)
