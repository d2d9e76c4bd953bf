# app/routers/brew.py
from __future__ import annotations
from fastapi import APIRouter, Depends
from sqlmodel import Session

from brewguide_backend.app.db.session import get_session
from brewguide_backend.app.schemas import BrewInputs, BrewPlan, ScaleRequest, ScaleResult
from brewguide_backend.app.services.router_helpers import brew_helpers as H

router = APIRouter(prefix="/brew", tags=["brew"])

@router.post("/scale")
def scale(req: ScaleRequest, db: Session = Depends(get_session)) -> ScaleResult:
    """
    Live dose/yield scaling for the confirm-inputs screen. The edited field
    (last_edited) is kept; the other follows the recipe ratio. Warnings are
    advisory and never block.
    """
    return H.scale_inputs(req, db)

@router.post("/plan")
def plan(inputs: BrewInputs, db: Session = Depends(get_session)) -> BrewPlan:
    # 404 recipe missing, 409 method mismatch, 422 recipe not brewable
    return H.create_plan(inputs, db)
