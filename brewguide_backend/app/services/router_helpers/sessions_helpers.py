# brewguide_backend/app/services/router_helpers/sessions_helpers.py
from __future__ import annotations

import logging
import time
from collections import OrderedDict
from typing import Any, Callable, Dict, Optional

from fastapi import HTTPException, status
from sqlmodel import Session

from brewguide_backend.app.config import SESSION_IDLE_TTL_S
from brewguide_backend.app.schemas import (
    BrewPlan, ExitRequest, OutcomeAck, OutcomeRequest, SessionOut, StartSessionRequest,
)
from brewguide_backend.app.services.brew_session.controller import BrewSessionController
from brewguide_backend.app.services.brew_session.errors import BrewSessionError
from brewguide_backend.app.services.brew_session.timer import Clock, MonotonicClock
from brewguide_backend.app.services.brew_session.use_case import BrewSessionUseCase
from brewguide_backend.app.services.data_stores import (
    BrewLogRepository, PreferencesStore, RecipeRepository,
)
from .http_errors import to_http

log = logging.getLogger("brewguide.sessions")

# saved-session ids remembered for the "already saved" answer
SAVED_SESSIONS_KEPT = 512


# ----------------------------------------------------------------------
# Registry: one controller per live session id
# ----------------------------------------------------------------------

class SessionRegistry:
    """
    Live controllers by session id. A session leaves the registry when it
    exits, when its outcome is saved, or after sitting untouched for
    `idle_ttl_s`. Saved sessions leave their log id behind so a second save
    still answers "already saved".
    """

    def __init__(
        self,
        clock_factory: Callable[[], Clock] = MonotonicClock,
        idle_ttl_s: float = SESSION_IDLE_TTL_S,
        now: Callable[[], float] = time.monotonic,
    ) -> None:
        self.clock_factory = clock_factory
        self.idle_ttl_s = idle_ttl_s
        self.now = now
        self._sessions: Dict[str, BrewSessionController] = {}
        self._touched: Dict[str, float] = {}
        self._saved: "OrderedDict[str, str]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._sessions)

    def create(self, plan: BrewPlan) -> BrewSessionController:
        self.prune_idle()
        ctrl = BrewSessionController(plan, clock=self.clock_factory())
        self._sessions[ctrl.session_id] = ctrl
        self._touched[ctrl.session_id] = self.now()
        return ctrl

    def get(self, sid: str) -> BrewSessionController:
        ctrl = self._sessions.get(sid)
        if ctrl is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"session {sid} not found")
        self._touched[sid] = self.now()
        return ctrl

    def saved_log_id(self, sid: str) -> Optional[str]:
        return self._saved.get(sid)

    def finish(self, sid: str, log_id: str) -> None:
        """Outcome recorded: release the controller, keep only its log id."""
        self.drop(sid)
        self._saved[sid] = log_id
        while len(self._saved) > SAVED_SESSIONS_KEPT:
            self._saved.popitem(last=False)

    def drop(self, sid: str) -> None:
        self._touched.pop(sid, None)
        ctrl = self._sessions.pop(sid, None)
        if ctrl is not None and not ctrl.is_closed:
            ctrl.exit()

    def prune_idle(self) -> int:
        cutoff = self.now() - self.idle_ttl_s
        stale = [sid for sid, t in self._touched.items() if t < cutoff]
        for sid in stale:
            log.info("Session %s idle for over %.0fs - discarding", sid, self.idle_ttl_s)
            self.drop(sid)
        return len(stale)

    def clear(self) -> None:
        for sid in list(self._sessions):
            self.drop(sid)
        self._saved.clear()


registry = SessionRegistry()


def snapshot(ctrl: BrewSessionController) -> SessionOut:
    return SessionOut(
        session_id=ctrl.session_id,
        state=ctrl.state,
        ui=ctrl.ui,
        is_completed=ctrl.is_completed,
        elapsed_s=ctrl.elapsed_s,
    )


# ----------------------------------------------------------------------
# Start
# ----------------------------------------------------------------------

def prepare_plan(req: StartSessionRequest, db: Session, prefs: Optional[PreferencesStore] = None) -> BrewPlan:
    """
    Pick the recipe (requested id, else last selected, else the starter),
    apply any dose/yield/temperature/grind edits and build the plan.
    Blocking: reads the database and writes preferences.
    """
    prefs = prefs or PreferencesStore()
    use_case = BrewSessionUseCase(RecipeRepository(db))
    try:
        recipe = use_case.load_recipe_for_brewing(req.recipe_id or prefs.last_selected_recipe_id, req.method)
        inputs = use_case.create_inputs(recipe)
        if any(v is not None for v in (req.dose_g, req.yield_g, req.temperature_c, req.grind_label)):
            inputs, _ = use_case.apply_edits(
                recipe, inputs,
                dose_g=req.dose_g, yield_g=req.yield_g,
                temperature_c=req.temperature_c, grind_label=req.grind_label,
                last_edited=req.last_edited,
            )
        plan = use_case.create_plan(inputs)
    except BrewSessionError as e:
        raise to_http(e) from e

    prefs.last_selected_recipe_id = recipe.recipe_id
    return plan


def open_session(plan: BrewPlan) -> SessionOut:
    # runs on the event loop: the first step's countdown starts here
    ctrl = registry.create(plan)
    ctrl.on_appear()
    return snapshot(ctrl)


# ----------------------------------------------------------------------
# Intents
# ----------------------------------------------------------------------

_INTENTS: Dict[str, Callable[[BrewSessionController], Any]] = {
    "pause": lambda c: c.pause(),
    "resume": lambda c: c.resume(),
    "toggle": lambda c: c.toggle_pause_resume(),
    "next": lambda c: c.next_step(),
    "restart": lambda c: c.restart(),
    "confirm-pour": lambda c: c.confirm_pour(),
    "background": lambda c: c.handle_scene_phase_change(False),
    "foreground": lambda c: c.handle_scene_phase_change(True),
}


def read_one(sid: str) -> SessionOut:
    return snapshot(registry.get(sid))


def apply_intent(sid: str, intent: str) -> SessionOut:
    ctrl = registry.get(sid)
    handler = _INTENTS.get(intent)
    if handler is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"unknown intent '{intent}'")
    handler(ctrl)
    return snapshot(ctrl)


def exit_session(sid: str, req: ExitRequest) -> Dict[str, Any]:
    ctrl = registry.get(sid)
    if ctrl.request_exit() and not req.confirmed:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"error": "confirmation_required", "message": "Brew in progress. Exit and discard it?"},
        )
    registry.drop(sid)
    log.info("Session %s discarded", sid)
    return {"ok": True, "session_id": sid}


# ----------------------------------------------------------------------
# Outcome
# ----------------------------------------------------------------------

def outcome_target(sid: str) -> BrewSessionController:
    # one log per session
    saved = registry.saved_log_id(sid)
    if saved is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"error": "already_saved", "log_id": saved},
        )
    return registry.get(sid)


def record_session_outcome(ctrl: BrewSessionController, req: OutcomeRequest, db: Session) -> str:
    """Blocking: writes the brew log."""
    if ctrl.is_saving or ctrl.saved_log_id is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"error": "already_saved", "log_id": ctrl.saved_log_id},
        )
    try:
        return ctrl.save_outcome(req.rating, req.taste_tag, req.note, log_store=BrewLogRepository(db))
    except BrewSessionError as e:
        raise to_http(e) from e


def release_saved(sid: str, log_id: str) -> OutcomeAck:
    registry.finish(sid, log_id)
    log.info("Session %s saved as log %s and released", sid, log_id)
    return OutcomeAck(ok=True, log_id=log_id)
