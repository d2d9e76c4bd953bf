# brewguide_backend/app/services/brew_session/state_machine.py
from __future__ import annotations

import logging
from typing import Optional

from brewguide_backend.app.schemas import BrewPlan, BrewSessionState, SessionPhase, StepKind

# Purpose:
# Pure transition functions for one brew session. Every function takes a
# BrewSessionState and returns the next one (or the same instance when the
# intent is not valid in the current phase). No timers, no clocks: callers
# pass `now` (for the session-wide start stamp) and elapsed seconds (for ticks).
#
#   not_started --(timed step)--> active <--> paused
#        |                          |
#        |                     tick to 0
#        v                          v
#   step_ready_to_advance <---------+
#        |
#   next_step: last step -> completed, else index+1 -> not_started -> auto-start
#
# awaiting_pour_confirmation is only used for bloom steps when the caller asks
# for an explicit "pour done" before the bloom countdown runs.

log = logging.getLogger("brewguide.session.state")

# Countdowns built from 0.1 s ticks drift by float error; anything this close
# to zero counts as done.
READY_EPSILON_S = 1e-6

__all__ = [
    "READY_EPSILON_S",
    "initial_state", "start_step_if_needed", "confirm_pour",
    "pause", "resume", "tick", "next_step", "restart", "background",
    "is_next_enabled", "is_pause_resume_enabled", "is_completed", "is_timed_step",
]


def initial_state(plan: BrewPlan) -> BrewSessionState:
    return BrewSessionState(
        plan=plan,
        phase=SessionPhase.NOT_STARTED,
        current_step_index=0,
        remaining_s=None,
        started_at=None,
        inputs_locked=True,
    )


def _step_duration(state: BrewSessionState) -> Optional[float]:
    step = state.current_step
    return step.timer_duration_s if step is not None else None


def is_timed_step(state: BrewSessionState) -> bool:
    return _step_duration(state) is not None


def _begin_countdown(state: BrewSessionState, duration: float, now: float) -> BrewSessionState:
    # started_at is stamped once per session, on the first timer start
    started_at = state.started_at if state.started_at is not None else now
    log.info("Starting timer for step %d: %ss", state.current_step_index + 1, duration)
    return state.model_copy(update={
        "phase": SessionPhase.ACTIVE,
        "remaining_s": float(duration),
        "started_at": started_at,
    })


# ---- auto-start on entry ----
def start_step_if_needed(state: BrewSessionState, now: float, *, confirm_bloom_pour: bool = False) -> BrewSessionState:
    """
    Applied whenever a step is entered in `not_started`: untimed steps are
    immediately ready, timed steps start counting down.
    """
    if state.phase is not SessionPhase.NOT_STARTED:
        return state
    if state.current_step is None:
        return state

    duration = _step_duration(state)
    if duration is None or duration <= 0:
        log.debug("Step %d has no timer - ready immediately", state.current_step_index + 1)
        return state.model_copy(update={"phase": SessionPhase.STEP_READY_TO_ADVANCE})

    if confirm_bloom_pour and state.current_step.step_kind is StepKind.BLOOM:
        log.debug("Step %d waits for bloom pour confirmation", state.current_step_index + 1)
        return state.model_copy(update={
            "phase": SessionPhase.AWAITING_POUR_CONFIRMATION,
            "remaining_s": float(duration),
        })

    return _begin_countdown(state, duration, now)


def confirm_pour(state: BrewSessionState, now: float) -> BrewSessionState:
    if state.phase is not SessionPhase.AWAITING_POUR_CONFIRMATION:
        log.warning("confirm_pour called in invalid phase: %s", state.phase.value)
        return state
    duration = state.remaining_s if state.remaining_s is not None else _step_duration(state)
    if duration is None or duration <= 0:
        return state.model_copy(update={"phase": SessionPhase.STEP_READY_TO_ADVANCE, "remaining_s": None})
    return _begin_countdown(state, duration, now)


# ---- timer control ----
def pause(state: BrewSessionState) -> BrewSessionState:
    if state.phase is not SessionPhase.ACTIVE:
        log.warning("pause called in invalid phase: %s", state.phase.value)
        return state
    log.debug("Timer paused at %ss remaining", state.remaining_s)
    return state.model_copy(update={"phase": SessionPhase.PAUSED})


def resume(state: BrewSessionState) -> BrewSessionState:
    if state.phase is not SessionPhase.PAUSED or state.remaining_s is None:
        log.warning("resume called in invalid phase: %s", state.phase.value)
        return state
    log.debug("Timer resumed at %ss remaining", state.remaining_s)
    return state.model_copy(update={"phase": SessionPhase.ACTIVE})


def tick(state: BrewSessionState, elapsed_s: float) -> BrewSessionState:
    """Count down by `elapsed_s`, floored at 0; reaching 0 makes the step ready."""
    if state.phase is not SessionPhase.ACTIVE or state.remaining_s is None:
        return state
    remaining = max(0.0, state.remaining_s - max(0.0, elapsed_s))
    if remaining <= READY_EPSILON_S:
        log.info("Timer reached 0 for step %d", state.current_step_index + 1)
        return state.model_copy(update={"phase": SessionPhase.STEP_READY_TO_ADVANCE, "remaining_s": 0.0})
    return state.model_copy(update={"remaining_s": remaining})


def background(state: BrewSessionState) -> BrewSessionState:
    """App went to the background: a running countdown must not expire unobserved."""
    if state.phase is SessionPhase.ACTIVE:
        log.info("App backgrounded - pausing timer")
        return pause(state)
    return state


# ---- step navigation ----
def next_step(state: BrewSessionState, now: float, *, confirm_bloom_pour: bool = False) -> BrewSessionState:
    if state.phase is SessionPhase.COMPLETED:
        return state
    if not is_next_enabled(state):
        log.warning("next_step called before step %d is ready (phase=%s)",
                    state.current_step_index + 1, state.phase.value)
        return state

    if state.is_last_step:
        log.info("Brew session completed")
        return state.model_copy(update={"phase": SessionPhase.COMPLETED, "remaining_s": None})

    entered = state.model_copy(update={
        "current_step_index": state.current_step_index + 1,
        "phase": SessionPhase.NOT_STARTED,
        "remaining_s": None,
    })
    log.info("Advanced to step %d", entered.current_step_index + 1)
    return start_step_if_needed(entered, now, confirm_bloom_pour=confirm_bloom_pour)


def restart(state: BrewSessionState, now: float, *, confirm_bloom_pour: bool = False) -> BrewSessionState:
    # completed is terminal; a finished brew is saved or discarded, not rerun
    if state.phase is SessionPhase.COMPLETED:
        log.warning("restart called on a completed session")
        return state
    log.info("Restarting brew session")
    fresh = state.model_copy(update={
        "current_step_index": 0,
        "phase": SessionPhase.NOT_STARTED,
        "remaining_s": None,
        "started_at": None,
    })
    return start_step_if_needed(fresh, now, confirm_bloom_pour=confirm_bloom_pour)


# ---- read-only predicates ----
def is_next_enabled(state: BrewSessionState) -> bool:
    if state.current_step is None:
        return False
    if not is_timed_step(state):
        return True
    return state.phase is SessionPhase.STEP_READY_TO_ADVANCE


def is_pause_resume_enabled(state: BrewSessionState) -> bool:
    if not is_timed_step(state):
        return False
    return state.phase in (SessionPhase.ACTIVE, SessionPhase.PAUSED)


def is_completed(state: BrewSessionState) -> bool:
    return state.phase is SessionPhase.COMPLETED
