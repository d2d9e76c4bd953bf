# brewguide_backend/app/services/brew_session/controller.py
from __future__ import annotations

import logging
from typing import Callable, List, Optional

from brewguide_backend.app.config import BREW_CONFIRM_BLOOM_POUR, BREW_TICK_INTERVAL_S
from brewguide_backend.app.schemas import (
    BrewPlan, BrewSessionState, BrewSessionUIState, SessionPhase, TasteTag, new_id,
)
from . import state_machine as sm
from .errors import BrewSessionError, SessionNotCompletedError
from .outcome import LogStore, record_outcome
from .presentation import project
from .timer import Clock, MonotonicClock, TimerDriver

# -----------------------------------------------------------------------------
# Logger
# -----------------------------------------------------------------------------
log = logging.getLogger("brewguide.session")
if not log.handlers:
    handler = logging.StreamHandler()
    log.addHandler(handler)
    log.setLevel(logging.INFO)


class BrewSessionController:
    """
    Single owner of one brew session.

    Holds the current BrewSessionState, applies the pure transitions from
    state_machine, and keeps the tick loop in step with the phase: the loop
    runs exactly while the phase is `active`. Intents that can start a
    countdown (on_appear, resume, next_step, restart, confirm_pour) must be
    called from inside the running event loop.
    """

    def __init__(
        self,
        plan: BrewPlan,
        *,
        clock: Optional[Clock] = None,
        interval_s: float = BREW_TICK_INTERVAL_S,
        confirm_bloom_pour: bool = BREW_CONFIRM_BLOOM_POUR,
        session_id: Optional[str] = None,
    ) -> None:
        self.session_id = session_id or new_id()
        self.clock: Clock = clock or MonotonicClock()
        self.confirm_bloom_pour = confirm_bloom_pour
        self._timer = TimerDriver(self.clock, interval_s)
        self._state = sm.initial_state(plan)
        self._listeners: List[Callable[[BrewSessionState], None]] = []

        self.error_banner: Optional[str] = None
        self.show_exit_confirmation = False
        self.is_saving = False
        self.saved_log_id: Optional[str] = None
        self.is_closed = False

    # ---- read side ----
    @property
    def state(self) -> BrewSessionState:
        return self._state

    @property
    def ui(self) -> BrewSessionUIState:
        return project(self._state)

    @property
    def is_completed(self) -> bool:
        return sm.is_completed(self._state)

    @property
    def is_next_enabled(self) -> bool:
        return sm.is_next_enabled(self._state)

    @property
    def is_pause_resume_enabled(self) -> bool:
        return sm.is_pause_resume_enabled(self._state)

    @property
    def is_timer_running(self) -> bool:
        return self._timer.is_running

    @property
    def elapsed_s(self) -> Optional[float]:
        return self._state.elapsed_s(self.clock.now())

    def subscribe(self, listener: Callable[[BrewSessionState], None]) -> None:
        """listener(state) after every change, ticks included."""
        self._listeners.append(listener)

    # ---- internals ----
    def _set_state(self, new_state: BrewSessionState) -> None:
        if new_state is self._state:
            return
        self._state = new_state
        for listener in list(self._listeners):
            listener(new_state)

    def _apply(self, new_state: BrewSessionState, *, restart_timer: bool = False) -> None:
        if self.is_closed:
            log.warning("Session %s is closed; ignoring intent", self.session_id)
            return
        before = self._state
        if new_state is before:
            # rejected intent: leave the running loop alone
            return
        self._set_state(new_state)
        if new_state.phase is SessionPhase.ACTIVE:
            if restart_timer or before.phase is not SessionPhase.ACTIVE or not self._timer.is_running:
                self._timer.start(self._on_tick)
        else:
            self._timer.cancel()

    def _on_tick(self, elapsed_s: float) -> bool:
        self._set_state(sm.tick(self._state, elapsed_s))
        return self._state.phase is not SessionPhase.ACTIVE

    # ---- intents ----
    def on_appear(self) -> None:
        log.info("Brew session %s started with %d steps", self.session_id, self._state.step_count)
        self._apply(
            sm.start_step_if_needed(self._state, self.clock.now(), confirm_bloom_pour=self.confirm_bloom_pour),
            restart_timer=True,
        )

    def pause(self) -> None:
        self._apply(sm.pause(self._state))

    def resume(self) -> None:
        self._apply(sm.resume(self._state))

    def toggle_pause_resume(self) -> None:
        phase = self._state.phase
        if phase is SessionPhase.ACTIVE:
            self.pause()
        elif phase is SessionPhase.PAUSED:
            self.resume()
        else:
            log.warning("toggle_pause_resume called in invalid phase: %s", phase.value)

    def confirm_pour(self) -> None:
        self._apply(sm.confirm_pour(self._state, self.clock.now()), restart_timer=True)

    def next_step(self) -> None:
        self._apply(
            sm.next_step(self._state, self.clock.now(), confirm_bloom_pour=self.confirm_bloom_pour),
            restart_timer=True,
        )

    def restart(self) -> None:
        self._apply(
            sm.restart(self._state, self.clock.now(), confirm_bloom_pour=self.confirm_bloom_pour),
            restart_timer=True,
        )

    def handle_scene_phase_change(self, is_active: bool) -> None:
        # coming back to the foreground never auto-resumes
        if not is_active:
            self._apply(sm.background(self._state))

    def request_exit(self) -> bool:
        """True when the caller must confirm before exit() (brew still running)."""
        if self.is_completed:
            return False
        self.show_exit_confirmation = True
        return True

    def exit(self) -> None:
        log.info("Exit confirmed - cancelling timer for session %s", self.session_id)
        self._timer.cancel()
        self.show_exit_confirmation = False
        self.is_closed = True

    # ---- outcome ----
    def save_outcome(
        self,
        rating: int,
        taste_tag: Optional[TasteTag] = None,
        note: Optional[str] = None,
        *,
        log_store: LogStore,
        timestamp: Optional[float] = None,
    ) -> str:
        """
        Record the brew once the session is completed. On failure the phase
        stays `completed` and error_banner carries the message so the user
        can retry.
        """
        if not self.is_completed:
            raise SessionNotCompletedError()

        self.is_saving = True
        try:
            log_id = record_outcome(
                self._state.plan.inputs, rating, taste_tag, note,
                log_store=log_store, timestamp=timestamp,
            )
        except BrewSessionError as e:
            self.error_banner = str(e)
            log.warning("Saving brew outcome failed: %s", e)
            raise
        finally:
            self.is_saving = False

        self.error_banner = None
        self.saved_log_id = log_id
        return log_id


__all__ = ["BrewSessionController"]
