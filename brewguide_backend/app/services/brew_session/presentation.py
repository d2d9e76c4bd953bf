# brewguide_backend/app/services/brew_session/presentation.py
from __future__ import annotations

from typing import Optional

from brewguide_backend.app.schemas import BrewSessionState, BrewSessionUIState, ScaledStep, SessionPhase
from .state_machine import is_next_enabled, is_pause_resume_enabled


# ---- formatting helpers ----
def format_countdown(seconds: float) -> str:
    """m:ss, truncating fractional seconds (12.9 -> 0:12)."""
    whole = int(max(0.0, seconds))
    return "%d:%02d" % (whole // 60, whole % 60)


def format_water_line(step: ScaledStep) -> Optional[str]:
    if step.water_amount_g is None:
        return None
    label = "total" if step.is_cumulative_water_target else "pour"
    return "%.0f g %s" % (step.water_amount_g, label)


# ---- projection ----
def project(state: BrewSessionState) -> BrewSessionUIState:
    """Pure view of a session state; no side effects."""
    step = state.current_step
    return BrewSessionUIState(
        phase=state.phase,
        step_title=f"Step {state.current_step_index + 1} of {state.step_count}",
        instruction_text=step.instruction_text if step is not None else "",
        water_line=format_water_line(step) if step is not None else None,
        countdown_text=format_countdown(state.remaining_s) if state.remaining_s is not None else None,
        is_timer_visible=step is not None and step.timer_duration_s is not None,
        is_ready_to_advance=state.phase is SessionPhase.STEP_READY_TO_ADVANCE,
        is_next_enabled=is_next_enabled(state),
        is_pause_resume_enabled=is_pause_resume_enabled(state),
        primary_next_label="Finish" if state.is_last_step else "Next Step",
        primary_pause_resume_label="Pause" if state.phase is SessionPhase.ACTIVE else "Resume",
        progress=state.progress,
    )


__all__ = ["project", "format_countdown", "format_water_line"]
