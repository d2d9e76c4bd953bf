import asyncio

import pytest

from brewguide_backend.app.schemas import SessionPhase, StepKind, TasteTag
from brewguide_backend.app.services.brew_session.controller import BrewSessionController
from brewguide_backend.app.services.brew_session.errors import (
    BrewLogValidationError, PersistenceError, SessionNotCompletedError,
)
from brewguide_backend.app.services.brew_session.timer import ManualClock


class FakeLogStore:
    def __init__(self, fail: bool = False):
        self.entries = []
        self.saves = 0
        self.fail = fail

    def insert(self, entry):
        self.entries.append(entry)

    def save(self):
        if self.fail:
            raise PersistenceError()
        self.saves += 1


def _controller(plan, clock, **kw):
    kw.setdefault("confirm_bloom_pour", False)
    return BrewSessionController(plan, clock=clock, interval_s=0.1, **kw)


async def _walk_to_completion(c, clock):
    while not c.is_completed:
        if c.state.phase is SessionPhase.ACTIVE:
            await clock.advance(c.state.remaining_s + 0.05)
        c.next_step()


def test_full_session_with_pause_and_resume(balanced_plan):
    async def scenario():
        clock = ManualClock()
        c = _controller(balanced_plan, clock)
        c.on_appear()
        assert c.state.phase is SessionPhase.STEP_READY_TO_ADVANCE
        assert not c.is_timer_running

        c.next_step()
        c.next_step()
        assert c.state.current_step.step_kind is StepKind.BLOOM
        assert c.state.phase is SessionPhase.ACTIVE
        assert c.is_timer_running
        assert c.ui.countdown_text == "0:45"

        await clock.advance(10.0)
        assert c.state.remaining_s == pytest.approx(35.0)

        c.pause()
        assert not c.is_timer_running
        await clock.advance(30.0)
        assert c.state.phase is SessionPhase.PAUSED
        assert c.state.remaining_s == pytest.approx(35.0)

        c.resume()
        assert c.is_timer_running
        await clock.advance(35.0)
        assert c.state.phase is SessionPhase.STEP_READY_TO_ADVANCE
        assert c.state.remaining_s == 0.0
        assert not c.is_timer_running
        assert c.elapsed_s == pytest.approx(75.0)

        await _walk_to_completion(c, clock)
        return c

    c = asyncio.run(scenario())
    assert c.is_completed
    assert c.state.remaining_s is None
    assert not c.is_timer_running


def test_next_step_during_countdown_is_ignored(balanced_plan):
    async def scenario():
        clock = ManualClock()
        c = _controller(balanced_plan, clock)
        c.on_appear()
        c.next_step()
        c.next_step()
        before = c.state
        c.next_step()
        still = c.state
        await clock.advance(1.0)
        return before, still, c

    before, still, c = asyncio.run(scenario())
    assert still is before
    assert c.state.current_step_index == 2
    assert c.state.remaining_s == pytest.approx(44.0)


def test_restart_cancels_running_countdown(balanced_plan):
    async def scenario():
        clock = ManualClock()
        c = _controller(balanced_plan, clock)
        c.on_appear()
        c.next_step()
        c.next_step()
        await clock.advance(5.0)
        c.restart()
        snapshot = c.state
        await clock.advance(10.0)
        return snapshot, c

    snapshot, c = asyncio.run(scenario())
    assert snapshot.current_step_index == 0
    assert snapshot.phase is SessionPhase.STEP_READY_TO_ADVANCE
    assert snapshot.started_at is None
    assert c.state is snapshot
    assert not c.is_timer_running


def test_backgrounding_pauses_and_foreground_does_not_resume(balanced_plan):
    async def scenario():
        clock = ManualClock()
        c = _controller(balanced_plan, clock)
        c.on_appear()
        c.next_step()
        c.next_step()
        await clock.advance(3.0)
        c.handle_scene_phase_change(False)
        await clock.advance(20.0)
        c.handle_scene_phase_change(True)
        await clock.advance(20.0)
        return c

    c = asyncio.run(scenario())
    assert c.state.phase is SessionPhase.PAUSED
    assert c.state.remaining_s == pytest.approx(42.0)


def test_toggle_pause_resume(balanced_plan):
    async def scenario():
        clock = ManualClock()
        c = _controller(balanced_plan, clock)
        c.on_appear()
        c.toggle_pause_resume()          # untimed step: nothing to toggle
        first = c.state.phase
        c.next_step()
        c.next_step()
        c.toggle_pause_resume()
        second = c.state.phase
        c.toggle_pause_resume()
        third = c.state.phase
        c.exit()
        return first, second, third

    assert asyncio.run(scenario()) == (
        SessionPhase.STEP_READY_TO_ADVANCE, SessionPhase.PAUSED, SessionPhase.ACTIVE,
    )


def test_bloom_confirmation_flow(balanced_plan):
    async def scenario():
        clock = ManualClock()
        c = _controller(balanced_plan, clock, confirm_bloom_pour=True)
        c.on_appear()
        c.next_step()
        c.next_step()
        waiting = c.state.phase
        running_while_waiting = c.is_timer_running
        await clock.advance(10.0)
        c.confirm_pour()
        await clock.advance(5.0)
        return waiting, running_while_waiting, c

    waiting, running_while_waiting, c = asyncio.run(scenario())
    assert waiting is SessionPhase.AWAITING_POUR_CONFIRMATION
    assert running_while_waiting is False
    assert c.state.phase is SessionPhase.ACTIVE
    assert c.state.remaining_s == pytest.approx(40.0)
    assert c.state.started_at == pytest.approx(10.0)


def test_listeners_see_every_change(balanced_plan):
    async def scenario():
        clock = ManualClock()
        c = _controller(balanced_plan, clock)
        phases = []
        c.subscribe(lambda s: phases.append(s.phase))
        c.on_appear()
        c.next_step()
        c.next_step()
        await clock.advance(0.3)
        c.exit()
        return phases

    phases = asyncio.run(scenario())
    assert phases[:3] == [
        SessionPhase.STEP_READY_TO_ADVANCE, SessionPhase.STEP_READY_TO_ADVANCE, SessionPhase.ACTIVE,
    ]
    # three ticks
    assert phases[3:] == [SessionPhase.ACTIVE] * 3


def test_exit_requires_confirmation_until_completed(balanced_plan):
    async def scenario():
        clock = ManualClock()
        c = _controller(balanced_plan, clock)
        c.on_appear()
        c.next_step()
        c.next_step()
        needs_confirm = c.request_exit()
        flag = c.show_exit_confirmation
        c.exit()
        frozen = c.state
        c.next_step()
        c.resume()
        await clock.advance(60.0)
        return needs_confirm, flag, frozen, c

    needs_confirm, flag, frozen, c = asyncio.run(scenario())
    assert needs_confirm is True
    assert flag is True
    assert c.is_closed
    assert not c.show_exit_confirmation
    assert c.state is frozen
    assert not c.is_timer_running


def test_completed_session_exits_without_confirmation(balanced_plan):
    async def scenario():
        clock = ManualClock()
        c = _controller(balanced_plan, clock)
        c.on_appear()
        await _walk_to_completion(c, clock)
        return c.request_exit()

    assert asyncio.run(scenario()) is False


def test_save_outcome_requires_completed_session(balanced_plan):
    c = BrewSessionController(balanced_plan, clock=ManualClock(), confirm_bloom_pour=False)
    store = FakeLogStore()
    with pytest.raises(SessionNotCompletedError):
        c.save_outcome(4, log_store=store)
    assert store.entries == []


def test_save_outcome_records_confirmed_inputs(balanced_plan):
    async def scenario():
        clock = ManualClock()
        c = _controller(balanced_plan, clock)
        c.on_appear()
        await _walk_to_completion(c, clock)
        return c

    c = asyncio.run(scenario())
    store = FakeLogStore()
    log_id = c.save_outcome(4, TasteTag.TOO_SOUR, "  bright  ", log_store=store, timestamp=1700000000.0)

    assert store.saves == 1
    (entry,) = store.entries
    assert entry.id == log_id == c.saved_log_id
    assert entry.rating == 4
    assert entry.taste_tag is TasteTag.TOO_SOUR
    assert entry.note == "  bright  "
    assert entry.dose_g == 15.0 and entry.yield_g == 250.0
    assert entry.recipe_name_at_brew == "V60 Balanced"
    assert entry.timestamp == 1700000000.0
    assert c.is_completed
    assert not c.is_saving


def test_save_failure_keeps_completed_and_sets_banner(balanced_plan):
    async def scenario():
        clock = ManualClock()
        c = _controller(balanced_plan, clock)
        c.on_appear()
        await _walk_to_completion(c, clock)
        return c

    c = asyncio.run(scenario())
    with pytest.raises(PersistenceError):
        c.save_outcome(5, log_store=FakeLogStore(fail=True))
    assert c.is_completed
    assert c.error_banner == PersistenceError.message
    assert c.saved_log_id is None

    # retry succeeds and clears the banner
    good = FakeLogStore()
    c.save_outcome(5, log_store=good)
    assert c.error_banner is None
    assert len(good.entries) == 1


def test_invalid_rating_writes_nothing(balanced_plan):
    async def scenario():
        clock = ManualClock()
        c = _controller(balanced_plan, clock)
        c.on_appear()
        await _walk_to_completion(c, clock)
        return c

    c = asyncio.run(scenario())
    store = FakeLogStore()
    with pytest.raises(BrewLogValidationError):
        c.save_outcome(0, log_store=store)
    assert store.entries == []
    assert "Rating" in c.error_banner
