import asyncio

import pytest

from brewguide_backend.app.services.brew_session.timer import ManualClock, TimerDriver


def test_ticks_follow_virtual_time():
    async def scenario():
        clock = ManualClock()
        driver = TimerDriver(clock, interval_s=0.1)
        seen = []
        driver.start(lambda dt: seen.append(dt) or False)
        await clock.advance(1.0)
        driver.cancel()
        return seen

    seen = asyncio.run(scenario())
    assert len(seen) == 10
    assert sum(seen) == pytest.approx(1.0)
    assert all(dt == pytest.approx(0.1) for dt in seen)


def test_cancel_stops_ticks():
    async def scenario():
        clock = ManualClock()
        driver = TimerDriver(clock, interval_s=0.1)
        seen = []
        driver.start(lambda dt: seen.append(dt) or False)
        await clock.advance(0.35)
        driver.cancel()
        await clock.advance(2.0)
        return seen, driver.is_running, clock.pending_sleepers

    seen, running, pending = asyncio.run(scenario())
    assert len(seen) == 3
    assert running is False
    assert pending == 0


def test_restart_supersedes_previous_loop():
    async def scenario():
        clock = ManualClock()
        driver = TimerDriver(clock, interval_s=0.1)
        first, second = [], []
        driver.start(lambda dt: first.append(dt) or False)
        await clock.advance(0.25)
        gen_before = driver.generation
        driver.start(lambda dt: second.append(dt) or False)
        await clock.advance(0.25)
        driver.cancel()
        return first, second, gen_before, driver.generation

    first, second, gen_before, gen_after = asyncio.run(scenario())
    assert len(first) == 2
    assert len(second) == 2
    # elapsed is measured from the new loop's own start
    assert all(dt == pytest.approx(0.1) for dt in second)
    assert gen_after > gen_before


def test_loop_ends_when_callback_says_done():
    async def scenario():
        clock = ManualClock()
        driver = TimerDriver(clock, interval_s=0.5)
        seen = []

        def on_tick(dt):
            seen.append(dt)
            return len(seen) == 3

        driver.start(on_tick)
        await clock.advance(5.0)
        return seen, driver.is_running

    seen, running = asyncio.run(scenario())
    assert len(seen) == 3
    assert running is False


def test_cancel_before_first_tick_never_ticks():
    async def scenario():
        driver = TimerDriver(ManualClock(), interval_s=0.1)
        seen = []
        driver.start(lambda dt: seen.append(dt) or False)
        driver.cancel()
        await asyncio.sleep(0)
        return seen, driver.is_running

    assert asyncio.run(scenario()) == ([], False)


def test_manual_clock_never_goes_backwards():
    async def scenario():
        clock = ManualClock(start=5.0)
        await clock.advance(-3.0)
        await clock.advance(1.5)
        return clock.now()

    assert asyncio.run(scenario()) == 6.5


def test_interval_must_be_positive():
    with pytest.raises(ValueError):
        TimerDriver(ManualClock(), interval_s=0)
