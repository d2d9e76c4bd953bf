# brewguide_backend/app/services/brew_session/timer.py
from __future__ import annotations

import asyncio
import heapq
import itertools
import logging
import time
from typing import Callable, List, Optional, Protocol, Tuple

from brewguide_backend.app.config import BREW_TICK_INTERVAL_S

# Purpose:
# Cancelable cooperative tick loop for the session countdown.
# - The clock is injected so tests can drive time by hand (ManualClock).
# - Each start() bumps a generation; a loop whose generation is stale never
#   ticks again, even if it wakes after being superseded.
# - Elapsed time is measured from clock deltas, not assumed from the interval.

log = logging.getLogger("brewguide.session.timer")

OnTick = Callable[[float], bool]   # returns True to stop the loop

_WAKE_TOLERANCE_S = 1e-9


class Clock(Protocol):
    def now(self) -> float: ...
    async def sleep(self, seconds: float) -> None: ...


class MonotonicClock:
    """Wall clock for real sessions."""

    def now(self) -> float:
        return time.monotonic()

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)


class ManualClock:
    """
    Virtual time. sleep() parks the caller until advance() moves time past its
    wake-up point; sleepers are released in wake order and the event loop is
    drained after each one so the woken coroutine runs before the next wake.
    Must be used from a single running event loop.
    """

    def __init__(self, start: float = 0.0) -> None:
        self._now = float(start)
        self._seq = itertools.count()
        self._sleepers: List[Tuple[float, int, asyncio.Future]] = []

    def now(self) -> float:
        return self._now

    async def sleep(self, seconds: float) -> None:
        fut = asyncio.get_running_loop().create_future()
        heapq.heappush(self._sleepers, (self._now + max(0.0, seconds), next(self._seq), fut))
        await fut

    @property
    def pending_sleepers(self) -> int:
        return sum(1 for _, _, f in self._sleepers if not f.done())

    async def advance(self, seconds: float) -> None:
        target = self._now + max(0.0, seconds)
        # let freshly spawned tasks reach their first sleep
        await self._drain()
        while self._sleepers:
            wake, _, fut = self._sleepers[0]
            if fut.done():
                heapq.heappop(self._sleepers)
                continue
            if wake > target + _WAKE_TOLERANCE_S:
                break
            heapq.heappop(self._sleepers)
            self._now = max(self._now, wake)
            fut.set_result(None)
            await self._drain()
        self._now = max(self._now, target)
        await self._drain()

    @staticmethod
    async def _drain(rounds: int = 3) -> None:
        for _ in range(rounds):
            await asyncio.sleep(0)


class TimerDriver:
    """
    One tick loop at a time. start() replaces any running loop; cancel()
    stops it. on_tick(elapsed_s) runs on the event loop thread and returns
    True when the countdown is done.
    """

    def __init__(self, clock: Optional[Clock] = None, interval_s: float = BREW_TICK_INTERVAL_S) -> None:
        if interval_s <= 0:
            raise ValueError("interval_s must be > 0")
        self.clock: Clock = clock or MonotonicClock()
        self.interval_s = float(interval_s)
        self._generation = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self, on_tick: OnTick) -> None:
        self.cancel()
        self._generation += 1
        gen = self._generation
        self._task = asyncio.get_running_loop().create_task(self._run(gen, on_tick))
        log.debug("Tick loop %d started (interval=%ss)", gen, self.interval_s)

    def cancel(self) -> None:
        self._generation += 1
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
            log.debug("Tick loop cancelled")

    async def _run(self, gen: int, on_tick: OnTick) -> None:
        last = self.clock.now()
        while gen == self._generation:
            await self.clock.sleep(self.interval_s)
            if gen != self._generation:
                return
            now = self.clock.now()
            elapsed, last = now - last, now
            if on_tick(elapsed):
                log.debug("Tick loop %d finished", gen)
                return


__all__ = ["Clock", "MonotonicClock", "ManualClock", "TimerDriver", "OnTick"]
