# src/consistency_calendar/tasks/rollover.py

from __future__ import annotations

"""
Day rollover timer.

Sleeps until the next local midnight, tells the view layer the day changed,
then re-arms itself. It never mutates stored state: the callback is expected
to re-derive whatever it shows (today's list, stats, daily message).

To stop the timer, cancel the coroutine/task (or use DayRolloverTimer.stop()).
"""

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime, time, timedelta

from ..core.ports import Clock, SystemClock
from .date_keys import local_date_key

logger = logging.getLogger(__name__)

RolloverCallback = Callable[[str], None]
SleepFn = Callable[[float], Awaitable[None]]


def next_local_midnight(now: datetime) -> datetime:
    if now.tzinfo is None:
        return datetime.combine(now.date() + timedelta(days=1), time.min)
    tomorrow = now.astimezone().date() + timedelta(days=1)
    # Resolve the offset at midnight itself (it may differ from now's across DST).
    return datetime.combine(tomorrow, time.min).astimezone()


def seconds_until_next_midnight(now: datetime) -> float:
    return max(0.0, (next_local_midnight(now) - now).total_seconds())


async def run_day_rollover(
        on_rollover: RolloverCallback,
        *,
        clock: Clock | None = None,
        sleep: SleepFn = asyncio.sleep,
        margin_seconds: float = 0.5,
) -> None:
    """
    Rollover loop.

    Each iteration sleeps until just past the next local midnight. The callback
    only fires when the local date key actually changed, so an early wake-up
    (clock adjustments, DST) just re-arms.
    """
    clock = clock or SystemClock()
    margin = max(0.0, float(margin_seconds))
    last_key = local_date_key(clock.now())

    while True:
        delay = seconds_until_next_midnight(clock.now()) + margin
        logger.debug("Day rollover armed in %.1fs (last=%s)", delay, last_key)
        await sleep(delay)

        key = local_date_key(clock.now())
        if key == last_key:
            continue
        last_key = key

        logger.info("Local day rolled over to %s", key)
        try:
            on_rollover(key)
        except Exception:
            logger.exception("Day rollover callback failed day=%s", key)


class DayRolloverTimer:
    """
    Start/stop wrapper around run_day_rollover().

    start() replaces any running timer, so re-initialization never leaves two
    timers armed. fire_now() runs the callback immediately for the current day.
    """

    def __init__(
        self,
        on_rollover: RolloverCallback,
        *,
        clock: Clock | None = None,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self._on_rollover = on_rollover
        self._clock: Clock = clock or SystemClock()
        self._sleep = sleep
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> asyncio.Task[None]:
        """Arm the timer on the running event loop."""
        self.stop()
        self._task = asyncio.get_running_loop().create_task(
            run_day_rollover(self._on_rollover, clock=self._clock, sleep=self._sleep),
            name="day-rollover",
        )
        return self._task

    def stop(self) -> None:
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()

    async def aclose(self) -> None:
        task = self._task
        self.stop()
        if task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await task

    def fire_now(self) -> str:
        key = local_date_key(self._clock.now())
        self._on_rollover(key)
        return key
