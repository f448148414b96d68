"""Periodic refresh scheduler.

States:

    IDLE      -- no timer armed
    SCHEDULED -- a fixed-rate timer fires every ``interval`` minutes
    SHUTDOWN  -- terminal; no further ticks or triggers

``configure()`` cancels the current timer without waiting for it and arms a
new one whose first tick comes one full interval later.  Each tick (and each
manual trigger) runs the cycle in its own task: a failure is logged and
written to the status channel, and the timer keeps running.  A cycle that
was already in flight when the timer is replaced may still complete and
publish.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from enum import StrEnum

from spacewx.config import validate_refresh_minutes
from spacewx.engine.store import StateStore
from spacewx.errors import RefreshError
from spacewx.observability.logging import get_logger
from spacewx.observability.metrics import refresh_cycles_total

_log = get_logger("engine.scheduler")

CycleFn = Callable[[], Awaitable[object]]


class SchedulerState(StrEnum):
    IDLE = "idle"
    SCHEDULED = "scheduled"
    SHUTDOWN = "shutdown"


class RefreshScheduler:
    """Drives refresh cycles on a fixed interval and on demand.

    Args:
        run_cycle:          Coroutine function running one full cycle.
        store:              Status channel for failures the cycle itself did not report.
        seconds_per_minute: Length of one interval unit; tests shrink it.
    """

    def __init__(
        self,
        run_cycle: CycleFn,
        store: StateStore | None = None,
        seconds_per_minute: float = 60.0,
    ) -> None:
        self._run_cycle = run_cycle
        self._store = store
        self._seconds_per_minute = seconds_per_minute
        self._state = SchedulerState.IDLE
        self._interval_minutes: int | None = None
        self._timer: asyncio.Task[None] | None = None
        self._inflight: set[asyncio.Task[None]] = set()
        self._ticks = 0

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def interval_minutes(self) -> int | None:
        return self._interval_minutes

    @property
    def ticks(self) -> int:
        """Number of timer ticks fired since construction."""
        return self._ticks

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def configure(self, interval_minutes: int) -> None:
        """(Re)arm the periodic timer. Must be called from the event loop.

        Raises:
            InvalidIntervalError: interval outside 5-60; the current timer is kept.
            RuntimeError: the scheduler was shut down.
        """
        if self._state is SchedulerState.SHUTDOWN:
            raise RuntimeError("scheduler is shut down")
        validate_refresh_minutes(interval_minutes)

        self._cancel_timer()
        period = interval_minutes * self._seconds_per_minute
        self._timer = asyncio.create_task(self._timer_loop(period), name="refresh-timer")
        self._interval_minutes = interval_minutes
        self._state = SchedulerState.SCHEDULED
        _log.info("scheduler_configured", interval_minutes=interval_minutes)

    def manual_trigger(self) -> asyncio.Task[None]:
        """Start a cycle now; the periodic timer is not reset."""
        if self._state is SchedulerState.SHUTDOWN:
            raise RuntimeError("scheduler is shut down")
        _log.info("manual_refresh_triggered")
        return self._launch("manual")

    async def shutdown(self) -> None:
        """Cancel the timer and any in-flight cycles. Terminal."""
        if self._state is SchedulerState.SHUTDOWN:
            return
        self._state = SchedulerState.SHUTDOWN
        self._cancel_timer()
        pending = list(self._inflight)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        self._inflight.clear()
        _log.info("scheduler_shutdown")

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _cancel_timer(self) -> None:
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None

    async def _timer_loop(self, period: float) -> None:
        loop = asyncio.get_running_loop()
        next_at = loop.time() + period
        while True:
            await asyncio.sleep(max(0.0, next_at - loop.time()))
            next_at += period
            self._ticks += 1
            self._launch("tick")

    def _launch(self, trigger: str) -> asyncio.Task[None]:
        task = asyncio.create_task(self._guarded_cycle(trigger), name=f"refresh-{trigger}")
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)
        return task

    async def _guarded_cycle(self, trigger: str) -> None:
        try:
            await self._run_cycle()
        except asyncio.CancelledError:
            raise
        except RefreshError as exc:
            # Already reported on the status channel by the pipeline.
            _log.warning("refresh_cycle_failed", trigger=trigger, error=str(exc))
        except Exception as exc:
            refresh_cycles_total.labels(outcome="error").inc()
            _log.error("refresh_cycle_error", trigger=trigger, error=str(exc), exc_info=True)
            if self._store is not None:
                await self._store.set_status(f"Error: {exc}")
