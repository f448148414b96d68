"""Integration tests for the refresh scheduler state machine.

One interval "minute" is shrunk to a few milliseconds so the tests can
observe several ticks quickly.
"""

from __future__ import annotations

import asyncio

import pytest

from spacewx.engine.scheduler import RefreshScheduler, SchedulerState
from spacewx.engine.store import StateStore
from spacewx.errors import FeedTransportError, InvalidIntervalError, RefreshError

# 5 "minutes" (the minimum interval) == 50 ms
_UNIT = 0.01


class _Counter:
    def __init__(self, fail_with: Exception | None = None, delay: float = 0.0) -> None:
        self.calls = 0
        self.fail_with = fail_with
        self.delay = delay

    async def __call__(self) -> None:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail_with is not None:
            raise self.fail_with


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------


class TestStates:
    async def test_initially_idle(self) -> None:
        scheduler = RefreshScheduler(run_cycle=_Counter(), seconds_per_minute=_UNIT)
        assert scheduler.state is SchedulerState.IDLE
        assert scheduler.interval_minutes is None

    async def test_configure_arms_timer(self) -> None:
        scheduler = RefreshScheduler(run_cycle=_Counter(), seconds_per_minute=_UNIT)
        scheduler.configure(5)
        try:
            assert scheduler.state is SchedulerState.SCHEDULED
            assert scheduler.interval_minutes == 5
        finally:
            await scheduler.shutdown()

    async def test_invalid_interval_keeps_previous_schedule(self) -> None:
        scheduler = RefreshScheduler(run_cycle=_Counter(), seconds_per_minute=_UNIT)
        scheduler.configure(10)
        try:
            with pytest.raises(InvalidIntervalError):
                scheduler.configure(61)
            assert scheduler.interval_minutes == 10
            assert scheduler.state is SchedulerState.SCHEDULED
        finally:
            await scheduler.shutdown()

    async def test_shutdown_is_terminal(self) -> None:
        scheduler = RefreshScheduler(run_cycle=_Counter(), seconds_per_minute=_UNIT)
        scheduler.configure(5)
        await scheduler.shutdown()
        assert scheduler.state is SchedulerState.SHUTDOWN
        with pytest.raises(RuntimeError):
            scheduler.configure(5)
        with pytest.raises(RuntimeError):
            scheduler.manual_trigger()
        await scheduler.shutdown()  # idempotent


# ---------------------------------------------------------------------------
# Ticks
# ---------------------------------------------------------------------------


class TestTicks:
    async def test_no_immediate_tick(self) -> None:
        cycle = _Counter()
        scheduler = RefreshScheduler(run_cycle=cycle, seconds_per_minute=_UNIT)
        scheduler.configure(5)
        await asyncio.sleep(0.02)
        try:
            assert cycle.calls == 0
        finally:
            await scheduler.shutdown()

    async def test_ticks_repeat(self) -> None:
        cycle = _Counter()
        scheduler = RefreshScheduler(run_cycle=cycle, seconds_per_minute=_UNIT)
        scheduler.configure(5)
        await asyncio.sleep(0.18)
        await scheduler.shutdown()
        assert cycle.calls >= 2

    async def test_failed_cycles_do_not_stop_timer(self) -> None:
        cycle = _Counter(fail_with=RefreshError([FeedTransportError("FLR", "HTTP 500")]))
        scheduler = RefreshScheduler(run_cycle=cycle, seconds_per_minute=_UNIT)
        scheduler.configure(5)
        await asyncio.sleep(0.18)
        try:
            assert cycle.calls >= 2
            assert scheduler.state is SchedulerState.SCHEDULED
        finally:
            await scheduler.shutdown()

    async def test_unexpected_error_reported_on_status_channel(self) -> None:
        store = StateStore()
        cycle = _Counter(fail_with=KeyError("boom"))
        scheduler = RefreshScheduler(run_cycle=cycle, store=store, seconds_per_minute=_UNIT)
        task = scheduler.manual_trigger()
        await task
        assert store.status == "Error: 'boom'"
        await scheduler.shutdown()

    async def test_reconfigure_cancels_old_cadence(self) -> None:
        cycle = _Counter()
        scheduler = RefreshScheduler(run_cycle=cycle, seconds_per_minute=_UNIT)
        scheduler.configure(5)  # every 50 ms
        await asyncio.sleep(0.01)
        scheduler.configure(60)  # every 600 ms
        await asyncio.sleep(0.2)
        try:
            assert cycle.calls == 0
            assert scheduler.ticks == 0
            assert scheduler.interval_minutes == 60
        finally:
            await scheduler.shutdown()

    async def test_no_ticks_after_shutdown(self) -> None:
        cycle = _Counter()
        scheduler = RefreshScheduler(run_cycle=cycle, seconds_per_minute=_UNIT)
        scheduler.configure(5)
        await asyncio.sleep(0.07)
        await scheduler.shutdown()
        calls = cycle.calls
        await asyncio.sleep(0.15)
        assert cycle.calls == calls


# ---------------------------------------------------------------------------
# Manual trigger
# ---------------------------------------------------------------------------


class TestManualTrigger:
    async def test_runs_immediately_without_timer(self) -> None:
        cycle = _Counter()
        scheduler = RefreshScheduler(run_cycle=cycle, seconds_per_minute=_UNIT)
        await scheduler.manual_trigger()
        assert cycle.calls == 1
        assert scheduler.state is SchedulerState.IDLE
        await scheduler.shutdown()

    async def test_does_not_reset_timer(self) -> None:
        cycle = _Counter()
        scheduler = RefreshScheduler(run_cycle=cycle, seconds_per_minute=_UNIT)
        scheduler.configure(5)  # first tick at ~50 ms
        await asyncio.sleep(0.03)
        await scheduler.manual_trigger()
        await asyncio.sleep(0.045)  # ~75 ms: the first scheduled tick has fired
        try:
            assert scheduler.ticks == 1
            assert cycle.calls == 2
        finally:
            await scheduler.shutdown()

    async def test_in_flight_cycle_survives_reconfigure(self) -> None:
        cycle = _Counter(delay=0.05)
        scheduler = RefreshScheduler(run_cycle=cycle, seconds_per_minute=_UNIT)
        scheduler.configure(5)
        task = scheduler.manual_trigger()
        scheduler.configure(30)
        await task
        assert not task.cancelled()
        await scheduler.shutdown()

    async def test_shutdown_cancels_in_flight(self) -> None:
        cycle = _Counter(delay=5.0)
        scheduler = RefreshScheduler(run_cycle=cycle, seconds_per_minute=_UNIT)
        task = scheduler.manual_trigger()
        await asyncio.sleep(0)
        await scheduler.shutdown()
        assert task.cancelled()
