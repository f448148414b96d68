"""One refresh cycle: fetch -> analytics -> alerts -> publish.

The wall-clock date at the moment a cycle starts fixes its fetch window.
A failed fetch leaves the previously published Snapshot untouched and only
updates the status text.  Cycles are serialised, so two overlapping
triggers never race on publication order.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from datetime import UTC, datetime

from spacewx.alerts.cooldown import AlertCooldown
from spacewx.alerts.rules import evaluate_alerts
from spacewx.analytics.engine import build_snapshot
from spacewx.collector.donki import DEFAULT_BASE_URL, DEFAULT_TIMEOUT_SECONDS, DonkiClient
from spacewx.engine.store import STATUS_REFRESHING, StateStore
from spacewx.errors import RefreshError
from spacewx.models.config import RefreshConfig
from spacewx.models.snapshot import DEFAULT_WINDOW_DAYS, FetchWindow, Snapshot
from spacewx.observability.logging import get_logger
from spacewx.observability.metrics import refresh_cycles_total, refresh_duration_seconds
from spacewx.settings import SettingsStore
from spacewx.timeutil import format_display

_log = get_logger("engine.pipeline")

ClientFactory = Callable[[RefreshConfig], DonkiClient]


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


def donki_client_factory(
    base_url: str = DEFAULT_BASE_URL,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> ClientFactory:
    """Build a factory that opens a DonkiClient with the cycle's credential."""

    def _factory(config: RefreshConfig) -> DonkiClient:
        return DonkiClient(api_key=config.api_key, base_url=base_url, timeout=timeout)

    return _factory


class RefreshPipeline:
    """Runs refresh cycles and publishes their results into a StateStore."""

    def __init__(
        self,
        settings: SettingsStore,
        store: StateStore,
        client_factory: ClientFactory | None = None,
        cooldown: AlertCooldown | None = None,
        clock: Callable[[], datetime] = _utc_now,
        window_days: int = DEFAULT_WINDOW_DAYS,
    ) -> None:
        self._settings = settings
        self._store = store
        self._client_factory = client_factory or donki_client_factory()
        self._cooldown = cooldown or AlertCooldown()
        self._clock = clock
        self._window_days = window_days
        self._cycle_lock = asyncio.Lock()

    @property
    def store(self) -> StateStore:
        return self._store

    async def run_cycle(self) -> Snapshot:
        """Run one cycle and return the published Snapshot.

        Raises:
            RefreshError: a feed failed; nothing was published.
        """
        async with self._cycle_lock:
            config = self._settings.refresh_config()
            started_at = self._clock()
            window = FetchWindow.trailing(started_at.date(), self._window_days)
            log = _log.bind(start=window.start.isoformat(), end=window.end.isoformat())

            await self._store.set_status(STATUS_REFRESHING)
            log.info("refresh_started")
            t_start = time.monotonic()

            try:
                async with self._client_factory(config) as client:
                    result = await client.fetch_window(window)
            except RefreshError as exc:
                refresh_duration_seconds.observe(time.monotonic() - t_start)
                refresh_cycles_total.labels(outcome="failure").inc()
                log.warning("refresh_failed", feeds=exc.feeds, error=str(exc))
                await self._store.set_status(f"Error: {exc}")
                raise

            completed_at = self._clock()
            snapshot = build_snapshot(
                window=window,
                flares=result.flares,
                storms=result.storms,
                cmes=result.cmes,
                today=completed_at.date(),
                refreshed_at=completed_at,
            )
            alerts = self._cooldown.filter(evaluate_alerts(snapshot, config, now=completed_at))
            await self._store.publish(snapshot, alerts, completed_at=completed_at)
            await self._store.set_status(f"Updated: {format_display(completed_at)}")

            refresh_duration_seconds.observe(time.monotonic() - t_start)
            refresh_cycles_total.labels(outcome="success").inc()
            log.info(
                "refresh_completed",
                flares=len(snapshot.flares),
                latest_kp=snapshot.latest_kp,
                alerts=len(alerts),
            )
            return snapshot
