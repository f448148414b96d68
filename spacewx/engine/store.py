"""Published state shared with read-only consumers.

StateStore is the single serialisation point for everything consumers can
observe: the current Snapshot, the alert log and the status text.  All
writes go through one asyncio.Lock; readers receive immutable objects
(the Snapshot itself, tuples of AlertRecord) and never see a half-applied
update.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from spacewx.alerts.log import AlertLog
from spacewx.models.alerts import AlertRecord
from spacewx.models.snapshot import Snapshot
from spacewx.observability.logging import get_logger
from spacewx.observability.metrics import alerts_emitted_total

_log = get_logger("engine.store")

STATUS_IDLE = ""
STATUS_REFRESHING = "Refreshing…"

SnapshotObserver = Callable[[Snapshot], None]


@dataclass(frozen=True)
class AlertView:
    """Read-only view of the alert log."""

    entries: tuple[AlertRecord, ...]
    last_alert_at: datetime | None


class StateStore:
    """Holds the latest Snapshot, the alert log and the status text."""

    def __init__(self, alert_log: AlertLog | None = None) -> None:
        self._lock = asyncio.Lock()
        self._snapshot: Snapshot | None = None
        self._alert_log = alert_log or AlertLog()
        self._status = STATUS_IDLE
        self._observers: list[SnapshotObserver] = []

    # ------------------------------------------------------------------
    # Readers
    # ------------------------------------------------------------------

    @property
    def snapshot(self) -> Snapshot | None:
        return self._snapshot

    @property
    def status(self) -> str:
        return self._status

    def alerts(self) -> AlertView:
        return AlertView(entries=self._alert_log.entries(), last_alert_at=self._alert_log.last_alert_at)

    # ------------------------------------------------------------------
    # Writers
    # ------------------------------------------------------------------

    async def set_status(self, text: str) -> None:
        async with self._lock:
            self._status = text

    async def publish(self, snapshot: Snapshot, alerts: list[AlertRecord], completed_at: datetime) -> None:
        """Replace the Snapshot and append *alerts* as one atomic step."""
        async with self._lock:
            self._snapshot = snapshot
            added = self._alert_log.extend(alerts, at=completed_at)
        for record in alerts:
            alerts_emitted_total.labels(rule=record.rule.value).inc()
        _log.info(
            "snapshot_published",
            flares=len(snapshot.flares),
            storms=len(snapshot.storms),
            cmes=len(snapshot.cmes),
            alerts=added,
        )
        self._notify(snapshot)

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def subscribe(self, observer: SnapshotObserver) -> Callable[[], None]:
        """Call *observer* after every publish; returns an unsubscribe function."""
        self._observers.append(observer)

        def _unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return _unsubscribe

    def _notify(self, snapshot: Snapshot) -> None:
        for observer in list(self._observers):
            try:
                observer(snapshot)
            except Exception as exc:
                _log.error("snapshot_observer_error", error=str(exc))
