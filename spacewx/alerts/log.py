"""Append-only alert log."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable
from datetime import datetime

from spacewx.models.alerts import AlertRecord


class AlertLog:
    """Ordered alert log.

    Unbounded by default.  With ``max_entries`` set the log behaves as a ring
    buffer and the oldest entries are evicted first.  Not thread-safe on its
    own; mutation goes through StateStore.
    """

    def __init__(self, max_entries: int | None = None) -> None:
        if max_entries is not None and max_entries <= 0:
            max_entries = None
        self._entries: deque[AlertRecord] = deque(maxlen=max_entries)
        self._last_alert_at: datetime | None = None

    def extend(self, records: Iterable[AlertRecord], at: datetime) -> int:
        """Append *records* in order; returns how many were appended.

        ``last_alert_at`` moves to *at* only when something was appended.
        """
        added = 0
        for record in records:
            self._entries.append(record)
            added += 1
        if added:
            self._last_alert_at = at
        return added

    def entries(self) -> tuple[AlertRecord, ...]:
        return tuple(self._entries)

    @property
    def last_alert_at(self) -> datetime | None:
        return self._last_alert_at

    @property
    def max_entries(self) -> int | None:
        return self._entries.maxlen

    def __len__(self) -> int:
        return len(self._entries)
