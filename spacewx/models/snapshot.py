"""Snapshot: the immutable result of one successful refresh cycle."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta

from spacewx.models.events import CMEEvent, FlareEvent, GeomagneticStormEvent
from spacewx.timeutil import format_date

DEFAULT_WINDOW_DAYS = 30


@dataclass(frozen=True)
class FetchWindow:
    """Inclusive calendar-date range sent to every feed."""

    start: date
    end: date

    @classmethod
    def trailing(cls, today: date, days: int = DEFAULT_WINDOW_DAYS) -> FetchWindow:
        """``today - days`` through ``today``."""
        return cls(start=today - timedelta(days=days), end=today)

    def to_dict(self) -> dict[str, str]:
        return {"startDate": format_date(self.start), "endDate": format_date(self.end)}


@dataclass(frozen=True)
class FlareClassCounts:
    c: int = 0
    m: int = 0
    x: int = 0

    def to_dict(self) -> dict[str, int]:
        return {"C": self.c, "M": self.m, "X": self.x}


@dataclass(frozen=True)
class Snapshot:
    """Event lists for one fetch window plus analytics derived from them.

    A new Snapshot replaces the previous one wholesale; nothing here is
    carried over from earlier cycles.
    """

    window: FetchWindow
    flares: tuple[FlareEvent, ...]
    storms: tuple[GeomagneticStormEvent, ...]
    cmes: tuple[CMEEvent, ...]
    class_counts: FlareClassCounts
    latest_significant_flare: FlareEvent | None
    latest_kp: float | None
    histogram: tuple[tuple[date, int], ...]
    refreshed_at: datetime

    def to_dict(self) -> dict[str, object]:
        return {
            "window": self.window.to_dict(),
            "refreshed_at": self.refreshed_at.isoformat(),
            "class_counts": self.class_counts.to_dict(),
            "latest_significant_flare": (
                self.latest_significant_flare.to_dict() if self.latest_significant_flare else None
            ),
            "latest_kp": self.latest_kp,
            "histogram": [{"date": format_date(d), "count": n} for d, n in self.histogram],
            "flares": [f.to_dict() for f in self.flares],
            "storms": [s.to_dict() for s in self.storms],
            "cmes": [c.to_dict() for c in self.cmes],
        }
