"""Analytics engine.

Pure functions; nothing here keeps state between calls, so every derived
value in a Snapshot comes from that Snapshot's own event lists.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import date, datetime, timedelta

from spacewx.models.events import CMEEvent, FlareClass, FlareEvent, GeomagneticStormEvent, KpReading
from spacewx.models.snapshot import FetchWindow, FlareClassCounts, Snapshot
from spacewx.timeutil import try_parse_timestamp

HISTOGRAM_DAYS = 30
SIGNIFICANT_M_MAGNITUDE = 5.0


def flare_magnitude(class_type: str | None) -> float:
    """Numeric part of a class designation (``"M5.2"`` -> 5.2); 0.0 if unparseable."""
    if not class_type:
        return 0.0
    try:
        return float(class_type[1:])
    except ValueError:
        return 0.0


def is_significant(class_type: str | None) -> bool:
    """X-class of any magnitude, or M-class of magnitude 5.0 and above."""
    if not class_type:
        return False
    letter = class_type[0].upper()
    if letter == FlareClass.X:
        return True
    return letter == FlareClass.M and flare_magnitude(class_type) >= SIGNIFICANT_M_MAGNITUDE


def count_classes(flares: Iterable[FlareEvent]) -> FlareClassCounts:
    c = m = x = 0
    for flare in flares:
        letter = flare.class_letter
        if letter == FlareClass.C:
            c += 1
        elif letter == FlareClass.M:
            m += 1
        elif letter == FlareClass.X:
            x += 1
    return FlareClassCounts(c=c, m=m, x=x)


def latest_significant_flare(flares: Iterable[FlareEvent]) -> FlareEvent | None:
    """Significant flare with the latest begin time; the first one seen wins ties."""
    latest: FlareEvent | None = None
    latest_at: datetime | None = None
    for flare in flares:
        if not is_significant(flare.class_type):
            continue
        begin = flare.begin_at
        if latest_at is None or begin > latest_at:
            latest, latest_at = flare, begin
    return latest


def _readings(storms: Iterable[GeomagneticStormEvent]) -> Iterable[KpReading]:
    for storm in storms:
        yield from storm.all_kp_index


def latest_kp(storms: Iterable[GeomagneticStormEvent]) -> float | None:
    """Kp value of the most recently observed reading across all storms.

    Readings without a usable observed time are ignored.  Returns None when
    no reading qualifies or the latest one has no value.
    """
    latest: KpReading | None = None
    latest_at: datetime | None = None
    for reading in _readings(storms):
        observed = reading.observed_at
        if observed is None:
            continue
        if latest_at is None or observed > latest_at:
            latest, latest_at = reading, observed
    if latest is None:
        return None
    return latest.kp_index


def daily_histogram(
    flares: Iterable[FlareEvent],
    today: date,
    days: int = HISTOGRAM_DAYS,
) -> list[tuple[date, int]]:
    """Flare counts per calendar day for ``today - (days-1)`` .. ``today``.

    Always returns exactly ``days`` buckets in date order.  Flares whose
    begin time is outside the range, or cannot be parsed, are not counted.
    """
    first = today - timedelta(days=days - 1)
    buckets = {first + timedelta(days=i): 0 for i in range(days)}
    for flare in flares:
        begin = try_parse_timestamp(flare.begin_time)
        if begin is None:
            continue
        day = begin.date()
        if day in buckets:
            buckets[day] += 1
    return sorted(buckets.items())


def build_snapshot(
    window: FetchWindow,
    flares: Sequence[FlareEvent],
    storms: Sequence[GeomagneticStormEvent],
    cmes: Sequence[CMEEvent],
    today: date,
    refreshed_at: datetime,
) -> Snapshot:
    """Assemble a Snapshot from one window's decoded feeds."""
    return Snapshot(
        window=window,
        flares=tuple(flares),
        storms=tuple(storms),
        cmes=tuple(cmes),
        class_counts=count_classes(flares),
        latest_significant_flare=latest_significant_flare(flares),
        latest_kp=latest_kp(storms),
        histogram=tuple(daily_histogram(flares, today)),
        refreshed_at=refreshed_at,
    )
