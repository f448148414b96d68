"""Windowed analytics over fetched event lists."""

from spacewx.analytics.engine import (
    HISTOGRAM_DAYS,
    build_snapshot,
    count_classes,
    daily_histogram,
    flare_magnitude,
    is_significant,
    latest_kp,
    latest_significant_flare,
)

__all__ = [
    "HISTOGRAM_DAYS",
    "build_snapshot",
    "count_classes",
    "daily_histogram",
    "flare_magnitude",
    "is_significant",
    "latest_kp",
    "latest_significant_flare",
]
