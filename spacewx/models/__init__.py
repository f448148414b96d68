"""Core data structures for SpaceWx."""

from spacewx.models.alerts import AlertRecord, AlertRule
from spacewx.models.config import RefreshConfig, SpaceWxConfig
from spacewx.models.events import (
    CMEEvent,
    Feed,
    FlareClass,
    FlareEvent,
    GeomagneticStormEvent,
    KpReading,
)
from spacewx.models.snapshot import FetchWindow, FlareClassCounts, Snapshot

__all__ = [
    "AlertRecord",
    "AlertRule",
    "CMEEvent",
    "Feed",
    "FetchWindow",
    "FlareClass",
    "FlareClassCounts",
    "FlareEvent",
    "GeomagneticStormEvent",
    "KpReading",
    "RefreshConfig",
    "Snapshot",
    "SpaceWxConfig",
]
