"""Space-weather event records decoded from DONKI feeds.

Timestamps keep the provider's raw string; the normalised UTC instant is
derived on access so that a malformed value never prevents decoding.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Any

from spacewx.timeutil import parse_timestamp, try_parse_timestamp


class Feed(StrEnum):
    """DONKI feed names, used as endpoint suffixes."""

    FLR = "FLR"
    GST = "GST"
    CME = "CME"


class FlareClass(StrEnum):
    """GOES X-ray flare classes in increasing energy."""

    A = "A"
    B = "B"
    C = "C"
    M = "M"
    X = "X"


def _opt_str(raw: dict[str, Any], key: str) -> str | None:
    value = raw.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise TypeError(f"field {key!r} must be a string, got {type(value).__name__}")
    return value


def _opt_int(raw: dict[str, Any], key: str) -> int | None:
    value = raw.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"field {key!r} must be an integer, got {type(value).__name__}")
    return value


def _opt_float(raw: dict[str, Any], key: str) -> float | None:
    value = raw.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise TypeError(f"field {key!r} must be a number, got {type(value).__name__}")
    return float(value)


def _require_object(raw: object, shape: str) -> dict[str, Any]:
    if not isinstance(raw, dict):
        raise TypeError(f"{shape} entry must be an object, got {type(raw).__name__}")
    return raw


@dataclass(frozen=True)
class FlareEvent:
    """A solar flare (DONKI FLR)."""

    flr_id: str | None
    begin_time: str | None
    peak_time: str | None
    end_time: str | None
    class_type: str | None
    source_location: str | None = None
    active_region_num: int | None = None
    link: str | None = None

    @property
    def class_letter(self) -> str:
        """Upper-cased first character of the class designation, or ""."""
        if not self.class_type:
            return ""
        return self.class_type[0].upper()

    @property
    def begin_at(self) -> datetime:
        return parse_timestamp(self.begin_time)

    @classmethod
    def from_json(cls, raw: object) -> FlareEvent:
        obj = _require_object(raw, "flare")
        return cls(
            flr_id=_opt_str(obj, "flrID"),
            begin_time=_opt_str(obj, "beginTime"),
            peak_time=_opt_str(obj, "peakTime"),
            end_time=_opt_str(obj, "endTime"),
            class_type=_opt_str(obj, "classType"),
            source_location=_opt_str(obj, "sourceLocation"),
            active_region_num=_opt_int(obj, "activeRegionNum"),
            link=_opt_str(obj, "link"),
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "flrID": self.flr_id,
            "beginTime": self.begin_time,
            "peakTime": self.peak_time,
            "endTime": self.end_time,
            "classType": self.class_type,
            "sourceLocation": self.source_location,
            "activeRegionNum": self.active_region_num,
            "link": self.link,
        }


@dataclass(frozen=True)
class KpReading:
    """One Kp observation attached to a geomagnetic storm."""

    observed_time: str | None
    kp_index: float | None
    source: str | None = None

    @property
    def observed_at(self) -> datetime | None:
        return try_parse_timestamp(self.observed_time)

    @classmethod
    def from_json(cls, raw: object) -> KpReading:
        obj = _require_object(raw, "allKpIndex")
        return cls(
            observed_time=_opt_str(obj, "observedTime"),
            kp_index=_opt_float(obj, "kpIndex"),
            source=_opt_str(obj, "source"),
        )

    def to_dict(self) -> dict[str, object]:
        return {"observedTime": self.observed_time, "kpIndex": self.kp_index, "source": self.source}


@dataclass(frozen=True)
class GeomagneticStormEvent:
    """A geomagnetic storm (DONKI GST) with its Kp readings in provider order."""

    gst_id: str | None
    start_time: str | None
    all_kp_index: tuple[KpReading, ...] = ()
    link: str | None = None

    @classmethod
    def from_json(cls, raw: object) -> GeomagneticStormEvent:
        obj = _require_object(raw, "storm")
        readings = obj.get("allKpIndex") or []
        if not isinstance(readings, list):
            raise TypeError(f"field 'allKpIndex' must be an array, got {type(readings).__name__}")
        return cls(
            gst_id=_opt_str(obj, "gstID"),
            start_time=_opt_str(obj, "startTime"),
            all_kp_index=tuple(KpReading.from_json(r) for r in readings),
            link=_opt_str(obj, "link"),
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "gstID": self.gst_id,
            "startTime": self.start_time,
            "allKpIndex": [r.to_dict() for r in self.all_kp_index],
            "link": self.link,
        }


@dataclass(frozen=True)
class CMEEvent:
    """A coronal mass ejection (DONKI CME). Speed/analysis data is not kept."""

    activity_id: str | None
    start_time: str | None
    link: str | None = None

    @classmethod
    def from_json(cls, raw: object) -> CMEEvent:
        obj = _require_object(raw, "CME")
        return cls(
            activity_id=_opt_str(obj, "activityID"),
            start_time=_opt_str(obj, "startTime"),
            link=_opt_str(obj, "link"),
        )

    def to_dict(self) -> dict[str, object]:
        return {"activityID": self.activity_id, "startTime": self.start_time, "link": self.link}
