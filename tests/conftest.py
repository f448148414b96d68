"""Shared factories for SpaceWx tests.

Provides event/snapshot builders and a DONKI mock transport so tests can
exercise full refresh cycles without network access.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from datetime import UTC, date, datetime

import httpx
import pytest

from spacewx.analytics.engine import build_snapshot
from spacewx.collector.donki import DonkiClient
from spacewx.models.config import RefreshConfig
from spacewx.models.events import CMEEvent, FlareEvent, GeomagneticStormEvent, KpReading
from spacewx.models.snapshot import FetchWindow, Snapshot

# ---------------------------------------------------------------------------
# Timestamp helpers
# ---------------------------------------------------------------------------

NOW = datetime(2026, 2, 18, 12, 0, tzinfo=UTC)
TODAY = NOW.date()
WINDOW = FetchWindow.trailing(TODAY)

BASE_URL = "https://donki.test/DONKI"


def fixed_clock(moment: datetime = NOW) -> Callable[[], datetime]:
    return lambda: moment


def iso(day: date, hour: int = 6, minute: int = 27) -> str:
    """Render a DONKI-style timestamp (``2026-02-10T06:27Z``)."""
    return f"{day.isoformat()}T{hour:02d}:{minute:02d}Z"


# ---------------------------------------------------------------------------
# Event factory helpers
# ---------------------------------------------------------------------------


def make_flare(
    class_type: str | None = "M1.0",
    begin_time: str | None = "2026-02-10T06:27Z",
    flr_id: str = "",
    **kwargs: object,
) -> FlareEvent:
    """Create a FlareEvent with sensible defaults for testing."""
    return FlareEvent(
        flr_id=flr_id or f"{begin_time}-FLR-001",
        begin_time=begin_time,
        peak_time=kwargs.pop("peak_time", begin_time),  # type: ignore[arg-type]
        end_time=kwargs.pop("end_time", None),  # type: ignore[arg-type]
        class_type=class_type,
        **kwargs,  # type: ignore[arg-type]
    )


def make_storm(*readings: tuple[str | None, float | None], gst_id: str = "GST-001") -> GeomagneticStormEvent:
    """Create a storm with ``(observed_time, kp_index)`` readings."""
    return GeomagneticStormEvent(
        gst_id=gst_id,
        start_time=readings[0][0] if readings else "2026-02-10T00:00Z",
        all_kp_index=tuple(KpReading(observed_time=t, kp_index=kp, source="NOAA") for t, kp in readings),
    )


def make_cme(activity_id: str = "2026-02-10T01:00:00-CME-001") -> CMEEvent:
    return CMEEvent(activity_id=activity_id, start_time="2026-02-10T01:00Z")


def make_snapshot(
    flares: list[FlareEvent] | None = None,
    storms: list[GeomagneticStormEvent] | None = None,
    cmes: list[CMEEvent] | None = None,
) -> Snapshot:
    return build_snapshot(
        window=WINDOW,
        flares=flares or [],
        storms=storms or [],
        cmes=cmes or [],
        today=TODAY,
        refreshed_at=NOW,
    )


# ---------------------------------------------------------------------------
# DONKI payloads and transport
# ---------------------------------------------------------------------------

FLARE_PAYLOAD = [
    {
        "flrID": "2026-02-10T06:27:00-FLR-001",
        "beginTime": "2026-02-10T06:27Z",
        "peakTime": "2026-02-10T06:40Z",
        "endTime": "2026-02-10T06:55Z",
        "classType": "X2.3",
        "sourceLocation": "S14W52",
        "activeRegionNum": 13981,
        "link": "https://kauai.ccmc.gsfc.nasa.gov/DONKI/view/FLR/1/-1",
    },
    {
        "flrID": "2026-02-11T09:02:00-FLR-001",
        "beginTime": "2026-02-11T09:02Z",
        "peakTime": "2026-02-11T09:15Z",
        "endTime": None,
        "classType": "M3.0",
        "sourceLocation": "N10E20",
        "activeRegionNum": None,
        "link": None,
    },
    {
        "flrID": "2026-02-12T13:00:00-FLR-001",
        "beginTime": "2026-02-12T13:00Z",
        "peakTime": "2026-02-12T13:11Z",
        "endTime": "2026-02-12T13:20Z",
        "classType": "C4.1",
        "sourceLocation": None,
        "activeRegionNum": 13982,
        "link": None,
    },
]

STORM_PAYLOAD = [
    {
        "gstID": "2026-02-14T03:00:00-GST-001",
        "startTime": "2026-02-14T03:00Z",
        "allKpIndex": [
            {"observedTime": "2026-02-14T03:00Z", "kpIndex": 4.0, "source": "NOAA"},
            {"observedTime": "2026-02-14T06:00Z", "kpIndex": 6.33, "source": "NOAA"},
        ],
        "link": "https://kauai.ccmc.gsfc.nasa.gov/DONKI/view/GST/1/-1",
    }
]

CME_PAYLOAD = [
    {
        "activityID": "2026-02-09T22:24:00-CME-001",
        "startTime": "2026-02-09T22:24Z",
        "link": "https://kauai.ccmc.gsfc.nasa.gov/DONKI/view/CME/1/-1",
    }
]


class DonkiStub:
    """Programmable DONKI server for httpx.MockTransport.

    ``responses`` maps feed name to ``(status, body)``; every request is
    recorded in ``requests``.
    """

    def __init__(self) -> None:
        self.responses: dict[str, tuple[int, str]] = {
            "FLR": (200, json.dumps(FLARE_PAYLOAD)),
            "GST": (200, json.dumps(STORM_PAYLOAD)),
            "CME": (200, json.dumps(CME_PAYLOAD)),
        }
        self.requests: list[httpx.Request] = []
        self.raise_for: dict[str, Exception] = {}

    def set(self, feed: str, status: int = 200, body: object = None, raw: str | None = None) -> None:
        self.responses[feed] = (status, raw if raw is not None else json.dumps(body if body is not None else []))

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        feed = request.url.path.rsplit("/", 1)[-1]
        if feed in self.raise_for:
            raise self.raise_for[feed]
        status, body = self.responses[feed]
        return httpx.Response(status, text=body, headers={"Content-Type": "application/json"})

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def client_factory(self) -> Callable[[RefreshConfig], DonkiClient]:
        def _factory(config: RefreshConfig) -> DonkiClient:
            return DonkiClient(api_key=config.api_key, base_url=BASE_URL, transport=self.transport())

        return _factory


@pytest.fixture
def donki() -> DonkiStub:
    return DonkiStub()
