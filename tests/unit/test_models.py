"""Tests for event model decoding and serialisation."""

from __future__ import annotations

from datetime import UTC, date, datetime

import pytest

from spacewx.models.events import CMEEvent, FlareEvent, GeomagneticStormEvent, KpReading
from spacewx.models.snapshot import FetchWindow
from tests.conftest import CME_PAYLOAD, FLARE_PAYLOAD, STORM_PAYLOAD, make_flare


class TestFlareDecode:
    def test_decodes_provider_field_names(self) -> None:
        flare = FlareEvent.from_json(FLARE_PAYLOAD[0])
        assert flare.flr_id == "2026-02-10T06:27:00-FLR-001"
        assert flare.class_type == "X2.3"
        assert flare.source_location == "S14W52"
        assert flare.active_region_num == 13981
        assert flare.begin_at == datetime(2026, 2, 10, 6, 27, tzinfo=UTC)

    def test_missing_optional_fields_are_none(self) -> None:
        flare = FlareEvent.from_json({"flrID": "x", "beginTime": "2026-02-10T06:27Z", "classType": "C1.0"})
        assert flare.peak_time is None
        assert flare.active_region_num is None
        assert flare.link is None

    def test_to_dict_uses_provider_names(self) -> None:
        assert FlareEvent.from_json(FLARE_PAYLOAD[0]).to_dict() == FLARE_PAYLOAD[0]

    def test_non_object_rejected(self) -> None:
        with pytest.raises(TypeError):
            FlareEvent.from_json(["not", "an", "object"])

    def test_wrong_field_type_rejected(self) -> None:
        with pytest.raises(TypeError):
            FlareEvent.from_json({"flrID": "x", "classType": 5})

    def test_boolean_region_number_rejected(self) -> None:
        with pytest.raises(TypeError):
            FlareEvent.from_json({"flrID": "x", "activeRegionNum": True})

    def test_frozen(self) -> None:
        flare = make_flare()
        with pytest.raises(AttributeError):
            flare.class_type = "X9.9"  # type: ignore[misc]

    @pytest.mark.parametrize(("class_type", "letter"), [("m5.0", "M"), ("X1", "X"), ("", ""), (None, "")])
    def test_class_letter(self, class_type: str | None, letter: str) -> None:
        assert make_flare(class_type=class_type).class_letter == letter


class TestStormDecode:
    def test_decodes_nested_kp_readings_in_order(self) -> None:
        storm = GeomagneticStormEvent.from_json(STORM_PAYLOAD[0])
        assert storm.gst_id == "2026-02-14T03:00:00-GST-001"
        assert [r.kp_index for r in storm.all_kp_index] == [4.0, 6.33]
        assert storm.all_kp_index[1].observed_at == datetime(2026, 2, 14, 6, 0, tzinfo=UTC)

    def test_null_kp_array_is_empty(self) -> None:
        storm = GeomagneticStormEvent.from_json({"gstID": "g", "startTime": "2026-02-14T03:00Z", "allKpIndex": None})
        assert storm.all_kp_index == ()

    def test_integer_kp_coerced_to_float(self) -> None:
        reading = KpReading.from_json({"observedTime": "2026-02-14T03:00Z", "kpIndex": 7, "source": "NOAA"})
        assert reading.kp_index == 7.0
        assert isinstance(reading.kp_index, float)

    def test_kp_array_must_be_list(self) -> None:
        with pytest.raises(TypeError):
            GeomagneticStormEvent.from_json({"gstID": "g", "allKpIndex": {"kpIndex": 5}})

    def test_non_numeric_kp_rejected(self) -> None:
        with pytest.raises(TypeError):
            KpReading.from_json({"observedTime": "2026-02-14T03:00Z", "kpIndex": "high"})

    def test_unparseable_observed_time_has_no_instant(self) -> None:
        assert KpReading(observed_time="bad", kp_index=5.0).observed_at is None


class TestCMEDecode:
    def test_round_trip_fields(self) -> None:
        cme = CMEEvent.from_json(CME_PAYLOAD[0])
        assert cme.activity_id == "2026-02-09T22:24:00-CME-001"
        assert cme.to_dict() == CME_PAYLOAD[0]

    def test_extra_fields_ignored(self) -> None:
        cme = CMEEvent.from_json({"activityID": "a", "startTime": "t", "cmeAnalyses": [{"speed": 900}]})
        assert cme.activity_id == "a"


class TestFetchWindow:
    def test_trailing_thirty_days(self) -> None:
        window = FetchWindow.trailing(date(2026, 3, 1))
        assert window.start == date(2026, 1, 30)
        assert window.end == date(2026, 3, 1)

    def test_query_params(self) -> None:
        window = FetchWindow(start=date(2026, 1, 5), end=date(2026, 2, 4))
        assert window.to_dict() == {"startDate": "2026-01-05", "endDate": "2026-02-04"}
