from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from datetime_utils import (
    day_bounds_utc,
    ensure_utc,
    local_time_zone_name,
    localize,
    parse_rfc3339,
    to_rfc3339_utc,
)


def test_day_bounds_cover_whole_utc_day():
    start, end = day_bounds_utc(date(2024, 2, 29))

    assert start == datetime(2024, 2, 29, 0, 0, 0, tzinfo=timezone.utc)
    assert end == datetime(2024, 2, 29, 23, 59, 59, tzinfo=timezone.utc)
    assert end - start == timedelta(hours=23, minutes=59, seconds=59)


def test_ensure_utc_converts_offsets():
    berlin = datetime(2024, 1, 1, 10, tzinfo=ZoneInfo("Europe/Berlin"))

    assert ensure_utc(berlin) == datetime(2024, 1, 1, 9, tzinfo=timezone.utc)
    assert ensure_utc(berlin).tzinfo is timezone.utc
    assert ensure_utc(None) is None


def test_rfc3339_round_trip_with_fraction_and_offset():
    parsed = parse_rfc3339("2024-01-01T10:00:00.5+02:00")

    assert parsed == datetime(2024, 1, 1, 8, 0, 0, 500000, tzinfo=timezone.utc)
    assert to_rfc3339_utc(parsed) == "2024-01-01T08:00:00Z"
    assert parse_rfc3339("") is None
    assert parse_rfc3339("garbage") is None


def test_ensure_utc_treats_naive_as_utc():
    assert ensure_utc(datetime(2024, 1, 1, 10)) == datetime(2024, 1, 1, 10, tzinfo=timezone.utc)


def test_local_time_zone_name_prefers_valid_default():
    assert local_time_zone_name("Asia/Tokyo") == "Asia/Tokyo"
    assert local_time_zone_name("Not/AZone")


def test_localize_keeps_aware_values():
    aware = datetime(2024, 1, 1, tzinfo=timezone.utc)

    assert localize(aware, "Europe/Berlin") is aware
    assert localize(datetime(2024, 1, 1), "bogus").tzinfo == timezone.utc
