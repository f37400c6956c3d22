from datetime import UTC, datetime, timedelta, timezone

import pytest

from reindeer_tracks.models import SOURCE_TZ
from reindeer_tracks.timeutils import format_source_datetime, parse_timestamp, tzinfo_from_name, year_range


def test_fixed_offset_names():
    assert tzinfo_from_name("+01:00").utcoffset(None) == timedelta(hours=1)
    assert tzinfo_from_name("UTC-0230").utcoffset(None) == -timedelta(hours=2, minutes=30)


def test_iana_name():
    tz = tzinfo_from_name("Europe/Oslo")
    assert datetime(2023, 7, 1, tzinfo=tz).utcoffset() == timedelta(hours=2)


def test_invalid_zone():
    with pytest.raises(ValueError):
        tzinfo_from_name("Mars/Olympus_Mons")


def test_parse_keeps_zone_representation():
    assert parse_timestamp("2010-05-01T23:15:00").tzinfo is None
    ts = parse_timestamp("2010-05-01T23:15:00+01:00")
    assert ts.utcoffset() == timedelta(hours=1)
    assert ts.date().isoformat() == "2010-05-01"


def test_parse_rejects_garbage():
    with pytest.raises(ValueError):
        parse_timestamp("yesterday")


def test_format_source_datetime():
    assert format_source_datetime(datetime(2023, 1, 1, tzinfo=SOURCE_TZ), SOURCE_TZ) == "2023-01-01T00:00:00+01:00"
    assert format_source_datetime(datetime(2023, 6, 1, 10, 0, 0, 500, tzinfo=UTC), SOURCE_TZ) == "2023-06-01T11:00:00+01:00"


def test_year_range_past_year():
    r = year_range(2023, SOURCE_TZ, now=datetime(2030, 1, 1, tzinfo=UTC))
    assert r.start == datetime(2023, 1, 1, tzinfo=SOURCE_TZ)
    assert r.end == datetime(2024, 1, 1, tzinfo=SOURCE_TZ)


def test_year_range_current_year_is_clipped():
    now = datetime(2023, 6, 1, 12, tzinfo=UTC)
    r = year_range(2023, SOURCE_TZ, now=now)
    assert r.start == datetime(2023, 1, 1, tzinfo=SOURCE_TZ)
    assert r.end == now


def test_year_range_future_year_collapses():
    now = datetime(2023, 6, 1, 12, tzinfo=UTC)
    r = year_range(2025, timezone(timedelta(hours=1)), now=now)
    assert r.start == r.end == now
