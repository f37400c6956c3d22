import csv
from datetime import datetime

from reindeer_tracks.models import AnimalTrack, TrackPoint
from reindeer_tracks.report import STATS_FIELDS, format_meter, format_table, stats_rows, write_stats_csv


def _track():
    pts = (
        TrackPoint(longitude=7.5, latitude=60.0, timestamp=datetime(2010, 5, 1, 8)),
        TrackPoint(longitude=7.5, latitude=60.01, timestamp=datetime(2010, 5, 1, 12)),
        TrackPoint(longitude=7.5, latitude=60.02, timestamp=datetime(2010, 5, 2, 8)),
    )
    return AnimalTrack(id="7", name="Siri", age_description="Voksen", positions=pts)


def test_format_meter():
    assert format_meter(1500.0) == "1.50km"
    assert format_meter(0.0) == "0.00km"


def test_stats_rows():
    [row] = stats_rows([_track()])
    assert row["name"] == "Siri"
    assert row["positions"] == 3
    assert row["days"] == 2
    assert row["distance"] == "2.22km"
    assert row["min"] == "0.00km"
    assert row["max"] == "1.11km"


def test_format_table():
    text = format_table(stats_rows([_track()]))
    lines = text.splitlines()
    assert lines[0].split() == list(STATS_FIELDS)
    assert "Siri" in lines[2]
    assert format_table([]) == "(no tracks)"


def test_write_stats_csv(tmp_path):
    out = tmp_path / "stats.csv"
    write_stats_csv(stats_rows([_track()]), out)
    with out.open(encoding="utf-8", newline="") as f:
        rows = list(csv.DictReader(f))
    assert rows[0]["name"] == "Siri"
    assert rows[0]["days"] == "2"
