from datetime import datetime, timedelta

import pytest

from reindeer_tracks.models import AnimalTrack, DetailLevel, TrackPoint
from reindeer_tracks.views import select_tracks


def _track(ind_id, days):
    start = datetime(2010, 5, 3)
    points = tuple(
        TrackPoint(longitude=7.5, latitude=60.0 + i * 0.01, timestamp=start + timedelta(hours=6 * i), distance_m=10.0 * i)
        for i in range(4 * days)
    )
    return AnimalTrack(id=ind_id, name=f"ind-{ind_id}", age_description="Voksen", positions=points)


TRACKS = [_track("a", 3), _track("b", 2)]


def test_full_returns_ungrouped_tracks():
    assert select_tracks(TRACKS, "full") == TRACKS


def test_day_and_week_levels():
    by_day = select_tracks(TRACKS, DetailLevel.DAY)
    by_week = select_tracks(TRACKS, "week")
    assert [len(t.positions) for t in by_day] == [3, 2]
    assert [len(t.positions) for t in by_week] == [1, 1]


def test_default_is_day():
    assert select_tracks(TRACKS) == select_tracks(TRACKS, "day")


def test_num_selects_by_position():
    [only] = select_tracks(TRACKS, "day", num=1)
    assert only.id == "b"
    assert select_tracks(TRACKS, "full", num=5) == []


def test_unknown_level():
    with pytest.raises(ValueError):
        select_tracks(TRACKS, "month")
