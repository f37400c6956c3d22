import math
from datetime import datetime

import pytest

from reindeer_tracks.geo import bbox_center, distance_m, haversine_m, line_length_m
from reindeer_tracks.models import EARTH_RADIUS_M, TrackPoint

T0 = datetime(2010, 5, 1, 12, 0)


def _pt(lon, lat):
    return TrackPoint(longitude=lon, latitude=lat, timestamp=T0)


def test_same_point_is_zero():
    assert haversine_m(60.0, 7.5, 60.0, 7.5) == 0.0


def test_one_degree_of_latitude():
    expected = EARTH_RADIUS_M * math.pi / 180.0
    assert haversine_m(0.0, 10.0, 1.0, 10.0) == pytest.approx(expected, rel=1e-12)
    assert expected == pytest.approx(111_195.08, abs=0.01)


def test_distance_uses_lon_lat_order():
    a = _pt(10.0, 0.0)
    b = _pt(10.0, 1.0)
    assert distance_m(a, b) == pytest.approx(haversine_m(0.0, 10.0, 1.0, 10.0))
    assert distance_m(a, b) == pytest.approx(distance_m(b, a))


def test_line_length_empty_and_single():
    assert line_length_m([]) == 0.0
    assert line_length_m([_pt(7.5, 60.0)]) == 0.0


def test_line_length_sums_segments():
    pts = [_pt(10.0, 0.0), _pt(10.0, 1.0), _pt(10.0, 3.0)]
    one_degree = haversine_m(0.0, 10.0, 1.0, 10.0)
    assert line_length_m(pts) == pytest.approx(3 * one_degree)


def test_nan_propagates():
    assert math.isnan(haversine_m(float("nan"), 0.0, 0.0, 0.0))


def test_bbox_center_is_not_the_mean():
    pts = [_pt(0.0, 0.0), _pt(0.0, 0.0), _pt(3.0, 3.0)]
    assert bbox_center(pts) == (1.5, 1.5)
