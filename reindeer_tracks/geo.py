"""Geospatial utilities (spherical earth, no external dependencies)."""

from __future__ import annotations

import math
from typing import Sequence

from reindeer_tracks.models import EARTH_RADIUS_M, TrackPoint


def haversine_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute Haversine distance in meters between two lat/lon points.

    Args:
        lat1: Latitude 1 in degrees.
        lon1: Longitude 1 in degrees.
        lat2: Latitude 2 in degrees.
        lon2: Longitude 2 in degrees.

    Returns:
        Distance in meters. NaN inputs give NaN.
    """

    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2.0) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2.0) ** 2
    c = 2.0 * math.atan2(math.sqrt(a), math.sqrt(1.0 - a))
    return EARTH_RADIUS_M * c


def distance_m(p1: TrackPoint, p2: TrackPoint) -> float:
    """Great-circle distance between two track points."""

    return haversine_m(p1.latitude, p1.longitude, p2.latitude, p2.longitude)


def line_length_m(points: Sequence[TrackPoint]) -> float:
    """Length of the polyline through ``points`` in order (0.0 for < 2 points)."""

    total = 0.0
    for i in range(1, len(points)):
        total += distance_m(points[i - 1], points[i])
    return total


def bbox_center(points: Sequence[TrackPoint]) -> tuple[float, float]:
    """Return (longitude, latitude) of the bounding-box center.

    This is the midpoint of the min/max extents, not the mean of the points.
    """

    lons = [p.longitude for p in points]
    lats = [p.latitude for p in points]
    return (min(lons) + max(lons)) / 2.0, (min(lats) + max(lats)) / 2.0
