"""Data models for animal tracks, buckets and fetch ranges."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Final


class Granularity(str, Enum):
    """Calendar unit used to bucket points."""

    DAY = "day"
    WEEK = "week"


class DetailLevel(str, Enum):
    """Detail level of a derived track artifact."""

    FULL = "full"
    DAY = "day"
    WEEK = "week"


@dataclass(frozen=True, slots=True)
class TrackPoint:
    """A single GPS position of an individual.

    Attributes:
        longitude: Longitude in decimal degrees.
        latitude: Latitude in decimal degrees.
        timestamp: Sample time, kept in the zone it was reported in.
        distance_m: Geodesic distance in meters from the previous point of the
            track (0.0 for the first point). A merged point carries the sum of
            its members.
        position_id: Source identifier of the raw position, if any.
    """

    longitude: float
    latitude: float
    timestamp: datetime
    distance_m: float = 0.0
    position_id: str | None = None


@dataclass(frozen=True, slots=True)
class RawPosition:
    """A position as stored in a raw yearly snapshot (no distance yet)."""

    position_id: str | None
    latitude: float
    longitude: float
    timestamp: datetime


@dataclass(frozen=True, slots=True)
class RawIndividual:
    """One individual entry of a raw snapshot document.

    The same individual may appear in several entries (one per fetched date
    segment or per stored file); each entry holds a partial-year slice.
    """

    id: str
    name: str
    age_string: str
    positions: tuple[RawPosition, ...]


@dataclass(frozen=True, slots=True)
class AnimalTrack:
    """All positions of one individual for one year.

    Note:
        Derived tracks (grouped/optimized) are new instances; a track is never
        mutated in place.
    """

    id: str
    name: str
    age_description: str
    positions: tuple[TrackPoint, ...]

    @property
    def total_distance_m(self) -> float:
        """Sum of per-point distances."""

        return sum(p.distance_m for p in self.positions)


@dataclass(frozen=True, slots=True)
class DateBucket:
    """Points sharing a calendar day or ISO-week key."""

    key: str
    representative_date: datetime
    positions: tuple[TrackPoint, ...]
    aggregate_distance_m: float


@dataclass(frozen=True, slots=True)
class TrackSummary:
    """Per-track statistics over its day buckets."""

    point_count: int
    total_distance_m: float
    min_day_distance_m: float
    avg_day_distance_m: float
    max_day_distance_m: float
    day_count: int


@dataclass(frozen=True, slots=True)
class DateRange:
    """Half-open request window [start, end)."""

    start: datetime
    end: datetime

    @property
    def midpoint(self) -> datetime:
        return self.start + (self.end - self.start) / 2


EARTH_RADIUS_M: Final[float] = 6_371_008.8

# Threshold used when writing the "full" artifact.
DEFAULT_MIN_DISTANCE_M: Final[float] = 100.0

# 2**12 segments per year is roughly two hours per request window.
DEFAULT_MAX_SPLIT_DEPTH: Final[int] = 12

# The source reports and expects local wall time with a fixed +01:00 offset.
SOURCE_TZ: Final[timezone] = timezone(timedelta(hours=1))
