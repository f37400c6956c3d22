"""Day / ISO-week bucketing of track points and per-track statistics."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Sequence

from reindeer_tracks.geo import line_length_m
from reindeer_tracks.models import AnimalTrack, DateBucket, Granularity, TrackPoint, TrackSummary


def bucket_key(timestamp: datetime, granularity: Granularity) -> str:
    """Build the bucket key of a timestamp.

    DAY keys are the calendar date in the timestamp's own zone ("2010-05-01").
    WEEK keys are the bare ISO week number ("17"); the year is not part of the
    key, so week 53 of one year and week 1 of the next are never reconciled.
    """

    if granularity is Granularity.DAY:
        return timestamp.date().isoformat()
    return str(timestamp.isocalendar().week)


@dataclass(slots=True)
class _Accumulator:
    key: str
    first_seen: datetime
    points: list[TrackPoint] = field(default_factory=list)


def bucket_points(points: Iterable[TrackPoint], granularity: Granularity = Granularity.DAY) -> list[DateBucket]:
    """Partition points into day or week buckets.

    Buckets are kept in first-seen order. A point joins whichever existing
    bucket has its key, so a key that recurs after other keys (e.g. an
    out-of-order sample) lands in the original bucket rather than a new one.

    Args:
        points: Track points, normally in time order.
        granularity: DAY or WEEK.

    Returns:
        Buckets with aggregate distance computed over their member points only.
    """

    by_key: dict[str, _Accumulator] = {}
    for p in points:
        key = bucket_key(p.timestamp, granularity)
        acc = by_key.get(key)
        if acc is None:
            acc = _Accumulator(key=key, first_seen=p.timestamp)
            by_key[key] = acc
        acc.points.append(p)

    return [
        DateBucket(
            key=acc.key,
            representative_date=acc.first_seen,
            positions=tuple(acc.points),
            aggregate_distance_m=line_length_m(acc.points),
        )
        for acc in by_key.values()
    ]


def summarize_points(points: Sequence[TrackPoint]) -> TrackSummary:
    """Compute point count, total length and day-distance statistics."""

    days = bucket_points(points, Granularity.DAY)
    if not days:
        return TrackSummary(
            point_count=0,
            total_distance_m=0.0,
            min_day_distance_m=0.0,
            avg_day_distance_m=0.0,
            max_day_distance_m=0.0,
            day_count=0,
        )

    day_dist = [d.aggregate_distance_m for d in days]
    return TrackSummary(
        point_count=len(points),
        total_distance_m=line_length_m(points),
        min_day_distance_m=min(day_dist),
        avg_day_distance_m=sum(day_dist) / len(day_dist),
        max_day_distance_m=max(day_dist),
        day_count=len(days),
    )


def summarize_track(track: AnimalTrack) -> TrackSummary:
    return summarize_points(track.positions)
