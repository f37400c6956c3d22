"""Track assembly, point merging, day/week grouping and threshold optimization."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Iterable, Sequence

from reindeer_tracks.buckets import bucket_points
from reindeer_tracks.geo import bbox_center, haversine_m
from reindeer_tracks.models import AnimalTrack, Granularity, RawIndividual, RawPosition, TrackPoint


def merge_points(points: Sequence[TrackPoint]) -> TrackPoint:
    """Reduce a group of points to one representative point.

    Position: bounding-box center of the group.
    Timestamp/id: taken from the point at index ``(n - 1) // 2``, so an even
    count picks the lower middle ([A, B] -> A, [A, B, C] -> B).
    Distance: sum of the members' ``distance_m``, which keeps the total
    distance of a track unchanged when its points are merged.

    Raises:
        ValueError: If ``points`` is empty.
    """

    if not points:
        raise ValueError("Cannot merge an empty group of points")

    lon, lat = bbox_center(points)
    middle = points[(len(points) - 1) // 2]
    return replace(
        middle,
        longitude=lon,
        latitude=lat,
        distance_m=sum(p.distance_m for p in points),
    )


def group_track(track: AnimalTrack, granularity: Granularity) -> AnimalTrack:
    """Return a track with one merged point per day or week bucket."""

    buckets = bucket_points(track.positions, granularity)
    return replace(track, positions=tuple(merge_points(b.positions) for b in buckets))


def group_days(tracks: Iterable[AnimalTrack], granularity: Granularity) -> list[AnimalTrack]:
    """Group every track by day or ISO week (buckets in encounter order)."""

    return [group_track(t, granularity) for t in tracks]


def optimize_track(track: AnimalTrack, min_distance_m: float) -> AnimalTrack:
    """Collapse low-movement runs of points, day by day.

    Within each calendar day, consecutive points whose ``distance_m`` is below
    ``min_distance_m`` are gathered into a pending group. A point at or above
    the threshold first flushes the pending group as one merged point and is
    then emitted unchanged. The pending group is flushed at the end of each
    day, so a stationary run across midnight yields two merged points.

    Every input distance is either copied or absorbed into exactly one merge,
    so the total distance of the result equals that of the input.
    """

    optimized: list[TrackPoint] = []
    for day in bucket_points(track.positions, Granularity.DAY):
        pending: list[TrackPoint] = []
        for p in day.positions:
            if p.distance_m < min_distance_m:
                pending.append(p)
                continue
            if pending:
                optimized.append(merge_points(pending))
                pending = []
            optimized.append(p)
        if pending:
            optimized.append(merge_points(pending))
    return replace(track, positions=tuple(optimized))


def optimize_tracks(tracks: Iterable[AnimalTrack], min_distance_m: float) -> list[AnimalTrack]:
    return [optimize_track(t, min_distance_m) for t in tracks]


def annotate_distances(positions: Sequence[RawPosition]) -> tuple[TrackPoint, ...]:
    """Convert raw positions to track points carrying distance-from-previous."""

    out: list[TrackPoint] = []
    prev: RawPosition | None = None
    for pos in positions:
        dist = 0.0
        if prev is not None:
            dist = haversine_m(prev.latitude, prev.longitude, pos.latitude, pos.longitude)
        out.append(
            TrackPoint(
                longitude=pos.longitude,
                latitude=pos.latitude,
                timestamp=pos.timestamp,
                distance_m=dist,
                position_id=pos.position_id,
            )
        )
        prev = pos
    return tuple(out)


@dataclass(slots=True)
class _Pending:
    individual: RawIndividual
    positions: list[RawPosition] = field(default_factory=list)


def assemble_tracks(individuals: Iterable[RawIndividual]) -> list[AnimalTrack]:
    """Merge raw individual entries into one track per individual id.

    Entries sharing an id are concatenated in the order given (no sorting,
    no de-duplication). Distances are annotated over the concatenated
    sequence, so the first point of a later slice measures from the last
    point of the previous slice. Name and age come from the first entry.
    """

    by_id: dict[str, _Pending] = {}
    for ind in individuals:
        pending = by_id.get(ind.id)
        if pending is None:
            pending = _Pending(individual=ind)
            by_id[ind.id] = pending
        pending.positions.extend(ind.positions)

    return [
        AnimalTrack(
            id=p.individual.id,
            name=p.individual.name,
            age_description=p.individual.age_string.strip(),
            positions=annotate_distances(p.positions),
        )
        for p in by_id.values()
    ]
