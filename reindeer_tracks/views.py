"""Selection of derived tracks for display."""

from __future__ import annotations

from typing import Sequence

from reindeer_tracks.models import AnimalTrack, DetailLevel, Granularity
from reindeer_tracks.tracks import group_days


def select_tracks(
    tracks: Sequence[AnimalTrack],
    details: DetailLevel | str = DetailLevel.DAY,
    num: int | None = None,
) -> list[AnimalTrack]:
    """Return tracks at the requested detail level.

    Args:
        tracks: Assembled tracks of one year.
        details: "full" keeps every point; "day"/"week" merge per bucket.
        num: If given, keep only the track at this positional index.

    Raises:
        ValueError: If ``details`` is not a known level.
    """

    level = DetailLevel(details)
    if level is DetailLevel.FULL:
        selected = list(tracks)
    else:
        selected = group_days(tracks, Granularity(level.value))

    if num is None:
        return selected
    return [t for i, t in enumerate(selected) if i == num]
