"""Recursive bisection of request date ranges."""

from __future__ import annotations

from typing import Sequence

from reindeer_tracks.models import DateRange


def split_ranges(ranges: Sequence[DateRange], depth: int) -> list[DateRange]:
    """Bisect every range ``depth`` times.

    Args:
        ranges: Ranges in chronological order.
        depth: Tree depth; each input range becomes ``2**depth`` equal parts.

    Returns:
        Contiguous sub-ranges, left to right, covering the input exactly.

    Raises:
        ValueError: If depth is negative.
    """

    if depth < 0:
        raise ValueError(f"depth must be >= 0, got {depth}")

    out = list(ranges)
    for _ in range(depth):
        halves: list[DateRange] = []
        for r in out:
            mid = r.midpoint
            halves.append(DateRange(start=r.start, end=mid))
            halves.append(DateRange(start=mid, end=r.end))
        out = halves
    return out


def segment(ranges: Sequence[DateRange], degree: int) -> list[DateRange]:
    """Split every range into ``degree`` equal parts.

    ``degree`` is a segment count and must be a power of two (1, 2, 4, ...);
    ``segment(ranges, 1)`` returns the ranges unchanged.

    Raises:
        ValueError: If degree is not a positive power of two.
    """

    if degree < 1 or degree & (degree - 1):
        raise ValueError(f"degree must be a positive power of two, got {degree}")
    return split_ranges(ranges, degree.bit_length() - 1)
