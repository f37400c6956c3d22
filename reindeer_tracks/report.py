"""Per-individual summary statistics and their export."""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Iterable, Sequence

from reindeer_tracks.buckets import summarize_track
from reindeer_tracks.models import AnimalTrack

STATS_FIELDS: Sequence[str] = ("name", "ageString", "positions", "distance", "min", "avg", "max", "days")


def format_meter(meter: float) -> str:
    """Format meters as kilometers with two decimals, e.g. "12.34km"."""

    return f"{meter / 1000.0:.2f}km"


def stats_rows(tracks: Iterable[AnimalTrack]) -> list[dict[str, object]]:
    """One summary row per track, distances formatted in km."""

    rows: list[dict[str, object]] = []
    for t in tracks:
        s = summarize_track(t)
        rows.append(
            {
                "name": t.name,
                "ageString": t.age_description,
                "positions": s.point_count,
                "distance": format_meter(s.total_distance_m),
                "min": format_meter(s.min_day_distance_m),
                "avg": format_meter(s.avg_day_distance_m),
                "max": format_meter(s.max_day_distance_m),
                "days": s.day_count,
            }
        )
    return rows


def format_table(rows: Sequence[dict[str, object]]) -> str:
    """Render rows as a plain fixed-width text table."""

    if not rows:
        return "(no tracks)"
    widths = {k: max(len(k), *(len(str(r[k])) for r in rows)) for k in STATS_FIELDS}
    header = "  ".join(k.ljust(widths[k]) for k in STATS_FIELDS)
    lines = [header, "  ".join("-" * widths[k] for k in STATS_FIELDS)]
    for r in rows:
        lines.append("  ".join(str(r[k]).ljust(widths[k]) for k in STATS_FIELDS))
    return "\n".join(lines)


def write_stats_csv(rows: Sequence[dict[str, object]], out_path: str | Path) -> None:
    """Write summary rows to CSV."""

    p = Path(out_path)
    with p.open("w", encoding="utf-8", newline="") as f:
        w = csv.DictWriter(f, fieldnames=list(STATS_FIELDS))
        w.writeheader()
        w.writerows(rows)
