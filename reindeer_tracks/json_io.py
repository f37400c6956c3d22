"""JSON input/output for raw yearly snapshots and derived track artifacts."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable, Iterator, Sequence

from reindeer_tracks.fetcher import PositionsPage
from reindeer_tracks.models import DEFAULT_MIN_DISTANCE_M, AnimalTrack, Granularity, RawIndividual, RawPosition
from reindeer_tracks.timeutils import parse_timestamp
from reindeer_tracks.tracks import assemble_tracks, group_days, optimize_tracks

logger = logging.getLogger(__name__)


def _year_of(path: Path) -> str:
    return path.stem.split("-")[0]


def list_years(data_dir: str | Path) -> list[str]:
    """Distinct years of the raw snapshots in ``data_dir``.

    Files are named ``{year}.json`` or ``{year}-{part}.json``.
    """

    years: list[str] = []
    for f in sorted(Path(data_dir).glob("*.json")):
        year = _year_of(f)
        if year not in years:
            years.append(year)
    return years


def year_files(data_dir: str | Path, year: str | int) -> list[Path]:
    """Snapshot files of ``year`` in filename order."""

    return [f for f in sorted(Path(data_dir).glob("*.json")) if _year_of(f) == str(year)]


def load_year_documents(data_dir: str | Path, year: str | int) -> list[dict[str, Any]]:
    """Load all raw snapshot documents of a year.

    Raises:
        ValueError: If a file is not valid JSON.
    """

    docs: list[dict[str, Any]] = []
    for f in year_files(data_dir, year):
        try:
            docs.append(json.loads(f.read_text(encoding="utf-8")))
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid JSON snapshot: {f}") from exc
    return docs


def _parse_position(raw: dict[str, Any]) -> RawPosition:
    pos_id = raw.get("id")
    return RawPosition(
        position_id=None if pos_id is None else str(pos_id),
        latitude=float(raw["latitude"]),
        longitude=float(raw["longitude"]),
        timestamp=parse_timestamp(raw["dateTime"]),
    )


def iter_raw_individuals(documents: Iterable[dict[str, Any]]) -> Iterator[RawIndividual]:
    """Yield RawIndividual entries from snapshot documents.

    Notes:
        Entries missing required fields (id, name, positions with
        latitude/longitude/dateTime) are skipped with a warning.
    """

    for doc in documents:
        for entry in doc.get("vm") or []:
            try:
                yield RawIndividual(
                    id=str(entry["id"]),
                    name=str(entry.get("name") or ""),
                    age_string=str(entry.get("ageString") or ""),
                    positions=tuple(_parse_position(p) for p in entry.get("positions") or []),
                )
            except (KeyError, ValueError, TypeError) as exc:
                logger.warning("Skipping malformed individual %r: %s", entry.get("id"), exc)
                continue


def collect_for_year(data_dir: str | Path, year: str | int) -> list[AnimalTrack]:
    """Load every snapshot of ``year`` and assemble one track per individual."""

    tracks = assemble_tracks(iter_raw_individuals(load_year_documents(data_dir, year)))
    logger.debug("Collected %s tracks for %s", len(tracks), year)
    return tracks


def track_to_json(track: AnimalTrack) -> dict[str, Any]:
    """Serialize a track in the artifact shape consumed by the map front end."""

    return {
        "id": track.id,
        "name": track.name,
        "ageString": track.age_description,
        "positions": [
            {
                "point": [p.longitude, p.latitude],
                "date": p.timestamp.isoformat(),
                "dist": p.distance_m,
            }
            for p in track.positions
        ],
    }


def write_json(out_dir: str | Path, name: str, data: Any) -> Path:
    """Write ``data`` to ``{out_dir}/{name}.json`` (compact) and return the path."""

    p = Path(out_dir)
    p.mkdir(parents=True, exist_ok=True)
    target = p / f"{name}.json"
    tmp = target.with_suffix(".json.tmp")
    tmp.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")
    tmp.replace(target)
    return target


def write_year_outputs(
    out_dir: str | Path,
    year: str | int,
    tracks: Sequence[AnimalTrack],
    min_distance_m: float = DEFAULT_MIN_DISTANCE_M,
) -> list[Path]:
    """Write the full (optimized), day and week artifacts of a year."""

    artifacts = {
        f"{year}-full": optimize_tracks(tracks, min_distance_m),
        f"{year}-day": group_days(tracks, Granularity.DAY),
        f"{year}-week": group_days(tracks, Granularity.WEEK),
    }
    return [write_json(out_dir, name, [track_to_json(t) for t in derived]) for name, derived in artifacts.items()]


def write_raw_snapshot(
    data_dir: str | Path,
    year: str | int,
    page: PositionsPage,
    part: str | None = None,
) -> Path:
    """Persist a fetched ``{vm, positionLimitExceeded}`` document for ``year``."""

    name = f"{year}" if part is None else f"{year}-{part}"
    return write_json(data_dir, name, page.to_json())
