from __future__ import annotations

import argparse
import json
import random
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import Final

from reindeer_tracks.models import SOURCE_TZ


AREAS: Final[list[tuple[str, float, float]]] = [
    ("hardangervidda", 60.1000000, 7.5000000),
    ("rondane", 61.9000000, 9.8000000),
    ("dovrefjell", 62.2700000, 9.4000000),
    ("setesdal", 59.2000000, 7.1000000),
]


@dataclass(frozen=True, slots=True)
class Individual:
    id: str
    name: str
    age_string: str
    lat: float
    lon: float


def generate_positions(*, rng: random.Random, ind: Individual, year: int, rows: int) -> list[dict[str, object]]:
    """Random-walk positions with grazing stays and occasional migrations."""

    cur = datetime(year, 1, 1, 8, 0, tzinfo=SOURCE_TZ)
    lat, lon = ind.lat, ind.lon
    out: list[dict[str, object]] = []
    for i in range(rows):
        if rng.random() < 0.05:
            # migration leg, a few km
            lat += rng.uniform(-0.03, 0.03)
            lon += rng.uniform(-0.06, 0.06)
        else:
            lat += rng.uniform(-0.0004, 0.0004)
            lon += rng.uniform(-0.0008, 0.0008)

        # Collars report every 1-3 hours, with the occasional long gap
        if rng.random() < 0.05:
            cur = cur + timedelta(hours=rng.uniform(12, 36))
        else:
            cur = cur + timedelta(minutes=rng.uniform(60, 180))
        if cur.year != year:
            break

        out.append(
            {
                "id": f"{ind.id}-{i}",
                "latitude": round(lat, 7),
                "longitude": round(lon, 7),
                "dateTime": cur.replace(tzinfo=None).isoformat(),
            }
        )
    return out


def main() -> int:
    p = argparse.ArgumentParser(description="Generate a fake raw yearly snapshot for demo/testing.")
    p.add_argument("--out-dir", type=str, default="data", help="Snapshot directory")
    p.add_argument("--year", type=int, default=2023, help="Year of the snapshot")
    p.add_argument("--individuals", type=int, default=5, help="Number of individuals")
    p.add_argument("--rows", type=int, default=2000, help="Positions per individual")
    p.add_argument("--seed", type=int, default=42, help="Random seed (reproducible)")
    args = p.parse_args()

    rng = random.Random(args.seed)
    vm: list[dict[str, object]] = []
    for n in range(args.individuals):
        area, lat, lon = rng.choice(AREAS)
        ind = Individual(
            id=str(10_000 + n),
            name=f"{area}-{n + 1:02d}",
            age_string=rng.choice(["Kalv ", "Voksen ", "1 år ", "2 år "]),
            lat=lat,
            lon=lon,
        )
        vm.append(
            {
                "id": ind.id,
                "name": ind.name,
                "ageString": ind.age_string,
                "specieName": "Villrein",
                "sex": rng.choice([1, 2]),
                "positions": generate_positions(rng=rng, ind=ind, year=args.year, rows=args.rows),
            }
        )

    out_path = Path(args.out_dir) / f"{args.year}.json"
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(json.dumps({"vm": vm, "positionLimitExceeded": False}), encoding="utf-8")

    print(f"Generated: {out_path} (individuals={len(vm)}, seed={args.seed})")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
