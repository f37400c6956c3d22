"""Command-line interface for reindeer_tracks.

Run:
    python -m reindeer_tracks fetch 2023
    python -m reindeer_tracks stats 2023
    python -m reindeer_tracks build
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from time import perf_counter

from reindeer_tracks.config import ApiConfig, StorageConfig
from reindeer_tracks.json_io import (
    collect_for_year,
    list_years,
    write_json,
    write_raw_snapshot,
    write_year_outputs,
)
from reindeer_tracks.models import DEFAULT_MAX_SPLIT_DEPTH, DEFAULT_MIN_DISTANCE_M
from reindeer_tracks.report import format_table, stats_rows, write_stats_csv

BANNER = r"""
 __     ___ _ _           _
 \ \   / (_) | |_ __ ___ (_)_ __
  \ \ / /| | | | '__/ _ \| | '_ \
   \ V / | | | | | |  __/| | | | |
    \_/  |_|_|_|_|  \___||_|_| |_|
"""


def _non_negative_int(text: str) -> int:
    value = int(text)
    if value < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {value}")
    return value


def _cmd_fetch(args: argparse.Namespace) -> int:
    from reindeer_tracks.api_client import VillreinApiClient
    from reindeer_tracks.errors import FetchError
    from reindeer_tracks.fetcher import fetch_full_year
    from reindeer_tracks.timeutils import tzinfo_from_name

    try:
        cfg = ApiConfig.from_env()
    except ValueError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2
    client = VillreinApiClient(cfg)
    started = perf_counter()

    def _progress(completed: int, total: int) -> None:
        if args.quiet:
            return
        elapsed = perf_counter() - started
        print(f"\rFetching {args.year}: {completed}/{total} elapsed={elapsed:6.1f}s", end="", file=sys.stderr, flush=True)

    try:
        result = fetch_full_year(
            client,
            args.year,
            concurrency=args.concurrency,
            progress=_progress,
            max_depth=args.max_depth,
            tz=tzinfo_from_name(cfg.tz_name),
        )
    except FetchError as exc:
        print(f"Fetch failed: {exc}", file=sys.stderr)
        return 1
    if not args.quiet:
        print(file=sys.stderr)

    for failure in result.failures:
        print(f"Failed individual {failure.individual_id}: {failure.error}", file=sys.stderr)

    existing = Path(args.data_dir) / f"{args.year}.json"
    if not result.ok and existing.exists():
        # an incomplete fetch never replaces a stored snapshot
        print(f"{len(result.failures)} individuals failed; kept existing {existing}", file=sys.stderr)
        return 1
    path = write_raw_snapshot(args.data_dir, args.year, result.payload)
    print(f"Saved: {path} (entries={len(result.payload.individuals)})")
    return 0 if result.ok else 1


def _cmd_stats(args: argparse.Namespace) -> int:
    if not args.quiet:
        print(BANNER)
    tracks = collect_for_year(args.data_dir, args.year)
    rows = stats_rows(tracks)
    write_year_outputs(args.out_dir, args.year, tracks, args.min_distance)
    if args.csv:
        write_stats_csv(rows, args.csv)
    if not args.quiet:
        print(format_table(rows))
    return 0


def _cmd_build(args: argparse.Namespace) -> int:
    years = list_years(args.data_dir)
    for year in years:
        if not args.quiet:
            print(f"Generating {year}", file=sys.stderr, flush=True)
        tracks = collect_for_year(args.data_dir, year)
        write_year_outputs(args.out_dir, year, tracks, args.min_distance)
    write_json(args.out_dir, "years", years)
    if not args.quiet:
        print(f"{len(years)} years generated")
    return 0


def _cmd_years(args: argparse.Namespace) -> int:
    for year in list_years(args.data_dir):
        print(year)
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build CLI parser."""

    storage = StorageConfig.from_env()
    p = argparse.ArgumentParser(prog="reindeer_tracks", description="Fetch and aggregate reindeer GPS tracks")
    p.add_argument("--data-dir", type=Path, default=storage.data_dir, help="Raw snapshot directory (DATA_DIR)")
    p.add_argument("--out-dir", type=Path, default=storage.out_dir, help="Artifact output directory (OUT_DIR)")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_fetch = sub.add_parser("fetch", help="Download every individual's positions for a year")
    p_fetch.add_argument("year", type=int, help="Year to download")
    p_fetch.add_argument("--concurrency", type=int, default=1, help="Individuals fetched in parallel")
    p_fetch.add_argument(
        "--max-depth",
        type=_non_negative_int,
        default=DEFAULT_MAX_SPLIT_DEPTH,
        help="Give up after splitting the year into 2**max-depth segments",
    )
    p_fetch.add_argument("-q", "--quiet", action="store_true", help="No progress output")
    p_fetch.set_defaults(func=_cmd_fetch)

    p_stats = sub.add_parser("stats", help="Print per-individual statistics and write artifacts for a year")
    p_stats.add_argument("year", nargs="?", default="2001", help="Year (default 2001)")
    p_stats.add_argument("-q", "--quiet", action="store_true", help="No table output")
    p_stats.add_argument("--csv", type=str, default=None, help="Also write the statistics to this CSV")
    p_stats.add_argument(
        "--min-distance",
        type=float,
        default=DEFAULT_MIN_DISTANCE_M,
        help="Threshold in meters for the optimized full artifact",
    )
    p_stats.set_defaults(func=_cmd_stats)

    p_build = sub.add_parser("build", help="Write artifacts for every stored year plus years.json")
    p_build.add_argument("-q", "--quiet", action="store_true", help="No progress output")
    p_build.add_argument("--min-distance", type=float, default=DEFAULT_MIN_DISTANCE_M, help="Threshold in meters")
    p_build.set_defaults(func=_cmd_build)

    p_years = sub.add_parser("years", help="List stored years")
    p_years.set_defaults(func=_cmd_years)

    return p


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint."""

    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
