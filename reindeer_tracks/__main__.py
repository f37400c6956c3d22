"""Module entry point: python -m reindeer_tracks ..."""

from __future__ import annotations

from reindeer_tracks.cli import main


if __name__ == "__main__":
    raise SystemExit(main())
