from __future__ import annotations

from pathlib import Path

import streamlit as st

from reindeer_tracks.buckets import summarize_track
from reindeer_tracks.config import StorageConfig
from reindeer_tracks.json_io import collect_for_year, list_years, track_to_json
from reindeer_tracks.models import AnimalTrack, DetailLevel
from reindeer_tracks.report import format_meter, stats_rows
from reindeer_tracks.views import select_tracks


@st.cache_data(show_spinner=False)
def _load_year(data_dir: str, year: str, mtime: float) -> list[AnimalTrack]:
    _ = mtime  # part of cache key so updated snapshots reload automatically
    return collect_for_year(data_dir, year)


def _latest_mtime(data_dir: Path, year: str) -> float:
    stamps = [f.stat().st_mtime for f in data_dir.glob(f"{year}*.json")]
    return max(stamps, default=0.0)


def _map_rows(tracks: list[AnimalTrack]) -> list[dict[str, object]]:
    rows: list[dict[str, object]] = []
    for t in tracks:
        for p in t.positions:
            rows.append({"name": t.name, "lat": p.latitude, "lon": p.longitude})
    return rows


def main() -> None:
    st.set_page_config(page_title="Villrein: GPS tracks per year", layout="wide")
    st.title("Villrein: tracks per individual and year")

    with st.sidebar:
        st.subheader("Data")
        data_dir = Path(st.text_input("Snapshot directory", value=str(StorageConfig.from_env().data_dir)))
        if not data_dir.exists():
            st.error(f"Directory not found: {str(data_dir)!r}")
            return
        years = list_years(data_dir)
        if not years:
            st.warning("No snapshots found. Run `python -m reindeer_tracks fetch <year>` first.")
            return
        year = st.selectbox("Year", options=years, index=len(years) - 1)
        details = st.radio("Detail level", options=[d.value for d in DetailLevel], index=1, horizontal=True)

    try:
        tracks = _load_year(str(data_dir), year, _latest_mtime(data_dir, year))
    except ValueError as exc:
        st.exception(exc)
        return

    names = ["(all)"] + [f"{i}: {t.name}" for i, t in enumerate(tracks)]
    choice = st.sidebar.selectbox("Individual", options=names)
    num = None if choice == "(all)" else names.index(choice) - 1
    shown = select_tracks(tracks, details, num)
    picked = tracks if num is None else [tracks[num]]

    st.subheader("Summary")
    c1, c2, c3 = st.columns(3)
    c1.metric("Individuals", str(len(shown)))
    c2.metric("Points shown", str(sum(len(t.positions) for t in shown)))
    c3.metric("Distance", format_meter(sum(summarize_track(t).total_distance_m for t in picked)))

    st.subheader("Positions")
    st.map(_map_rows(shown), latitude="lat", longitude="lon", size=20)

    st.subheader("Per individual")
    st.dataframe(stats_rows(picked), use_container_width=True)

    with st.expander("Raw JSON", expanded=False):
        st.json([track_to_json(t) for t in shown])

    st.caption(
        "Distances are great-circle distances on a spherical earth. Day/week levels merge each bucket into "
        "its bounding-box center and keep the summed distance."
    )


if __name__ == "__main__":
    main()
