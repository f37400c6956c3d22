"""Adaptive segmented retrieval of a year of positions per individual.

The source caps the number of positions per response and signals a cut-off
with ``positionLimitExceeded``. An individual's year is requested range by
range; on the first truncated page the attempt is abandoned and the whole
year is requested again with twice as many (half as wide) ranges.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from typing import Any, Callable, Protocol

from reindeer_tracks.errors import FetchCancelled, FetchError, FetchUnrecoverable
from reindeer_tracks.models import DEFAULT_MAX_SPLIT_DEPTH, SOURCE_TZ, DateRange
from reindeer_tracks.segments import split_ranges
from reindeer_tracks.timeutils import year_range

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


@dataclass(slots=True)
class PositionsPage:
    """Wire document ``{"vm": [...], "positionLimitExceeded": bool}``."""

    individuals: list[dict[str, Any]] = field(default_factory=list)
    position_limit_exceeded: bool = False

    @classmethod
    def from_json(cls, raw: dict[str, Any]) -> PositionsPage:
        """Build a page from a decoded reply.

        Raises:
            FetchError: If the reply is not a ``{vm, positionLimitExceeded}`` object.
        """

        if not isinstance(raw, dict) or not isinstance(raw.get("vm") or [], list):
            raise FetchError(f"Unexpected positions reply: {type(raw).__name__}")
        return cls(
            individuals=list(raw.get("vm") or []),
            position_limit_exceeded=bool(raw.get("positionLimitExceeded", False)),
        )

    def to_json(self) -> dict[str, Any]:
        return {"vm": self.individuals, "positionLimitExceeded": self.position_limit_exceeded}


class PositionSource(Protocol):
    """What the orchestrator needs from the data source."""

    def ensure_session(self) -> None:
        """Establish an authenticated session; raise SessionError on failure."""

    def list_individuals(self, year: int) -> list[dict[str, Any]]:
        """Return the individuals tracked during ``year`` (each with an ``id``)."""

    def fetch_positions(self, individual_id: str, date_range: DateRange) -> PositionsPage:
        """Return one page of positions for ``date_range``."""


@dataclass(frozen=True, slots=True)
class FetchFailure:
    """An individual whose year could not be retrieved."""

    individual_id: str
    error: str


@dataclass(slots=True)
class FetchResult:
    """Outcome of a full-year batch."""

    payload: PositionsPage
    failures: list[FetchFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


def fetch_individual(
    source: PositionSource,
    individual_id: str,
    year: int,
    *,
    max_depth: int = DEFAULT_MAX_SPLIT_DEPTH,
    tz: tzinfo = SOURCE_TZ,
    now: datetime | None = None,
    cancel: threading.Event | None = None,
) -> PositionsPage:
    """Retrieve one individual's year, splitting the range until nothing is truncated.

    Args:
        source: Data source.
        individual_id: Source id of the individual.
        year: Calendar year.
        max_depth: Largest split depth tried (``2**max_depth`` segments).
        tz: Zone the year boundaries are expressed in.
        now: Clock override for the current-year clip.
        cancel: Checked before every request.

    Returns:
        All pages of the successful attempt concatenated in chronological order.

    Raises:
        FetchUnrecoverable: If even ``2**max_depth`` segments are truncated.
        FetchCancelled: If ``cancel`` was set.
        SessionError: If the session cannot be established.
        ValueError: If ``max_depth`` is negative.
    """

    if max_depth < 0:
        raise ValueError(f"max_depth must be >= 0, got {max_depth}")
    source.ensure_session()
    whole_year = year_range(year, tz, now)

    for depth in range(max_depth + 1):
        result = PositionsPage()
        for date_range in split_ranges([whole_year], depth):
            if cancel is not None and cancel.is_set():
                raise FetchCancelled(f"Fetch of individual {individual_id} cancelled")
            page = source.fetch_positions(individual_id, date_range)
            result.individuals.extend(page.individuals)
            result.position_limit_exceeded = page.position_limit_exceeded
            if page.position_limit_exceeded:
                break
        if not result.position_limit_exceeded:
            return result
        logger.info(
            "Position limit exceeded for %s in %s, retrying with %s segments",
            individual_id,
            year,
            2 ** (depth + 1),
        )

    raise FetchUnrecoverable(individual_id, year, max_depth)


def fetch_full_year(
    source: PositionSource,
    year: int,
    *,
    concurrency: int = 1,
    progress: ProgressCallback | None = None,
    max_depth: int = DEFAULT_MAX_SPLIT_DEPTH,
    tz: tzinfo = SOURCE_TZ,
    now: datetime | None = None,
    cancel: threading.Event | None = None,
) -> FetchResult:
    """Retrieve every individual of ``year`` with a bounded worker pool.

    Individuals are fetched by at most ``concurrency`` workers. ``progress`` is
    called with (completed, total) after each individual finishes, whether it
    succeeded or not. A failed individual is recorded and the batch goes on.

    Returns:
        FetchResult whose payload lists the individuals' entries, and whose
        failures are listed, in the order the source listed the individuals.

    Raises:
        ValueError: If ``max_depth`` is negative.
    """

    if max_depth < 0:
        raise ValueError(f"max_depth must be >= 0, got {max_depth}")
    workers = max(1, int(concurrency))
    source.ensure_session()
    individuals = source.list_individuals(year)
    total = len(individuals)
    logger.info("Fetching %s individuals for %s (workers=%s)", total, year, workers)

    pages: list[PositionsPage | None] = [None] * total
    failed: dict[int, FetchFailure] = {}
    completed = 0

    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures: dict[Future[PositionsPage], tuple[int, str]] = {}
        for idx, ind in enumerate(individuals):
            ind_id = str(ind["id"])
            fut = executor.submit(
                fetch_individual,
                source,
                ind_id,
                year,
                max_depth=max_depth,
                tz=tz,
                now=now,
                cancel=cancel,
            )
            futures[fut] = (idx, ind_id)

        for fut in as_completed(futures):
            idx, ind_id = futures[fut]
            try:
                pages[idx] = fut.result()
            except FetchError as exc:
                logger.error("Failed to fetch individual %s: %s", ind_id, exc)
                failed[idx] = FetchFailure(individual_id=ind_id, error=str(exc))
            except Exception as exc:
                logger.exception("Unexpected error while fetching individual %s", ind_id)
                failed[idx] = FetchFailure(individual_id=ind_id, error=f"{type(exc).__name__}: {exc}")
            completed += 1
            if progress is not None:
                progress(completed, total)

    payload = PositionsPage()
    for page in pages:
        if page is not None:
            payload.individuals.extend(page.individuals)
    return FetchResult(payload=payload, failures=[failed[idx] for idx in sorted(failed)])
