"""Exceptions raised while retrieving positions from the source."""

from __future__ import annotations


class FetchError(RuntimeError):
    """Base class for retrieval failures of a single individual or request."""


class SessionError(FetchError):
    """Login to the source failed or the session could not be established."""


class FetchUnrecoverable(FetchError):
    """The source kept truncating responses at the finest allowed segmentation."""

    def __init__(self, individual_id: str, year: int, depth: int) -> None:
        super().__init__(
            f"Position limit still exceeded for individual {individual_id} in {year} "
            f"after splitting the year into {2 ** depth} segments"
        )
        self.individual_id = individual_id
        self.year = year
        self.depth = depth


class FetchCancelled(FetchError):
    """Retrieval was cancelled between two requests."""
