"""Bounded history of recently submitted searches."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timezone

from hsndb_blast.domain import SearchParameters


@dataclass(frozen=True)
class SearchHistoryEntry:
    """One submitted search and its latest known status.

    Attributes:
        job_id: Job identifier.
        submitted_at_utc: Submission timestamp.
        parameters: Submitted parameters.
        status: Latest known status (`submitted` until the first terminal status).
    """

    job_id: str
    submitted_at_utc: datetime
    parameters: SearchParameters
    status: str = "submitted"


class BlastSearchHistory:
    """Most-recent-first list of submitted searches, capped at `max_entries`."""

    def __init__(self, max_entries: int = 10):
        if max_entries < 1:
            raise ValueError("max_entries must be >= 1")
        self._max_entries = max_entries
        self._entries: list[SearchHistoryEntry] = []

    def history_add(self, job_id: str, parameters: SearchParameters) -> SearchHistoryEntry:
        """Record a new submission at the head of the history.

        Args:
            job_id: Job identifier.
            parameters: Submitted parameters.

        Returns:
            SearchHistoryEntry: Created entry.

        Raises:
            ValueError: Raised when job_id is blank.
        """

        if not job_id.strip():
            raise ValueError("job_id must not be blank")
        entry = SearchHistoryEntry(
            job_id=job_id,
            submitted_at_utc=datetime.now(timezone.utc),
            parameters=parameters,
        )
        self._entries = [entry, *self._entries[: self._max_entries - 1]]
        return entry

    def history_update_status(self, job_id: str, status: str) -> None:
        """Update the status of a known entry; unknown ids are ignored."""

        self._entries = [
            replace(entry, status=status) if entry.job_id == job_id else entry for entry in self._entries
        ]

    def history_entries(self) -> tuple[SearchHistoryEntry, ...]:
        """Return entries, most recent first."""

        return tuple(self._entries)
