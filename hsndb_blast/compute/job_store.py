"""Bounded in-memory job store for the compute service.

Records are immutable snapshots; every change replaces the stored record.
The store evicts the least recently used job when it is full and removes
jobs older than a configured age on request.
"""

from __future__ import annotations

import dataclasses
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable

from hsndb_blast.domain import (
    JOB_STATUS_COMPLETED,
    JOB_STATUS_FAILED,
    JOB_STATUS_PENDING,
    JOB_STATUS_RUNNING,
    ResultSet,
    SearchParameters,
)


@dataclass(frozen=True)
class StoredBlastJob:
    """Server-side record of one BLAST job.

    Attributes:
        job_id: Job identifier issued on submit.
        status: One of `pending`, `running`, `completed`, `failed`.
        progress: Completion percentage in [0, 100].
        started_at: Submit time as epoch seconds.
        parameters: Submitted search parameters.
        results: Parsed results, set once the job completed.
        error: Failure message, set once the job failed.
        completed_at: Completion time as epoch seconds.
    """

    job_id: str
    status: str
    progress: int
    started_at: float
    parameters: SearchParameters
    results: ResultSet | None = None
    error: str | None = None
    completed_at: float | None = None


class BlastJobStore:
    """LRU-bounded mapping of job id to job record."""

    def __init__(self, max_size: int = 1000, clock: Callable[[], float] | None = None):
        """Initialize job store.

        Args:
            max_size: Maximum number of retained jobs.
            clock: Optional epoch-seconds provider used for age cleanup.

        Returns:
            None: This initializer does not return a value.

        Raises:
            ValueError: Raised when max_size is below one.
        """

        if max_size < 1:
            raise ValueError("max_size must be >= 1")
        self._max_size = max_size
        self._clock = clock or time.time
        self._jobs: OrderedDict[str, StoredBlastJob] = OrderedDict()

    def compute_job_put(self, job: StoredBlastJob) -> None:
        """Insert or replace one job record and mark it most recently used.

        Args:
            job: Job record to store.

        Returns:
            None: This method does not return a value.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        if job.job_id not in self._jobs and len(self._jobs) >= self._max_size:
            self._jobs.popitem(last=False)
        self._jobs[job.job_id] = job
        self._jobs.move_to_end(job.job_id)

    def compute_job_get(self, job_id: str) -> StoredBlastJob | None:
        """Return one job record and mark it most recently used."""

        job = self._jobs.get(job_id)
        if job is not None:
            self._jobs.move_to_end(job_id)
        return job

    def compute_job_update(self, job_id: str, **changes: object) -> StoredBlastJob | None:
        """Replace selected fields of a stored job.

        Args:
            job_id: Target job identifier.
            **changes: Field values to replace.

        Returns:
            StoredBlastJob | None: Updated record, or None when the job was evicted.

        Raises:
            TypeError: Raised when a change names an unknown field.
        """

        current = self._jobs.get(job_id)
        if current is None:
            return None
        updated = dataclasses.replace(current, **changes)
        self.compute_job_put(updated)
        return updated

    def compute_job_list(self) -> list[StoredBlastJob]:
        """Return all records, least recently used first, without touching order."""

        return list(self._jobs.values())

    def compute_job_count(self) -> int:
        return len(self._jobs)

    def compute_jobs_cleanup_expired(self, max_age_seconds: float) -> int:
        """Remove jobs started more than `max_age_seconds` ago.

        Args:
            max_age_seconds: Maximum retained job age.

        Returns:
            int: Number of removed jobs.

        Raises:
            ValueError: Raised when max_age_seconds is negative.
        """

        if max_age_seconds < 0:
            raise ValueError("max_age_seconds must be >= 0")

        now = self._clock()
        expired_ids = [job_id for job_id, job in self._jobs.items() if now - job.started_at > max_age_seconds]
        for job_id in expired_ids:
            del self._jobs[job_id]
        return len(expired_ids)

    def compute_jobs_stats(self) -> dict[str, int]:
        """Return job counts per status group and the configured capacity."""

        statuses = [job.status for job in self._jobs.values()]
        return {
            "total": len(statuses),
            "completed": statuses.count(JOB_STATUS_COMPLETED),
            "running": statuses.count(JOB_STATUS_RUNNING) + statuses.count(JOB_STATUS_PENDING),
            "failed": statuses.count(JOB_STATUS_FAILED),
            "maxSize": self._max_size,
        }
