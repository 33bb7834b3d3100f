"""Typed domain models shared across runtime layers.

This module provides immutable data contracts for the BLAST job lifecycle:
search parameters, job handles, status snapshots and result sets.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Final

BLAST_ALGORITHMS: Final[tuple[str, ...]] = ("blastp", "blastn", "blastx", "tblastn", "tblastx")

JOB_STATUS_PENDING: Final[str] = "pending"
JOB_STATUS_RUNNING: Final[str] = "running"
JOB_STATUS_COMPLETED: Final[str] = "completed"
JOB_STATUS_FAILED: Final[str] = "failed"

JOB_STATUSES: Final[tuple[str, ...]] = (
    JOB_STATUS_PENDING,
    JOB_STATUS_RUNNING,
    JOB_STATUS_COMPLETED,
    JOB_STATUS_FAILED,
)
JOB_TERMINAL_STATUSES: Final[frozenset[str]] = frozenset({JOB_STATUS_COMPLETED, JOB_STATUS_FAILED})

DEFAULT_JOB_FAILURE_MESSAGE: Final[str] = "BLAST job failed"

_JOB_STATUS_RANK: Final[dict[str, int]] = {
    JOB_STATUS_PENDING: 0,
    JOB_STATUS_RUNNING: 1,
    JOB_STATUS_COMPLETED: 2,
    JOB_STATUS_FAILED: 2,
}


@dataclass(frozen=True)
class HealthStatus:
    """Health response contract used by health-check surfaces.

    Attributes:
        status: Overall status text for service health.
        detail: Additional message suitable for operational diagnostics.
    """

    status: str
    detail: str


@dataclass(frozen=True)
class SearchParameters:
    """Parameters of one BLAST search, immutable once submitted.

    Attributes:
        sequence: Raw query sequence, optionally FASTA-prefixed.
        algorithm: BLAST program name.
        evalue: Significance threshold.
        matrix: Substitution matrix name.
        word_size: Optional word size override.
        gap_open: Optional gap opening cost.
        gap_extend: Optional gap extension cost.
        max_target_seqs: Optional maximum number of reported hits.
    """

    sequence: str
    algorithm: str = "blastp"
    evalue: float = 10.0
    matrix: str = "BLOSUM62"
    word_size: int | None = None
    gap_open: int | None = None
    gap_extend: int | None = None
    max_target_seqs: int | None = None


@dataclass(frozen=True)
class JobHandle:
    """Opaque identifier joining submission with later poll and fetch calls.

    Attributes:
        job_id: Compute service job identifier.
    """

    job_id: str


@dataclass(frozen=True)
class JobStatus:
    """One status snapshot of a submitted job.

    Attributes:
        job_id: Compute service job identifier.
        status: One of `pending`, `running`, `completed`, `failed`.
        progress: Completion percentage in [0, 100].
        estimated_time_remaining: Optional remaining seconds estimate.
        error: Failure message, set iff status is `failed`.
    """

    job_id: str
    status: str
    progress: int = 0
    estimated_time_remaining: int | None = None
    error: str | None = None

    def status_is_terminal(self) -> bool:
        """Return whether no further status transitions can occur.

        Returns:
            bool: True for `completed` and `failed`.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        return self.status in JOB_TERMINAL_STATUSES


@dataclass(frozen=True)
class Hit:
    """One aligned match between the query and a database protein."""

    id: str
    hsn_id: str
    gene_name: str
    protein_name: str
    evalue: float
    score: float
    identity: float
    positives: float
    gaps: int
    query_start: int
    query_end: int
    subject_start: int
    subject_end: int
    query_seq: str
    subject_seq: str
    alignment: str
    length: int
    description: str | None = None
    uniprot_id: str | None = None


@dataclass(frozen=True)
class ResultStatistics:
    """Karlin-Altschul statistics and database metadata of one search."""

    kappa: float
    lambda_: float
    entropy: float
    database: str
    database_version: str
    total_sequences: int


@dataclass(frozen=True)
class ResultSet:
    """Structured results of one completed job, fetched at most once.

    Attributes:
        job_id: Compute service job identifier.
        query_length: Length of the cleaned query sequence.
        database_size: Number of sequences in the searched database.
        total_hits: Number of hits in `hits`.
        hits: Hits ordered by ascending e-value.
        statistics: Search statistics block.
        execution_time: Wall-clock execution time in seconds.
    """

    job_id: str
    query_length: int
    database_size: int
    total_hits: int
    statistics: ResultStatistics
    execution_time: float
    hits: tuple[Hit, ...] = field(default_factory=tuple)


def domain_job_status_can_transition(previous_status: str | None, next_status: str) -> bool:
    """Return whether a status change respects monotonic job progression.

    Args:
        previous_status: Last accepted status, or None before the first poll.
        next_status: Newly observed status.

    Returns:
        bool: True when the transition is allowed.

    Raises:
        ValueError: Raised when a status value is unknown.
    """

    if next_status not in _JOB_STATUS_RANK:
        raise ValueError(f"unknown job status={next_status}")
    if previous_status is None:
        return True
    if previous_status not in _JOB_STATUS_RANK:
        raise ValueError(f"unknown job status={previous_status}")
    if previous_status in JOB_TERMINAL_STATUSES:
        return previous_status == next_status
    return _JOB_STATUS_RANK[next_status] >= _JOB_STATUS_RANK[previous_status]
