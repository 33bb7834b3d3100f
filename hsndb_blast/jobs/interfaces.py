"""Typed interfaces for job-layer lifecycle responsibilities."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Protocol

from hsndb_blast.domain import HealthStatus, JobHandle, JobStatus, PollError, ResultSet, SearchParameters

POLLER_STATE_IDLE = "idle"
POLLER_STATE_POLLING = "polling"
POLLER_STATE_STOPPED = "stopped"

SERVER_STATUS_UNKNOWN = "unknown"
SERVER_STATUS_ONLINE = "online"
SERVER_STATUS_OFFLINE = "offline"

StatusCallback = Callable[[JobHandle, JobStatus], None]
PollErrorCallback = Callable[[JobHandle, PollError], None]


@dataclass(frozen=True)
class CoordinatorSnapshot:
    """Consolidated observable state of one job lifecycle coordinator.

    Attributes:
        job_id: Current job identifier, None when idle.
        status: Latest accepted status snapshot.
        result: Fetched result set, present only after completion.
        is_submitting: Submission request in flight.
        is_polling: Status poller actively polling.
        is_loading_result: Result fetch in flight.
        is_searching: Latest status is `pending` or `running`.
        is_completed: Latest status is `completed`.
        is_failed: Latest status is `failed`.
        progress: Latest progress percentage, 0 without status.
        estimated_time_remaining: Latest remaining seconds estimate.
        current_error: Message of the single surfaced error.
        current_error_code: Stable code of the surfaced error.
        server_status: Last observed compute service reachability: `unknown`, `online` or `offline`.
    """

    job_id: str | None
    status: JobStatus | None
    result: ResultSet | None
    is_submitting: bool
    is_polling: bool
    is_loading_result: bool
    is_searching: bool
    is_completed: bool
    is_failed: bool
    progress: int
    estimated_time_remaining: int | None
    current_error: str | None
    current_error_code: str | None
    server_status: str = SERVER_STATUS_UNKNOWN


class JobSubmitterPort(Protocol):
    """Port definition for submitting validated searches."""

    async def job_submit(self, parameters: SearchParameters) -> JobHandle:
        """Submit one search and return its job handle.

        Args:
            parameters: Validated search parameters.

        Returns:
            JobHandle: Handle of the created job.

        Raises:
            SubmissionRejectedError: Raised when the service rejects the request.
            BlastTransportError: Raised when the service cannot be reached.
        """


class StatusPollerPort(Protocol):
    """Port definition for background status polling of one job at a time."""

    def job_poll_start(
        self,
        handle: JobHandle,
        on_status: StatusCallback,
        on_error: PollErrorCallback,
    ) -> None:
        """Start polling one job, stopping any previous session first.

        Args:
            handle: Job to poll.
            on_status: Receives each accepted status snapshot.
            on_error: Receives the error that ended polling, when polling gives up.

        Returns:
            None: Polling continues in the background.

        Raises:
            RuntimeError: Raised when no event loop is running.
        """

    def job_poll_cancel(self) -> None:
        """Stop future ticks and discard any in-flight response."""

    def job_poll_state(self) -> str:
        """Return `idle`, `polling` or `stopped`."""


class ResultFetcherPort(Protocol):
    """Port definition for cached result retrieval."""

    async def job_fetch_results(self, handle: JobHandle) -> ResultSet:
        """Return the result set of one completed job.

        Args:
            handle: Completed job.

        Returns:
            ResultSet: Cached or freshly fetched results.

        Raises:
            ResultNotReadyError: Raised when the job has not completed yet.
            ResultUnavailableError: Raised for any other failure.
        """

    def job_fetch_clear(self) -> None:
        """Drop cached results and detach in-flight fetches."""


class ServerHealthPort(Protocol):
    """Port definition for probing compute service liveness before submitting."""

    async def adapter_check_health(self) -> HealthStatus:
        """Return the service-reported health status.

        Returns:
            HealthStatus: Status `healthy` when the service accepts work.

        Raises:
            BlastTransportError: Raised when the service cannot be reached.
        """
