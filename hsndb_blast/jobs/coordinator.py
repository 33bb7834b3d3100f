"""Job lifecycle coordinator composing validation, submission, polling and result fetch.

The coordinator owns the single "current job" slot. Every reset (`job_clear()`
or a new submission) bumps a generation counter, and poll callbacks or fetches
carrying an older generation are discarded.
"""

from __future__ import annotations

import asyncio
from functools import partial
from typing import Callable

import structlog

from hsndb_blast.domain import (
    DEFAULT_JOB_FAILURE_MESSAGE,
    JOB_STATUS_COMPLETED,
    JOB_STATUS_FAILED,
    JOB_STATUS_PENDING,
    JOB_STATUS_RUNNING,
    BlastJobError,
    BlastTransportError,
    JobFailedError,
    JobHandle,
    JobStatus,
    PollError,
    ResultNotReadyError,
    ResultSet,
    ResultUnavailableError,
    SearchParameters,
    SearchValidationError,
    SubmissionRejectedError,
    domain_build_stage_event,
    domain_detect_sequence_type,
    domain_job_status_can_transition,
    domain_validate_search_parameters,
    domain_validate_sequence,
)

from .history import BlastSearchHistory
from .interfaces import (
    POLLER_STATE_POLLING,
    SERVER_STATUS_OFFLINE,
    SERVER_STATUS_ONLINE,
    SERVER_STATUS_UNKNOWN,
    CoordinatorSnapshot,
    JobSubmitterPort,
    ResultFetcherPort,
    ServerHealthPort,
    StatusPollerPort,
)

logger = structlog.get_logger(__name__)

SnapshotListener = Callable[[CoordinatorSnapshot], None]


class BlastJobCoordinator:
    """State machine `Idle -> Submitting -> Polling -> {Completed | Failed}` for one job at a time."""

    def __init__(
        self,
        submitter: JobSubmitterPort,
        poller: StatusPollerPort,
        result_fetcher: ResultFetcherPort,
        history: BlastSearchHistory | None = None,
        health_checker: ServerHealthPort | None = None,
    ):
        """Initialize coordinator collaborators.

        Args:
            submitter: Job submitter.
            poller: Status poller owned exclusively by this coordinator.
            result_fetcher: Result fetcher owned exclusively by this coordinator.
            history: Optional search history updated on submit and terminal status.
            health_checker: Optional liveness check run before every submission.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when a collaborator is missing.
        """

        if submitter is None:
            raise ValueError("submitter must not be None")
        if poller is None:
            raise ValueError("poller must not be None")
        if result_fetcher is None:
            raise ValueError("result_fetcher must not be None")

        self._submitter = submitter
        self._poller = poller
        self._result_fetcher = result_fetcher
        self._history = history
        self._health_checker = health_checker
        self._server_status = SERVER_STATUS_UNKNOWN

        self._generation = 0
        self._handle: JobHandle | None = None
        self._status: JobStatus | None = None
        self._result: ResultSet | None = None
        self._is_submitting = False
        self._is_loading_result = False
        self._request_error: BlastJobError | None = None
        self._runtime_error: BlastJobError | None = None
        self._fetch_started = False
        self._fetch_task: asyncio.Task | None = None
        self._listeners: list[SnapshotListener] = []
        self._timeline: list[dict[str, object]] = []
        self._settled_event = asyncio.Event()
        self._settled_event.set()

    async def job_submit(self, parameters: SearchParameters) -> JobHandle | None:
        """Validate and submit one search, then start polling it.

        Any previous job is stopped and discarded first. Validation and
        submission failures are recorded as the current error instead of raised.

        Args:
            parameters: Search parameters.

        Returns:
            JobHandle | None: Handle of the new job, None when no job was created.

        Raises:
            RuntimeError: Raised when called outside a running event loop.
        """

        self._coordinator_reset()
        generation = self._generation

        try:
            domain_validate_sequence(parameters.sequence)
            domain_validate_search_parameters(parameters)
        except SearchValidationError as error:
            self._request_error = error
            self._coordinator_record("validate", "failed", details={"error_code": error.error_code})
            logger.info("blast_submit_invalid", error_code=error.error_code, error=str(error))
            self._coordinator_settle()
            self._coordinator_notify()
            return None

        self._is_submitting = True
        self._coordinator_record(
            "submit",
            "started",
            details={
                "algorithm": parameters.algorithm,
                "sequence_type": domain_detect_sequence_type(parameters.sequence),
            },
        )
        self._coordinator_notify()

        if self._health_checker is not None:
            server_status = await self.job_check_server_health()
            if generation != self._generation:
                return None
            if server_status != SERVER_STATUS_ONLINE:
                self._coordinator_fail_submit(BlastTransportError("BLAST server is not responding"))
                return None

        try:
            handle = await self._submitter.job_submit(parameters)
        except (SubmissionRejectedError, BlastTransportError) as error:
            if generation != self._generation:
                return None
            if isinstance(error, BlastTransportError):
                self._server_status = SERVER_STATUS_OFFLINE
            else:
                self._server_status = SERVER_STATUS_ONLINE
            self._coordinator_fail_submit(error)
            return None
        except Exception as error:  # pylint: disable=broad-exception-caught
            if generation != self._generation:
                return None
            submit_error = BlastTransportError(f"Unexpected submission failure: {error}")
            submit_error.__cause__ = error
            self._coordinator_fail_submit(submit_error)
            return None

        if generation != self._generation:
            logger.info("blast_submit_superseded", job_id=handle.job_id)
            return None

        self._is_submitting = False
        self._server_status = SERVER_STATUS_ONLINE
        self._handle = handle
        self._coordinator_record("submit", "completed", job_id=handle.job_id)
        if self._history is not None:
            self._history.history_add(handle.job_id, parameters)

        self._poller.job_poll_start(
            handle,
            on_status=partial(self._coordinator_on_status, generation),
            on_error=partial(self._coordinator_on_poll_error, generation),
        )
        self._coordinator_record("poll", "started", job_id=handle.job_id)
        self._coordinator_notify()
        return handle

    def job_clear(self) -> None:
        """Discard the current job and stop polling; safe to call in any state."""

        had_job = self._handle is not None
        self._coordinator_reset()
        self._settled_event.set()
        if had_job:
            logger.info("blast_job_cleared")
        self._coordinator_record("clear", "completed")
        self._coordinator_notify()

    def job_snapshot(self) -> CoordinatorSnapshot:
        """Return the consolidated observable state.

        Returns:
            CoordinatorSnapshot: Immutable snapshot of the current slot.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        job_status = self._status
        status_value = job_status.status if job_status is not None else None
        current_error, current_error_code = self._coordinator_current_error()
        return CoordinatorSnapshot(
            job_id=self._handle.job_id if self._handle is not None else None,
            status=job_status,
            result=self._result,
            is_submitting=self._is_submitting,
            is_polling=self._handle is not None and self._poller.job_poll_state() == POLLER_STATE_POLLING,
            is_loading_result=self._is_loading_result,
            is_searching=status_value in (JOB_STATUS_PENDING, JOB_STATUS_RUNNING),
            is_completed=status_value == JOB_STATUS_COMPLETED,
            is_failed=status_value == JOB_STATUS_FAILED,
            progress=job_status.progress if job_status is not None else 0,
            estimated_time_remaining=job_status.estimated_time_remaining if job_status is not None else None,
            current_error=current_error,
            current_error_code=current_error_code,
            server_status=self._server_status,
        )

    async def job_check_server_health(self) -> str:
        """Check the compute service and record whether it is reachable.

        Returns:
            str: `online`, `offline`, or the last known status when no checker is configured.

        Raises:
            RuntimeError: This method records check failures instead of raising.
        """

        if self._health_checker is None:
            return self._server_status

        try:
            health_status = await self._health_checker.adapter_check_health()
        except BlastTransportError as error:
            logger.warning("blast_server_unreachable", error=str(error))
            server_status = SERVER_STATUS_OFFLINE
        except Exception:  # pylint: disable=broad-exception-caught
            logger.exception("blast_health_check_failed")
            server_status = SERVER_STATUS_OFFLINE
        else:
            server_status = SERVER_STATUS_ONLINE if health_status.status == "healthy" else SERVER_STATUS_OFFLINE
            if server_status == SERVER_STATUS_OFFLINE:
                logger.warning("blast_server_unhealthy", status=health_status.status, detail=health_status.detail)

        self._server_status = server_status
        self._coordinator_notify()
        return server_status

    async def job_wait_until_settled(self, timeout_seconds: float | None = None) -> CoordinatorSnapshot:
        """Wait until the current job has a result, a failure, a surfaced error or was cleared.

        Args:
            timeout_seconds: Optional wait limit.

        Returns:
            CoordinatorSnapshot: Snapshot taken after settling.

        Raises:
            asyncio.TimeoutError: Raised when the wait limit elapses first.
        """

        settled_event = self._settled_event
        if timeout_seconds is None:
            await settled_event.wait()
        else:
            await asyncio.wait_for(settled_event.wait(), timeout=timeout_seconds)
        return self.job_snapshot()

    def job_add_listener(self, listener: SnapshotListener) -> None:
        """Register a callback receiving a snapshot after every state change."""

        self._listeners.append(listener)

    def job_remove_listener(self, listener: SnapshotListener) -> None:
        """Unregister a previously added listener; unknown listeners are ignored."""

        if listener in self._listeners:
            self._listeners.remove(listener)

    def job_timeline(self) -> list[dict[str, object]]:
        """Return a copy of the structured stage timeline of the current job."""

        return list(self._timeline)

    def job_history(self) -> BlastSearchHistory | None:
        """Return the attached search history, if any."""

        return self._history

    def _coordinator_on_status(self, generation: int, handle: JobHandle, job_status: JobStatus) -> None:
        """Accept one polled status snapshot for the current job.

        Args:
            generation: Generation the poll session was started in.
            handle: Polled job.
            job_status: Fresh status snapshot.

        Returns:
            None: Updates coordinator state as side effect.

        Raises:
            RuntimeError: This callback does not raise runtime errors.
        """

        if generation != self._generation or self._handle != handle:
            return

        self._server_status = SERVER_STATUS_ONLINE
        previous_status = self._status.status if self._status is not None else None
        if not domain_job_status_can_transition(previous_status, job_status.status):
            logger.warning(
                "blast_status_regression_ignored",
                job_id=handle.job_id,
                previous_status=previous_status,
                status=job_status.status,
            )
            return

        self._status = job_status
        self._coordinator_record(
            "poll",
            "tick",
            job_id=handle.job_id,
            details={"status": job_status.status, "progress": job_status.progress},
        )

        if job_status.status == JOB_STATUS_FAILED:
            self._coordinator_record("poll", "failed", job_id=handle.job_id, details={"error": job_status.error})
            logger.warning("blast_job_failed", job_id=handle.job_id, error=job_status.error)
            self._coordinator_update_history(handle, JOB_STATUS_FAILED)
            self._coordinator_settle()
        elif job_status.status == JOB_STATUS_COMPLETED:
            self._coordinator_record("poll", "completed", job_id=handle.job_id)
            self._coordinator_update_history(handle, JOB_STATUS_COMPLETED)
            self._coordinator_start_fetch(generation, handle)

        self._coordinator_notify()

    def _coordinator_on_poll_error(self, generation: int, handle: JobHandle, error: PollError) -> None:
        if generation != self._generation or self._handle != handle:
            return
        self._runtime_error = error
        if isinstance(error, ConnectionError):
            self._server_status = SERVER_STATUS_OFFLINE
        self._coordinator_record("poll", "error", job_id=handle.job_id, details={"error_code": error.error_code})
        logger.warning("blast_poll_gave_up", job_id=handle.job_id, error_code=error.error_code, error=str(error))
        self._coordinator_settle()
        self._coordinator_notify()

    def _coordinator_start_fetch(self, generation: int, handle: JobHandle) -> None:
        if self._fetch_started:
            return
        self._fetch_started = True
        self._is_loading_result = True
        self._coordinator_record("fetch", "started", job_id=handle.job_id)
        self._fetch_task = asyncio.get_running_loop().create_task(self._coordinator_fetch(generation, handle))

    async def _coordinator_fetch(self, generation: int, handle: JobHandle) -> None:
        """Fetch results once and store them unless the job was discarded meanwhile.

        Args:
            generation: Generation the fetch was started in.
            handle: Completed job.

        Returns:
            None: Updates coordinator state as side effect.

        Raises:
            RuntimeError: This task converts failures into coordinator error state.
        """

        fetch_error: BlastJobError | None = None
        result_set: ResultSet | None = None
        try:
            result_set = await self._result_fetcher.job_fetch_results(handle)
        except (ResultNotReadyError, ResultUnavailableError) as error:
            fetch_error = error
        except Exception as error:  # pylint: disable=broad-exception-caught
            fetch_error = ResultUnavailableError(f"Unexpected result retrieval failure: {error}")
            fetch_error.__cause__ = error

        if generation != self._generation:
            return

        self._is_loading_result = False
        if fetch_error is not None:
            self._runtime_error = fetch_error
            self._coordinator_record(
                "fetch",
                "failed",
                job_id=handle.job_id,
                details={"error_code": fetch_error.error_code},
            )
            logger.warning("blast_fetch_failed", job_id=handle.job_id, error_code=fetch_error.error_code)
        else:
            self._result = result_set
            self._coordinator_record(
                "fetch",
                "completed",
                job_id=handle.job_id,
                details={"total_hits": result_set.total_hits if result_set is not None else 0},
            )
        self._coordinator_settle()
        self._coordinator_notify()

    def _coordinator_current_error(self) -> tuple[str | None, str | None]:
        for error in (self._request_error, self._runtime_error):
            if error is not None:
                return str(error), error.error_code
        if self._status is not None and self._status.status == JOB_STATUS_FAILED:
            return self._status.error or DEFAULT_JOB_FAILURE_MESSAGE, JobFailedError.default_error_code
        return None, None

    def _coordinator_reset(self) -> None:
        """Stop the poller and discard every piece of the current job slot."""

        self._poller.job_poll_cancel()
        self._result_fetcher.job_fetch_clear()
        self._generation += 1
        self._handle = None
        self._status = None
        self._result = None
        self._is_submitting = False
        self._is_loading_result = False
        self._request_error = None
        self._runtime_error = None
        self._fetch_started = False
        self._fetch_task = None
        self._timeline = []
        previous_event = self._settled_event
        self._settled_event = asyncio.Event()
        previous_event.set()

    def _coordinator_settle(self) -> None:
        self._settled_event.set()

    def _coordinator_fail_submit(self, error: BlastJobError) -> None:
        self._is_submitting = False
        self._request_error = error
        self._coordinator_record("submit", "failed", details={"error_code": error.error_code})
        logger.warning("blast_submit_failed", error_code=error.error_code, error=str(error))
        self._coordinator_settle()
        self._coordinator_notify()

    def _coordinator_update_history(self, handle: JobHandle, status: str) -> None:
        if self._history is not None:
            self._history.history_update_status(handle.job_id, status)

    def _coordinator_record(
        self,
        stage: str,
        status: str,
        job_id: str | None = None,
        details: dict[str, object] | None = None,
    ) -> None:
        self._timeline.append(domain_build_stage_event(stage=stage, status=status, job_id=job_id, details=details))

    def _coordinator_notify(self) -> None:
        if not self._listeners:
            return
        snapshot = self.job_snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:  # pylint: disable=broad-exception-caught
                logger.exception("blast_listener_failed", job_id=snapshot.job_id)
