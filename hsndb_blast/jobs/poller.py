"""Sequential status poller with cancellation and bounded retry policy."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field

import structlog

from hsndb_blast.adapters import BlastComputePort
from hsndb_blast.domain import JobHandle, PollError, PollTimeoutError

from .interfaces import (
    POLLER_STATE_IDLE,
    POLLER_STATE_POLLING,
    POLLER_STATE_STOPPED,
    PollErrorCallback,
    StatusCallback,
    StatusPollerPort,
)

logger = structlog.get_logger(__name__)


@dataclass
class _PollSession:
    """Mutable bookkeeping of one polling session.

    Attributes:
        handle: Polled job.
        on_status: Status delivery callback.
        on_error: Terminal error delivery callback.
        stop_event: Set on cancellation to wake the interval wait.
        cancelled: Whether results must be discarded.
        attempts: Status requests issued so far.
        consecutive_failures: Transient failures since the last success.
        task: Background task running the poll loop.
    """

    handle: JobHandle
    on_status: StatusCallback
    on_error: PollErrorCallback
    stop_event: asyncio.Event = field(default_factory=asyncio.Event)
    cancelled: bool = False
    attempts: int = 0
    consecutive_failures: int = 0
    task: asyncio.Task | None = None


class BlastStatusPoller(StatusPollerPort):
    """Poll one job at a fixed cadence until it reaches a terminal status.

    Ticks are serialized: the next request is scheduled only after the previous
    response (or its request timeout) resolves, then the interval elapses.
    """

    def __init__(
        self,
        compute_adapter: BlastComputePort,
        interval_seconds: float = 2.0,
        max_attempts: int | None = 150,
        max_consecutive_failures: int = 3,
    ):
        """Initialize status poller.

        Args:
            compute_adapter: Adapter used for status requests.
            interval_seconds: Delay between a resolved tick and the next request.
            max_attempts: Status request budget per job, None for unbounded polling.
            max_consecutive_failures: Transient failures tolerated in a row.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when config values are invalid.
        """

        if compute_adapter is None:
            raise ValueError("compute_adapter must not be None")
        if interval_seconds < 0:
            raise ValueError("interval_seconds must be >= 0")
        if max_attempts is not None and max_attempts < 1:
            raise ValueError("max_attempts must be >= 1 when set")
        if max_consecutive_failures < 1:
            raise ValueError("max_consecutive_failures must be >= 1")

        self._compute_adapter = compute_adapter
        self._interval_seconds = interval_seconds
        self._max_attempts = max_attempts
        self._max_consecutive_failures = max_consecutive_failures
        self._state = POLLER_STATE_IDLE
        self._session: _PollSession | None = None

    def job_poll_start(
        self,
        handle: JobHandle,
        on_status: StatusCallback,
        on_error: PollErrorCallback,
    ) -> None:
        """Start polling one job in a background task.

        Args:
            handle: Job to poll.
            on_status: Receives each accepted status snapshot.
            on_error: Receives the error that ended polling.

        Returns:
            None: Polling continues in the background.

        Raises:
            RuntimeError: Raised when no event loop is running.
        """

        self.job_poll_cancel()
        session = _PollSession(handle=handle, on_status=on_status, on_error=on_error)
        self._session = session
        self._state = POLLER_STATE_POLLING
        session.task = asyncio.get_running_loop().create_task(self._poller_run(session))
        logger.debug("blast_poll_started", job_id=handle.job_id, interval_seconds=self._interval_seconds)

    def job_poll_cancel(self) -> None:
        """Halt future ticks; an in-flight response is discarded when it arrives."""

        session = self._session
        if session is None:
            return
        session.cancelled = True
        session.stop_event.set()
        if self._state == POLLER_STATE_POLLING:
            self._state = POLLER_STATE_STOPPED
            logger.debug("blast_poll_cancelled", job_id=session.handle.job_id, attempts=session.attempts)

    def job_poll_state(self) -> str:
        """Return `idle`, `polling` or `stopped`."""

        return self._state

    def job_poll_attempts(self) -> int:
        """Return the number of status requests issued for the current job."""

        return self._session.attempts if self._session is not None else 0

    async def job_poll_join(self) -> None:
        """Wait until the current session's poll loop exits."""

        session = self._session
        if session is not None and session.task is not None:
            await asyncio.shield(session.task)

    async def _poller_run(self, session: _PollSession) -> None:
        """Run the sequential poll loop for one session.

        Args:
            session: Session to drive.

        Returns:
            None: Results are delivered through session callbacks.

        Raises:
            RuntimeError: This loop converts failures into callback errors.
        """

        while not session.cancelled:
            if self._max_attempts is not None and session.attempts >= self._max_attempts:
                self._poller_finish(
                    session,
                    PollTimeoutError(
                        f"Job {session.handle.job_id} did not finish after {session.attempts} status polls"
                    ),
                )
                return

            session.attempts += 1
            try:
                job_status = await self._compute_adapter.adapter_fetch_status(session.handle.job_id)
                if job_status.job_id != session.handle.job_id:
                    raise PollError(f"status payload job id mismatch: {job_status.job_id}")
            except PollError as error:
                if session.cancelled:
                    return
                session.consecutive_failures += 1
                logger.warning(
                    "blast_poll_failed",
                    job_id=session.handle.job_id,
                    attempt=session.attempts,
                    consecutive_failures=session.consecutive_failures,
                    error_code=error.error_code,
                    error=str(error),
                )
                if not error.transient or session.consecutive_failures >= self._max_consecutive_failures:
                    self._poller_finish(session, error)
                    return
            except Exception as error:  # pylint: disable=broad-exception-caught
                if session.cancelled:
                    return
                unexpected_error = PollError(f"Unexpected status polling failure: {error}")
                unexpected_error.__cause__ = error
                self._poller_finish(session, unexpected_error)
                return
            else:
                if session.cancelled:
                    return
                session.consecutive_failures = 0
                try:
                    session.on_status(session.handle, job_status)
                except Exception as error:  # pylint: disable=broad-exception-caught
                    logger.exception("blast_poll_status_callback_failed", job_id=session.handle.job_id)
                    callback_error = PollError(f"Status callback failed: {error}")
                    callback_error.__cause__ = error
                    self._poller_finish(session, callback_error)
                    return
                if job_status.status_is_terminal():
                    self._poller_stop(session)
                    logger.info(
                        "blast_poll_terminal",
                        job_id=session.handle.job_id,
                        status=job_status.status,
                        attempts=session.attempts,
                    )
                    return

            await self._poller_wait_next_tick(session)

    async def _poller_wait_next_tick(self, session: _PollSession) -> None:
        if self._interval_seconds <= 0:
            await asyncio.sleep(0)
            return
        try:
            await asyncio.wait_for(session.stop_event.wait(), timeout=self._interval_seconds)
        except asyncio.TimeoutError:
            return

    def _poller_stop(self, session: _PollSession) -> None:
        if session is self._session and self._state == POLLER_STATE_POLLING:
            self._state = POLLER_STATE_STOPPED

    def _poller_finish(self, session: _PollSession, error: PollError) -> None:
        if session is not self._session or session.cancelled:
            return
        self._poller_stop(session)
        try:
            session.on_error(session.handle, error)
        except Exception:  # pylint: disable=broad-exception-caught
            logger.exception("blast_poll_error_callback_failed", job_id=session.handle.job_id)
