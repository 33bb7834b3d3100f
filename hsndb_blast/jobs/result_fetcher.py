"""Cached, single-flight result fetcher for completed jobs."""

from __future__ import annotations

import asyncio

import structlog

from hsndb_blast.adapters import BlastComputePort
from hsndb_blast.domain import JobHandle, ResultSet

from .interfaces import ResultFetcherPort

logger = structlog.get_logger(__name__)


class BlastResultFetcher(ResultFetcherPort):
    """Fetch results once per job and serve repeated calls from cache.

    Concurrent callers for the same job share one in-flight request. Results
    that arrive after `job_fetch_clear()` are not cached.
    """

    def __init__(self, compute_adapter: BlastComputePort):
        if compute_adapter is None:
            raise ValueError("compute_adapter must not be None")
        self._compute_adapter = compute_adapter
        self._results: dict[str, ResultSet] = {}
        self._in_flight: dict[str, asyncio.Task] = {}
        self._generation = 0
        self._live_fetch_count = 0

    async def job_fetch_results(self, handle: JobHandle) -> ResultSet:
        """Return cached results or perform the single live fetch for the job.

        Args:
            handle: Completed job.

        Returns:
            ResultSet: Results of the job.

        Raises:
            ResultNotReadyError: Raised when the job has not completed yet.
            ResultUnavailableError: Raised for any other failure.
        """

        cached_result = self._results.get(handle.job_id)
        if cached_result is not None:
            return cached_result

        fetch_task = self._in_flight.get(handle.job_id)
        if fetch_task is None:
            fetch_task = asyncio.get_running_loop().create_task(
                self._fetcher_fetch_live(handle.job_id, self._generation)
            )
            self._in_flight[handle.job_id] = fetch_task
        return await asyncio.shield(fetch_task)

    def job_fetch_clear(self) -> None:
        """Drop cached results and detach in-flight fetches."""

        self._generation += 1
        self._results.clear()
        self._in_flight.clear()

    def job_fetch_live_count(self) -> int:
        """Return how many live fetch requests were issued."""

        return self._live_fetch_count

    async def _fetcher_fetch_live(self, job_id: str, generation: int) -> ResultSet:
        self._live_fetch_count += 1
        try:
            result_set = await self._compute_adapter.adapter_fetch_results(job_id)
        finally:
            if generation == self._generation:
                self._in_flight.pop(job_id, None)

        if generation == self._generation:
            self._results[job_id] = result_set
        logger.info(
            "blast_results_fetched",
            job_id=job_id,
            total_hits=result_set.total_hits,
            execution_time=result_set.execution_time,
        )
        return result_set
