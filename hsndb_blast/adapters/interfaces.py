"""Typed interfaces for adapter-layer responsibilities."""

from typing import Protocol

from hsndb_blast.domain import HealthStatus, JobHandle, JobStatus, ResultSet, SearchParameters


class BlastComputePort(Protocol):
    """Port definition for the compute service that runs BLAST jobs."""

    def adapter_source_name(self) -> str:
        """Return adapter source identifier for diagnostics and telemetry.

        Returns:
            str: Human-readable upstream source identifier.

        Raises:
            RuntimeError: Raised when source metadata is unavailable.
        """

    async def adapter_submit_search(self, parameters: SearchParameters) -> JobHandle:
        """Submit one search and return the handle of the created job.

        Args:
            parameters: Validated search parameters.

        Returns:
            JobHandle: Handle of the newly created job.

        Raises:
            SubmissionRejectedError: Raised when the service rejects the request.
            BlastTransportError: Raised when the service cannot be reached.
        """

    async def adapter_fetch_status(self, job_id: str) -> JobStatus:
        """Fetch the current status snapshot of one job.

        Args:
            job_id: Job identifier.

        Returns:
            JobStatus: Fresh status snapshot.

        Raises:
            PollError: Raised when the status request fails.
        """

    async def adapter_fetch_results(self, job_id: str) -> ResultSet:
        """Fetch the result set of one completed job.

        Args:
            job_id: Job identifier.

        Returns:
            ResultSet: Structured results.

        Raises:
            ResultNotReadyError: Raised when the job has not completed yet.
            ResultUnavailableError: Raised for any other failure.
        """

    async def adapter_check_health(self) -> HealthStatus:
        """Check service liveness.

        Returns:
            HealthStatus: Reported service status.

        Raises:
            BlastTransportError: Raised when the service cannot be reached.
        """
