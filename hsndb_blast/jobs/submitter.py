"""Job submitter that hands validated searches to the compute service."""

from __future__ import annotations

import structlog

from hsndb_blast.adapters import BlastComputePort
from hsndb_blast.domain import JobHandle, SearchParameters

from .interfaces import JobSubmitterPort

logger = structlog.get_logger(__name__)


class BlastJobSubmitter(JobSubmitterPort):
    """Submit one search per call; every call creates a new job, so nothing retries."""

    def __init__(self, compute_adapter: BlastComputePort):
        if compute_adapter is None:
            raise ValueError("compute_adapter must not be None")
        self._compute_adapter = compute_adapter

    async def job_submit(self, parameters: SearchParameters) -> JobHandle:
        """Submit one search through the compute adapter.

        Args:
            parameters: Search parameters that already passed validation.

        Returns:
            JobHandle: Handle of the created job.

        Raises:
            SubmissionRejectedError: Raised when the service rejects the request.
            BlastTransportError: Raised when the service cannot be reached.
        """

        handle = await self._compute_adapter.adapter_submit_search(parameters)
        logger.info(
            "blast_job_submitted",
            job_id=handle.job_id,
            algorithm=parameters.algorithm,
            evalue=parameters.evalue,
            max_target_seqs=parameters.max_target_seqs,
            sequence_length=len(parameters.sequence),
            source=self._compute_adapter.adapter_source_name(),
        )
        return handle
