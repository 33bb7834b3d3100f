"""HTTP adapter for the BLAST compute service submit/status/results contract."""

from __future__ import annotations

from typing import Any, Final

import httpx
import structlog

from hsndb_blast.domain import (
    BlastTransportError,
    HealthStatus,
    JobHandle,
    JobNotFoundError,
    JobStatus,
    PollConnectionError,
    PollError,
    ResultNotReadyError,
    ResultSet,
    ResultUnavailableError,
    SearchParameters,
    SubmissionRejectedError,
    domain_job_status_from_payload,
    domain_result_set_from_payload,
    domain_search_parameters_to_payload,
)

from .interfaces import BlastComputePort

logger = structlog.get_logger(__name__)


class BlastHttpAdapter(BlastComputePort):
    """Adapter implementation for the compute service `/blast/*` endpoints.

    One pooled `httpx.AsyncClient` is reused for every call made by the adapter.
    """

    _USER_AGENT: Final[str] = "hsndb-blast/1.0 (Python/httpx)"

    def __init__(
        self,
        base_url: str = "http://localhost:3001/api",
        request_timeout_seconds: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ):
        """Initialize compute service adapter.

        Args:
            base_url: Base endpoint URL including the API prefix.
            request_timeout_seconds: HTTP request timeout in seconds.
            client: Optional preconfigured client, mainly for tests.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when required config values are invalid.
        """

        normalized_base_url = base_url.strip()
        if not normalized_base_url:
            raise ValueError("base_url must not be blank")
        if request_timeout_seconds <= 0:
            raise ValueError("request_timeout_seconds must be > 0")

        self._base_url = normalized_base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=request_timeout_seconds,
            headers={"User-Agent": self._USER_AGENT, "Content-Type": "application/json"},
        )

    def adapter_source_name(self) -> str:
        """Return stable adapter source label.

        Returns:
            str: Source identifier including the target base URL.

        Raises:
            RuntimeError: This implementation does not raise runtime errors.
        """

        return f"blast_http:{self._base_url}"

    async def adapter_submit_search(self, parameters: SearchParameters) -> JobHandle:
        """Submit one search through `POST /blast/submit`.

        Args:
            parameters: Validated search parameters.

        Returns:
            JobHandle: Handle carrying the returned job id.

        Raises:
            SubmissionRejectedError: Raised on non-success responses or a missing job id.
            BlastTransportError: Raised for network failures.
        """

        try:
            response = await self._client.post(
                f"{self._base_url}/blast/submit",
                json=domain_search_parameters_to_payload(parameters),
            )
        except httpx.TimeoutException as error:
            raise BlastTransportError("BLAST submit request timed out") from error
        except httpx.TransportError as error:
            raise BlastTransportError(f"Cannot connect to BLAST server at {self._base_url}") from error

        if not response.is_success:
            message = self._adapter_extract_error_message(response)
            logger.warning("blast_submit_rejected", status_code=response.status_code, message=message)
            raise SubmissionRejectedError(message)

        payload = self._adapter_try_decode_json(response)
        job_id = payload.get("jobId") if isinstance(payload, dict) else None
        if not isinstance(job_id, str) or not job_id.strip():
            raise SubmissionRejectedError("BLAST submit response missing jobId")
        return JobHandle(job_id=job_id.strip())

    async def adapter_fetch_status(self, job_id: str) -> JobStatus:
        """Fetch one status snapshot through `GET /blast/status/{jobId}`.

        Args:
            job_id: Job identifier.

        Returns:
            JobStatus: Decoded status snapshot.

        Raises:
            JobNotFoundError: Raised on HTTP 404.
            PollError: Raised for transport failures, other non-success responses and malformed payloads.
        """

        normalized_job_id = self._adapter_require_job_id(job_id)
        try:
            response = await self._client.get(f"{self._base_url}/blast/status/{normalized_job_id}")
        except httpx.TimeoutException as error:
            raise PollConnectionError("BLAST status request timed out") from error
        except httpx.TransportError as error:
            raise PollConnectionError(f"Cannot connect to BLAST server at {self._base_url}") from error

        if response.status_code == httpx.codes.NOT_FOUND:
            raise JobNotFoundError("Job not found")
        if not response.is_success:
            raise PollError(self._adapter_extract_error_message(response))

        try:
            return domain_job_status_from_payload(self._adapter_try_decode_json(response))
        except ValueError as error:
            raise PollError(f"Malformed BLAST status payload: {error}") from error

    async def adapter_fetch_results(self, job_id: str) -> ResultSet:
        """Fetch one result set through `GET /blast/results/{jobId}`.

        Args:
            job_id: Job identifier.

        Returns:
            ResultSet: Decoded results.

        Raises:
            ResultNotReadyError: Raised on HTTP 202.
            ResultUnavailableError: Raised for every other failure.
        """

        normalized_job_id = self._adapter_require_job_id(job_id)
        try:
            response = await self._client.get(f"{self._base_url}/blast/results/{normalized_job_id}")
        except httpx.TransportError as error:
            raise ResultUnavailableError(f"Cannot retrieve BLAST results from {self._base_url}") from error

        if response.status_code == httpx.codes.ACCEPTED:
            raise ResultNotReadyError("Job not completed yet")
        if response.status_code == httpx.codes.NOT_FOUND:
            raise ResultUnavailableError("Results not found")
        if not response.is_success:
            raise ResultUnavailableError(self._adapter_extract_error_message(response))

        try:
            return domain_result_set_from_payload(self._adapter_try_decode_json(response))
        except ValueError as error:
            raise ResultUnavailableError(f"Malformed BLAST result payload: {error}") from error

    async def adapter_check_health(self) -> HealthStatus:
        """Call `GET /health`.

        Returns:
            HealthStatus: Reported status with the HTTP outcome as detail.

        Raises:
            BlastTransportError: Raised for network failures.
        """

        try:
            response = await self._client.get(f"{self._base_url}/health")
        except httpx.TransportError as error:
            raise BlastTransportError(f"Cannot connect to BLAST server at {self._base_url}") from error

        payload = self._adapter_try_decode_json(response)
        reported_status = payload.get("status") if isinstance(payload, dict) else None
        if not response.is_success or not isinstance(reported_status, str):
            return HealthStatus(status="offline", detail=f"health endpoint returned HTTP {response.status_code}")
        return HealthStatus(status=reported_status, detail=f"health endpoint returned HTTP {response.status_code}")

    async def adapter_close(self) -> None:
        """Close the pooled client when this adapter created it."""

        if self._owns_client:
            await self._client.aclose()

    def _adapter_require_job_id(self, job_id: str) -> str:
        normalized_job_id = (job_id or "").strip()
        if not normalized_job_id:
            raise ValueError("job_id must not be blank")
        return normalized_job_id

    def _adapter_try_decode_json(self, response: httpx.Response) -> Any:
        """Best-effort JSON decode helper.

        Args:
            response: HTTP response.

        Returns:
            Any: Decoded JSON value, or None when the body is not JSON.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        try:
            return response.json()
        except ValueError:
            return None

    def _adapter_extract_error_message(self, response: httpx.Response) -> str:
        """Extract the `{error}` message of a non-success response.

        Args:
            response: HTTP response.

        Returns:
            str: Upstream error message or an HTTP status fallback.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        payload = self._adapter_try_decode_json(response)
        if isinstance(payload, dict):
            error_message = payload.get("error")
            if isinstance(error_message, str) and error_message.strip():
                return error_message.strip()
        return f"Server error: {response.status_code}"
