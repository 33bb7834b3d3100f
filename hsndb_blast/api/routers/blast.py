"""BLAST job router composition for submit, status, results and job listing."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Final

import structlog
from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from hsndb_blast.compute import BlastRunner
from hsndb_blast.config import AppSettings
from hsndb_blast.domain import (
    JOB_STATUS_COMPLETED,
    JOB_STATUS_FAILED,
    SearchParameters,
    SearchValidationError,
    domain_job_status_to_payload,
    domain_result_set_to_payload,
)

_LOGGER = structlog.get_logger(__name__)

_JOB_ID_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[A-Za-z0-9_-]+$")


class BlastSubmitRequest(BaseModel):
    """Submit request body; camelCase keys with snake_case accepted too."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    sequence: str | None = None
    algorithm: str = "blastp"
    evalue: float | None = Field(default=None, allow_inf_nan=False)
    matrix: str | None = None
    word_size: int | None = Field(default=None, alias="wordSize")
    gap_open: int | None = Field(default=None, alias="gapOpen")
    gap_extend: int | None = Field(default=None, alias="gapExtend")
    max_target_seqs: int | None = Field(default=None, alias="maxTargetSeqs")


def api_create_blast_router(settings: AppSettings, blast_runner: BlastRunner) -> APIRouter:
    """Create BLAST router with the job lifecycle endpoints.

    Args:
        settings: Runtime settings providing request defaults.
        blast_runner: Runner owning job execution and the job store.

    Returns:
        APIRouter: Router exposing `/blast/*` endpoints.

    Raises:
        ValueError: Raised when dependencies are invalid.
    """

    if settings is None:
        raise ValueError("settings must not be None")
    if blast_runner is None:
        raise ValueError("blast_runner must not be None")

    router = APIRouter(prefix="/blast", tags=["blast"])

    @router.post("/submit")
    async def api_blast_submit(request: Request) -> JSONResponse:
        """Validate one search request and start its BLAST job.

        Returns:
            JSONResponse: 200 with the job id, 400 with `{error}` on invalid input.

        Raises:
            RuntimeError: Raised when job scheduling fails unexpectedly.
        """

        try:
            body = await request.json()
        except ValueError:
            return _api_error_response("Request body must be a JSON object", status.HTTP_400_BAD_REQUEST)
        if not isinstance(body, dict):
            return _api_error_response("Request body must be a JSON object", status.HTTP_400_BAD_REQUEST)

        try:
            submit_request = BlastSubmitRequest.model_validate(body)
        except ValidationError as error:
            problems = [
                f"{'.'.join(str(part) for part in issue['loc'])}: {issue['msg']}" for issue in error.errors()
            ]
            return _api_error_response(", ".join(problems), status.HTTP_400_BAD_REQUEST)

        if not submit_request.sequence:
            return _api_error_response("Sequence is required", status.HTTP_400_BAD_REQUEST)

        parameters = SearchParameters(
            sequence=submit_request.sequence,
            algorithm=submit_request.algorithm,
            evalue=submit_request.evalue if submit_request.evalue is not None else settings.blast_default_evalue,
            matrix=submit_request.matrix or settings.blast_default_matrix,
            word_size=submit_request.word_size,
            gap_open=submit_request.gap_open,
            gap_extend=submit_request.gap_extend,
            max_target_seqs=(
                submit_request.max_target_seqs
                if submit_request.max_target_seqs is not None
                else settings.blast_default_max_target_seqs
            ),
        )

        try:
            job_id = await blast_runner.compute_submit_job(parameters)
        except SearchValidationError as error:
            _LOGGER.info("blast_submit_rejected", error_code=error.error_code, error=str(error))
            return _api_error_response(str(error), status.HTTP_400_BAD_REQUEST)

        payload = {
            "jobId": job_id,
            "message": "BLAST search submitted successfully",
            "estimatedTime": "5-30 seconds",
        }
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    @router.get("/status/{job_id}")
    def api_blast_status(job_id: str) -> JSONResponse:
        """Return the current status of one job.

        Returns:
            JSONResponse: 200 status payload, 400 for malformed ids, 404 when unknown.

        Raises:
            RuntimeError: Raised if route handler cannot produce a response.
        """

        if not _JOB_ID_PATTERN.match(job_id):
            return _api_error_response("Invalid job ID", status.HTTP_400_BAD_REQUEST)

        job_status = blast_runner.compute_job_status(job_id)
        if job_status is None:
            return _api_error_response("Job not found", status.HTTP_404_NOT_FOUND)
        return JSONResponse(content=domain_job_status_to_payload(job_status), status_code=status.HTTP_200_OK)

    @router.get("/results/{job_id}")
    def api_blast_results(job_id: str) -> JSONResponse:
        """Return results of one completed job.

        Returns:
            JSONResponse: 200 result set, 202 while running, 400 when failed,
            404 when unknown or without stored results.

        Raises:
            RuntimeError: Raised if route handler cannot produce a response.
        """

        if not _JOB_ID_PATTERN.match(job_id):
            return _api_error_response("Invalid job ID", status.HTTP_400_BAD_REQUEST)

        job = blast_runner.compute_job_record(job_id)
        if job is None:
            return _api_error_response("Job not found", status.HTTP_404_NOT_FOUND)
        if job.status == JOB_STATUS_FAILED:
            return _api_error_response(job.error or "Job failed", status.HTTP_400_BAD_REQUEST)
        if job.status != JOB_STATUS_COMPLETED:
            payload = {
                "message": "Job not completed yet",
                "status": job.status,
                "progress": job.progress,
            }
            return JSONResponse(content=payload, status_code=status.HTTP_202_ACCEPTED)
        if job.results is None:
            return _api_error_response("No results available", status.HTTP_404_NOT_FOUND)
        return JSONResponse(content=domain_result_set_to_payload(job.results), status_code=status.HTTP_200_OK)

    @router.get("/jobs")
    def api_blast_job_list() -> JSONResponse:
        jobs = [
            {
                "jobId": job.job_id,
                "status": job.status,
                "progress": job.progress,
                "startTime": datetime.fromtimestamp(job.started_at, tz=timezone.utc).isoformat(),
                "parameters": {
                    "algorithm": job.parameters.algorithm,
                    "sequenceLength": len(job.parameters.sequence),
                },
            }
            for job in blast_runner.compute_job_list()
        ]
        payload = {"jobs": jobs, "total": len(jobs), "stats": blast_runner.compute_runner_stats()}
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    return router


def _api_error_response(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(content={"error": message}, status_code=status_code)
