"""JSON payload codec for the compute service wire contract.

Wire payloads use camelCase keys. Decoders are strict about required fields
and raise `ValueError` on malformed input so callers can map the failure to
their own error taxonomy.
"""

from __future__ import annotations

from typing import Any, Mapping

from .models import (
    DEFAULT_JOB_FAILURE_MESSAGE,
    JOB_STATUS_FAILED,
    JOB_STATUSES,
    Hit,
    JobStatus,
    ResultSet,
    ResultStatistics,
    SearchParameters,
)


def domain_search_parameters_to_payload(parameters: SearchParameters) -> dict[str, object]:
    """Serialize search parameters to the submit request body.

    Args:
        parameters: Search parameters.

    Returns:
        dict[str, object]: JSON-serializable request body without unset optionals.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    payload: dict[str, object] = {
        "sequence": parameters.sequence,
        "algorithm": parameters.algorithm,
        "evalue": parameters.evalue,
        "matrix": parameters.matrix,
    }
    optional_fields = {
        "wordSize": parameters.word_size,
        "gapOpen": parameters.gap_open,
        "gapExtend": parameters.gap_extend,
        "maxTargetSeqs": parameters.max_target_seqs,
    }
    for key, value in optional_fields.items():
        if value is not None:
            payload[key] = value
    return payload


def domain_job_status_from_payload(payload: Mapping[str, Any]) -> JobStatus:
    """Decode one status response, enforcing the error-iff-failed invariant.

    Args:
        payload: Decoded JSON object.

    Returns:
        JobStatus: Typed status snapshot.

    Raises:
        ValueError: Raised when required fields are missing or invalid.
    """

    if not isinstance(payload, Mapping):
        raise ValueError("status payload must be a JSON object")

    job_id = _payload_require_text(payload, "jobId")
    status_value = _payload_require_text(payload, "status")
    if status_value not in JOB_STATUSES:
        raise ValueError(f"unknown job status={status_value}")

    progress = _payload_int(payload.get("progress"), default=0)
    progress = min(max(progress, 0), 100)

    estimated_time_remaining = payload.get("estimatedTimeRemaining")
    if estimated_time_remaining is not None:
        estimated_time_remaining = max(_payload_int(estimated_time_remaining, default=0), 0)

    error_message: str | None = None
    if status_value == JOB_STATUS_FAILED:
        raw_error = payload.get("error")
        error_message = str(raw_error).strip() if raw_error else ""
        error_message = error_message or DEFAULT_JOB_FAILURE_MESSAGE

    return JobStatus(
        job_id=job_id,
        status=status_value,
        progress=progress,
        estimated_time_remaining=estimated_time_remaining,
        error=error_message,
    )


def domain_job_status_to_payload(job_status: JobStatus) -> dict[str, object]:
    """Serialize one status snapshot to its wire payload."""

    payload: dict[str, object] = {
        "jobId": job_status.job_id,
        "status": job_status.status,
        "progress": job_status.progress,
    }
    if job_status.estimated_time_remaining is not None:
        payload["estimatedTimeRemaining"] = job_status.estimated_time_remaining
    if job_status.error is not None:
        payload["error"] = job_status.error
    return payload


def domain_hit_from_payload(payload: Mapping[str, Any]) -> Hit:
    """Decode one hit object.

    Args:
        payload: Decoded JSON object.

    Returns:
        Hit: Typed hit.

    Raises:
        ValueError: Raised when required fields are missing or invalid.
    """

    if not isinstance(payload, Mapping):
        raise ValueError("hit payload must be a JSON object")

    return Hit(
        id=_payload_require_text(payload, "id"),
        hsn_id=str(payload.get("hsnId") or ""),
        gene_name=str(payload.get("geneName") or "Unknown"),
        protein_name=str(payload.get("proteinName") or "Unknown protein"),
        description=payload.get("description"),
        uniprot_id=payload.get("uniprotId"),
        evalue=_payload_float(payload.get("evalue"), default=999.0),
        score=_payload_float(payload.get("score"), default=0.0),
        identity=_payload_float(payload.get("identity"), default=0.0),
        positives=_payload_float(payload.get("positives"), default=0.0),
        gaps=_payload_int(payload.get("gaps"), default=0),
        query_start=_payload_int(payload.get("queryStart"), default=1),
        query_end=_payload_int(payload.get("queryEnd"), default=1),
        subject_start=_payload_int(payload.get("subjectStart"), default=1),
        subject_end=_payload_int(payload.get("subjectEnd"), default=1),
        query_seq=str(payload.get("querySeq") or ""),
        subject_seq=str(payload.get("subjectSeq") or ""),
        alignment=str(payload.get("alignment") or ""),
        length=_payload_int(payload.get("length"), default=0),
    )


def domain_hit_to_payload(hit: Hit) -> dict[str, object]:
    """Serialize one hit to its wire payload."""

    return {
        "id": hit.id,
        "hsnId": hit.hsn_id,
        "geneName": hit.gene_name,
        "proteinName": hit.protein_name,
        "description": hit.description,
        "uniprotId": hit.uniprot_id,
        "evalue": hit.evalue,
        "score": hit.score,
        "identity": hit.identity,
        "positives": hit.positives,
        "gaps": hit.gaps,
        "queryStart": hit.query_start,
        "queryEnd": hit.query_end,
        "subjectStart": hit.subject_start,
        "subjectEnd": hit.subject_end,
        "querySeq": hit.query_seq,
        "subjectSeq": hit.subject_seq,
        "alignment": hit.alignment,
        "length": hit.length,
    }


def domain_result_set_from_payload(payload: Mapping[str, Any]) -> ResultSet:
    """Decode one result set, including its hits and statistics block.

    Args:
        payload: Decoded JSON object.

    Returns:
        ResultSet: Typed result set.

    Raises:
        ValueError: Raised when required fields are missing or invalid.
    """

    if not isinstance(payload, Mapping):
        raise ValueError("result payload must be a JSON object")

    raw_hits = payload.get("hits") or []
    if not isinstance(raw_hits, list):
        raise ValueError("result payload field hits must be a list")
    hits = tuple(domain_hit_from_payload(raw_hit) for raw_hit in raw_hits)

    raw_statistics = payload.get("statistics") or {}
    if not isinstance(raw_statistics, Mapping):
        raise ValueError("result payload field statistics must be an object")

    statistics = ResultStatistics(
        kappa=_payload_float(raw_statistics.get("kappa"), default=0.0),
        lambda_=_payload_float(raw_statistics.get("lambda"), default=0.0),
        entropy=_payload_float(raw_statistics.get("entropy"), default=0.0),
        database=str(raw_statistics.get("database") or ""),
        database_version=str(raw_statistics.get("databaseVersion") or ""),
        total_sequences=_payload_int(raw_statistics.get("totalSequences"), default=0),
    )

    return ResultSet(
        job_id=_payload_require_text(payload, "jobId"),
        query_length=_payload_int(payload.get("queryLength"), default=0),
        database_size=_payload_int(payload.get("databaseSize"), default=0),
        total_hits=_payload_int(payload.get("totalHits"), default=len(hits)),
        statistics=statistics,
        execution_time=_payload_float(payload.get("executionTime"), default=0.0),
        hits=hits,
    )


def domain_result_set_to_payload(result_set: ResultSet) -> dict[str, object]:
    """Serialize one result set to its wire payload."""

    return {
        "jobId": result_set.job_id,
        "queryLength": result_set.query_length,
        "databaseSize": result_set.database_size,
        "totalHits": result_set.total_hits,
        "hits": [domain_hit_to_payload(hit) for hit in result_set.hits],
        "statistics": {
            "kappa": result_set.statistics.kappa,
            "lambda": result_set.statistics.lambda_,
            "entropy": result_set.statistics.entropy,
            "database": result_set.statistics.database,
            "databaseVersion": result_set.statistics.database_version,
            "totalSequences": result_set.statistics.total_sequences,
        },
        "executionTime": result_set.execution_time,
    }


def _payload_require_text(payload: Mapping[str, Any], key: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"payload field {key} must be a non-empty string")
    return value.strip()


def _payload_int(value: object, default: int) -> int:
    if value is None or isinstance(value, bool):
        return default
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError) as error:
        raise ValueError(f"expected integer payload value, got {value!r}") from error


def _payload_float(value: object, default: float) -> float:
    if value is None or isinstance(value, bool):
        return default
    try:
        return float(value)
    except (TypeError, ValueError) as error:
        raise ValueError(f"expected numeric payload value, got {value!r}") from error


__all__ = [
    "domain_hit_from_payload",
    "domain_hit_to_payload",
    "domain_job_status_from_payload",
    "domain_job_status_to_payload",
    "domain_result_set_from_payload",
    "domain_result_set_to_payload",
    "domain_search_parameters_to_payload",
]
