"""Domain models, errors and pure helpers used across application layer boundaries."""

from .errors import (
	BlastJobError,
	BlastTransportError,
	EmptyInputError,
	InvalidCharactersError,
	InvalidParameterError,
	JobFailedError,
	JobNotFoundError,
	PollConnectionError,
	PollError,
	PollTimeoutError,
	ResultNotReadyError,
	ResultUnavailableError,
	SearchValidationError,
	SequenceTooLongError,
	SequenceTooShortError,
	SubmissionRejectedError,
)
from .models import (
	BLAST_ALGORITHMS,
	DEFAULT_JOB_FAILURE_MESSAGE,
	JOB_STATUS_COMPLETED,
	JOB_STATUS_FAILED,
	JOB_STATUS_PENDING,
	JOB_STATUS_RUNNING,
	JOB_STATUSES,
	JOB_TERMINAL_STATUSES,
	HealthStatus,
	Hit,
	JobHandle,
	JobStatus,
	ResultSet,
	ResultStatistics,
	SearchParameters,
	domain_job_status_can_transition,
)
from .payloads import (
	domain_hit_from_payload,
	domain_hit_to_payload,
	domain_job_status_from_payload,
	domain_job_status_to_payload,
	domain_result_set_from_payload,
	domain_result_set_to_payload,
	domain_search_parameters_to_payload,
)
from .sequence import (
	MAX_SEQUENCE_LENGTH,
	MIN_SEQUENCE_LENGTH,
	domain_clean_sequence,
	domain_detect_sequence_type,
	domain_format_sequence,
	domain_validate_search_parameters,
	domain_validate_sequence,
)
from .timeline import domain_build_stage_event

__all__ = [
	"BLAST_ALGORITHMS",
	"BlastJobError",
	"BlastTransportError",
	"DEFAULT_JOB_FAILURE_MESSAGE",
	"EmptyInputError",
	"HealthStatus",
	"Hit",
	"InvalidCharactersError",
	"InvalidParameterError",
	"JOB_STATUSES",
	"JOB_STATUS_COMPLETED",
	"JOB_STATUS_FAILED",
	"JOB_STATUS_PENDING",
	"JOB_STATUS_RUNNING",
	"JOB_TERMINAL_STATUSES",
	"JobFailedError",
	"JobHandle",
	"JobNotFoundError",
	"JobStatus",
	"MAX_SEQUENCE_LENGTH",
	"MIN_SEQUENCE_LENGTH",
	"PollConnectionError",
	"PollError",
	"PollTimeoutError",
	"ResultNotReadyError",
	"ResultSet",
	"ResultStatistics",
	"ResultUnavailableError",
	"SearchParameters",
	"SearchValidationError",
	"SequenceTooLongError",
	"SequenceTooShortError",
	"SubmissionRejectedError",
	"domain_build_stage_event",
	"domain_clean_sequence",
	"domain_detect_sequence_type",
	"domain_format_sequence",
	"domain_hit_from_payload",
	"domain_hit_to_payload",
	"domain_job_status_can_transition",
	"domain_job_status_from_payload",
	"domain_job_status_to_payload",
	"domain_result_set_from_payload",
	"domain_result_set_to_payload",
	"domain_search_parameters_to_payload",
	"domain_validate_search_parameters",
	"domain_validate_sequence",
]
