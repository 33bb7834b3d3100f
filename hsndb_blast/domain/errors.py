"""Project-native typed exceptions for the BLAST job lifecycle."""

from __future__ import annotations


class BlastJobError(Exception):
    """Base exception for BLAST job lifecycle failures.

    Attributes:
        error_code: Stable machine-readable error code.
    """

    default_error_code = "BLAST_JOB_ERROR"

    def __init__(self, message: str, error_code: str | None = None):
        super().__init__(message)
        self.error_code = error_code or self.default_error_code


class SearchValidationError(BlastJobError, ValueError):
    """Local input validation failure; never sent over the service boundary."""

    default_error_code = "VALIDATION_ERROR"


class EmptyInputError(SearchValidationError):
    """Sequence is empty after whitespace and `>` stripping."""

    default_error_code = "EMPTY_INPUT"


class SequenceTooShortError(SearchValidationError):
    """Sequence is shorter than the minimum accepted length."""

    default_error_code = "TOO_SHORT"


class SequenceTooLongError(SearchValidationError):
    """Sequence is longer than the maximum accepted length."""

    default_error_code = "TOO_LONG"


class InvalidCharactersError(SearchValidationError):
    """Sequence matches neither the amino-acid nor the nucleotide alphabet."""

    default_error_code = "INVALID_CHARACTERS"


class InvalidParameterError(SearchValidationError):
    """Search parameters other than the sequence are out of range.

    Attributes:
        problems: Every individual parameter problem found.
    """

    default_error_code = "INVALID_PARAMETERS"

    def __init__(self, problems: list[str]):
        super().__init__(", ".join(problems))
        self.problems = tuple(problems)


class SubmissionRejectedError(BlastJobError, ValueError):
    """Compute service answered the submit request with a non-success response."""

    default_error_code = "SUBMISSION_REJECTED"


class BlastTransportError(BlastJobError, ConnectionError):
    """Network-level failure while talking to the compute service."""

    default_error_code = "TRANSPORT_ERROR"


class PollError(BlastJobError, RuntimeError):
    """Status request failed; transient unless a subclass says otherwise."""

    default_error_code = "POLL_ERROR"
    transient = True


class PollConnectionError(PollError, ConnectionError):
    """Status request never reached the compute service."""


class JobNotFoundError(PollError):
    """Compute service does not know the polled job (expired or cleaned up)."""

    default_error_code = "JOB_NOT_FOUND"
    transient = False


class PollTimeoutError(PollError):
    """Job did not reach a terminal status within the poll attempt budget."""

    default_error_code = "POLL_TIMEOUT"
    transient = False


class JobFailedError(BlastJobError, RuntimeError):
    """Job reached the terminal `failed` status."""

    default_error_code = "JOB_FAILED"


class ResultNotReadyError(BlastJobError, RuntimeError):
    """Results were requested before the job completed (HTTP 202)."""

    default_error_code = "NOT_READY"


class ResultUnavailableError(BlastJobError, RuntimeError):
    """Results could not be retrieved for a non-readiness reason."""

    default_error_code = "RESULT_UNAVAILABLE"
