"""Pure sequence and search-parameter validation helpers."""

from __future__ import annotations

import math
import re
from typing import Final

from .errors import (
    EmptyInputError,
    InvalidCharactersError,
    InvalidParameterError,
    SequenceTooLongError,
    SequenceTooShortError,
)
from .models import BLAST_ALGORITHMS, SearchParameters

MIN_SEQUENCE_LENGTH: Final[int] = 10
MAX_SEQUENCE_LENGTH: Final[int] = 10_000

_PROTEIN_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[ACDEFGHIKLMNPQRSTVWYX*-]+$", re.IGNORECASE)
_NUCLEOTIDE_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[ACGTUNRYMKSWBDHV-]+$", re.IGNORECASE)
_PROTEIN_SIGNATURE_PATTERN: Final[re.Pattern[str]] = re.compile(r"[DEFHIKLMPQRSVWY]", re.IGNORECASE)
_NUCLEOTIDE_SIGNATURE_PATTERN: Final[re.Pattern[str]] = re.compile(r"[ACGTU]", re.IGNORECASE)
_WHITESPACE_PATTERN: Final[re.Pattern[str]] = re.compile(r"\s")


def domain_clean_sequence(sequence: str) -> str:
    """Strip all whitespace and `>` markers from a raw sequence.

    Args:
        sequence: Raw user sequence.

    Returns:
        str: Cleaned sequence with original letter case.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    return _WHITESPACE_PATTERN.sub("", sequence or "").replace(">", "")


def domain_validate_sequence(sequence: str) -> str:
    """Validate length bounds and alphabet of one query sequence.

    Args:
        sequence: Raw user sequence.

    Returns:
        str: Cleaned, validated sequence (not uppercased).

    Raises:
        EmptyInputError: Raised when nothing remains after cleaning.
        SequenceTooShortError: Raised below the minimum length.
        SequenceTooLongError: Raised above the maximum length.
        InvalidCharactersError: Raised when no supported alphabet matches.
    """

    cleaned_sequence = domain_clean_sequence(sequence)
    if not cleaned_sequence:
        raise EmptyInputError("Sequence cannot be empty")
    if len(cleaned_sequence) < MIN_SEQUENCE_LENGTH:
        raise SequenceTooShortError(f"Sequence must be at least {MIN_SEQUENCE_LENGTH} characters long")
    if len(cleaned_sequence) > MAX_SEQUENCE_LENGTH:
        raise SequenceTooLongError(f"Sequence cannot exceed {MAX_SEQUENCE_LENGTH:,} characters")
    if not _PROTEIN_PATTERN.match(cleaned_sequence) and not _NUCLEOTIDE_PATTERN.match(cleaned_sequence):
        raise InvalidCharactersError(
            "Sequence contains invalid characters. Only amino acid or nucleotide letters are allowed."
        )
    return cleaned_sequence


def domain_validate_search_parameters(parameters: SearchParameters) -> None:
    """Validate non-sequence search parameters and report every problem at once.

    Args:
        parameters: Search parameters to validate.

    Returns:
        None: Returns silently when parameters are valid.

    Raises:
        InvalidParameterError: Raised when one or more parameters are out of range.
    """

    problems: list[str] = []
    if parameters.algorithm not in BLAST_ALGORITHMS:
        problems.append(f"Invalid algorithm. Must be one of: {', '.join(BLAST_ALGORITHMS)}")
    if not math.isfinite(parameters.evalue) or parameters.evalue < 0:
        problems.append("E-value must be a positive number")
    if parameters.max_target_seqs is not None and parameters.max_target_seqs < 1:
        problems.append("Max target sequences must be a positive integer")
    if parameters.word_size is not None and parameters.word_size < 1:
        problems.append("Word size must be a positive integer")
    if parameters.gap_open is not None and parameters.gap_open < 0:
        problems.append("Gap open cost must not be negative")
    if parameters.gap_extend is not None and parameters.gap_extend < 0:
        problems.append("Gap extend cost must not be negative")
    if not parameters.matrix.strip():
        problems.append("Matrix must not be blank")

    if problems:
        raise InvalidParameterError(problems)


def domain_format_sequence(sequence: str) -> str:
    """Return the cleaned sequence in uppercase."""

    return domain_clean_sequence(sequence).upper()


def domain_detect_sequence_type(sequence: str) -> str:
    """Guess whether a sequence is protein or nucleotide.

    Args:
        sequence: Raw user sequence.

    Returns:
        str: `protein`, `nucleotide` or `unknown`.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    formatted_sequence = domain_format_sequence(sequence)
    protein_count = len(_PROTEIN_SIGNATURE_PATTERN.findall(formatted_sequence))
    nucleotide_count = len(_NUCLEOTIDE_SIGNATURE_PATTERN.findall(formatted_sequence))

    if protein_count == 0 and nucleotide_count > 0:
        return "nucleotide"
    if protein_count > len(formatted_sequence) * 0.1:
        return "protein"
    if nucleotide_count > len(formatted_sequence) * 0.8:
        return "nucleotide"
    return "unknown"
