"""Tests for sequence cleaning, validation and search-parameter checks."""

from __future__ import annotations

import pytest

from hsndb_blast.domain import (
    EmptyInputError,
    InvalidCharactersError,
    InvalidParameterError,
    SearchParameters,
    SearchValidationError,
    SequenceTooLongError,
    SequenceTooShortError,
    domain_clean_sequence,
    domain_detect_sequence_type,
    domain_format_sequence,
    domain_validate_search_parameters,
    domain_validate_sequence,
)


def test_domain_clean_sequence_strips_whitespace_and_fasta_markers() -> None:
    """Remove every whitespace character and `>` marker while keeping letter case.

    Returns:
        None: Assertions validate cleaning behavior.

    Raises:
        AssertionError: Raised when cleaning output differs.
    """

    assert domain_clean_sequence(">query\nmkt ayiak\tQR\r\n") == "querymktayiakQR"
    assert domain_clean_sequence("") == ""


def test_domain_validate_sequence_returns_cleaned_sequence_without_uppercasing() -> None:
    """Return the cleaned sequence exactly as typed for valid protein input.

    Returns:
        None: Assertions validate accepted input.

    Raises:
        AssertionError: Raised when the returned value is transformed.
    """

    assert domain_validate_sequence("mktayiak qrqisfvk\n") == "mktayiakqrqisfvk"


@pytest.mark.parametrize(
    ("raw_sequence", "expected_error", "expected_code", "expected_message"),
    [
        ("", EmptyInputError, "EMPTY_INPUT", "Sequence cannot be empty"),
        ("  >\n>  ", EmptyInputError, "EMPTY_INPUT", "Sequence cannot be empty"),
        ("MKTAYIAKQ", SequenceTooShortError, "TOO_SHORT", "Sequence must be at least 10 characters long"),
        ("A" * 10_001, SequenceTooLongError, "TOO_LONG", "Sequence cannot exceed 10,000 characters"),
        ("MKTAYIAKQRJOB", InvalidCharactersError, "INVALID_CHARACTERS", "Sequence contains invalid characters"),
    ],
)
def test_domain_validate_sequence_rejects_invalid_input(
    raw_sequence: str,
    expected_error: type[SearchValidationError],
    expected_code: str,
    expected_message: str,
) -> None:
    """Raise the specific validation error with a stable code and message.

    Args:
        raw_sequence: Input under test.
        expected_error: Expected exception type.
        expected_code: Expected stable error code.
        expected_message: Expected message prefix.

    Returns:
        None: Assertions validate rejection behavior.

    Raises:
        AssertionError: Raised when the wrong error is raised.
    """

    with pytest.raises(expected_error) as error_info:
        domain_validate_sequence(raw_sequence)

    assert error_info.value.error_code == expected_code
    assert str(error_info.value).startswith(expected_message)
    assert isinstance(error_info.value, ValueError)


def test_domain_validate_sequence_accepts_length_boundaries() -> None:
    """Accept exactly 10 and exactly 10 000 characters.

    Returns:
        None: Assertions validate inclusive bounds.

    Raises:
        AssertionError: Raised when a boundary is rejected.
    """

    assert len(domain_validate_sequence("A" * 10)) == 10
    assert len(domain_validate_sequence("A" * 10_000)) == 10_000


def test_domain_validate_sequence_accepts_nucleotide_ambiguity_codes() -> None:
    """Accept IUPAC nucleotide letters that are not amino-acid letters, such as `U` and `B`."""

    assert domain_validate_sequence("acgtunrymkswbdhv") == "acgtunrymkswbdhv"


def test_domain_validate_search_parameters_collects_every_problem() -> None:
    """Report all out-of-range parameters in one error.

    Returns:
        None: Assertions validate problem aggregation.

    Raises:
        AssertionError: Raised when problems are missing.
    """

    parameters = SearchParameters(
        sequence="MKTAYIAKQRQISFVK",
        algorithm="megablast",
        evalue=-1.0,
        max_target_seqs=0,
        word_size=0,
        gap_open=-2,
    )

    with pytest.raises(InvalidParameterError) as error_info:
        domain_validate_search_parameters(parameters)

    problems = error_info.value.problems
    assert len(problems) == 5
    assert problems[0].startswith("Invalid algorithm. Must be one of: blastp")
    assert "E-value must be a positive number" in problems
    assert error_info.value.error_code == "INVALID_PARAMETERS"


@pytest.mark.parametrize("evalue", [float("nan"), float("inf"), float("-inf")])
def test_domain_validate_search_parameters_rejects_non_finite_evalue(evalue: float) -> None:
    with pytest.raises(InvalidParameterError) as error_info:
        domain_validate_search_parameters(SearchParameters(sequence="MKTAYIAKQRQISFVK", evalue=evalue))

    assert error_info.value.problems == ("E-value must be a positive number",)


def test_domain_validate_search_parameters_accepts_defaults() -> None:
    domain_validate_search_parameters(SearchParameters(sequence="MKTAYIAKQRQISFVK"))


def test_domain_format_sequence_uppercases_cleaned_sequence() -> None:
    assert domain_format_sequence(">q\nmkt ayi") == "QMKTAYI"


@pytest.mark.parametrize(
    ("raw_sequence", "expected_type"),
    [
        ("MKTAYIAKQRQISFVKSHFSRQ", "protein"),
        ("ATGCGTACGTTAGC", "nucleotide"),
        ("NNNNNNNNNN", "unknown"),
    ],
)
def test_domain_detect_sequence_type(raw_sequence: str, expected_type: str) -> None:
    """Classify sequences by their residue signature."""

    assert domain_detect_sequence_type(raw_sequence) == expected_type
