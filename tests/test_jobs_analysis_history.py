"""Tests for result analysis and bounded search history."""

from __future__ import annotations

import pytest

from hsndb_blast.domain import Hit, ResultSet, ResultStatistics, SearchParameters
from hsndb_blast.jobs import BlastSearchHistory, job_analyze_results


def _build_hit(hsn_id: str, evalue: float, identity: float) -> Hit:
    return Hit(
        id=f"protein_{hsn_id}",
        hsn_id=hsn_id,
        gene_name="GENE",
        protein_name="Protein",
        evalue=evalue,
        score=100.0,
        identity=identity,
        positives=identity,
        gaps=0,
        query_start=1,
        query_end=20,
        subject_start=1,
        subject_end=20,
        query_seq="MKTAYIAKQR",
        subject_seq="MKTAYIAKQR",
        alignment="MKTAYIAKQR",
        length=20,
    )


def _build_result_set(hits: tuple[Hit, ...]) -> ResultSet:
    return ResultSet(
        job_id="job-1",
        query_length=20,
        database_size=4533,
        total_hits=len(hits),
        statistics=ResultStatistics(
            kappa=0.041,
            lambda_=0.267,
            entropy=0.14,
            database="HSNDB",
            database_version="2024.1",
            total_sequences=4533,
        ),
        execution_time=1.0,
        hits=hits,
    )


def test_jobs_analyze_results_bins_hits_by_significance() -> None:
    """Count significant and high-identity hits and assign e-value bins.

    Returns:
        None: Assertions validate derived statistics.

    Raises:
        AssertionError: Raised when statistics differ.
    """

    hits = (
        _build_hit("HSN001", 0.0, 100.0),
        _build_hit("HSN002", 1e-20, 95.0),
        _build_hit("HSN003", 1e-6, 60.0),
        _build_hit("HSN004", 0.5, 25.0),
    )

    analysis = job_analyze_results(_build_result_set(hits))

    assert analysis.total_hits == 4
    assert analysis.significant_hits == 3
    assert analysis.high_identity_hits == 2
    assert analysis.average_identity == pytest.approx(70.0)
    assert analysis.top_hit is hits[0]
    assert analysis.evalue_bins == {"highly_significant": 1, "significant": 1, "moderate": 1, "weak": 1}
    assert analysis.average_log10_evalue < 0


def test_jobs_analyze_results_handles_empty_result_set() -> None:
    analysis = job_analyze_results(_build_result_set(()))

    assert analysis.total_hits == 0
    assert analysis.top_hit is None
    assert analysis.average_identity == 0.0
    assert sum(analysis.evalue_bins.values()) == 0


def test_jobs_search_history_keeps_most_recent_entries_first() -> None:
    """Cap history size and order entries newest first.

    Returns:
        None: Assertions validate bounded ordering.

    Raises:
        AssertionError: Raised when ordering or cap is wrong.
    """

    history = BlastSearchHistory(max_entries=2)
    parameters = SearchParameters(sequence="MKTAYIAKQRQISFVK")

    history.history_add("job-1", parameters)
    history.history_add("job-2", parameters)
    history.history_add("job-3", parameters)

    assert [entry.job_id for entry in history.history_entries()] == ["job-3", "job-2"]
    assert history.history_entries()[0].status == "submitted"


def test_jobs_search_history_updates_known_entries_only() -> None:
    history = BlastSearchHistory()
    history.history_add("job-1", SearchParameters(sequence="MKTAYIAKQRQISFVK"))

    history.history_update_status("job-1", "completed")
    history.history_update_status("missing", "failed")

    assert [(entry.job_id, entry.status) for entry in history.history_entries()] == [("job-1", "completed")]


def test_jobs_search_history_rejects_invalid_input() -> None:
    with pytest.raises(ValueError, match="max_entries must be >= 1"):
        BlastSearchHistory(max_entries=0)
    with pytest.raises(ValueError, match="job_id must not be blank"):
        BlastSearchHistory().history_add(" ", SearchParameters(sequence="MKTAYIAKQRQISFVK"))
