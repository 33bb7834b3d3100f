"""Tests for startup wiring helpers and CLI entrypoint helpers."""

from __future__ import annotations

import io
from pathlib import Path

import pytest

from hsndb_blast import main as main_module
from hsndb_blast.bootstrap import (
    bootstrap_create_application,
    bootstrap_create_record_store,
    bootstrap_find_missing_required_files,
)
from hsndb_blast.config import AppSettings
from hsndb_blast.domain import JobStatus
from hsndb_blast.jobs import CoordinatorSnapshot


def _build_settings(tmp_path: Path, **overrides: object) -> AppSettings:
    values: dict[str, object] = {
        "environment_name": "test",
        "blast_db_path": str(tmp_path / "blastdb" / "hsndb"),
        "blast_fasta_file": str(tmp_path / "hsndb.fasta"),
        "blast_temp_dir": str(tmp_path / "temp"),
        "record_store_url": None,
    }
    values.update(overrides)
    return AppSettings(**values)


def test_bootstrap_find_missing_required_files_requires_fasta_only_without_database(tmp_path: Path) -> None:
    """Require the FASTA file only while the BLAST database is not built.

    Args:
        tmp_path: Pytest temporary directory.

    Returns:
        None: Assertions validate startup file checks.

    Raises:
        AssertionError: Raised when the check result differs.
    """

    settings = _build_settings(tmp_path)

    assert bootstrap_find_missing_required_files(settings) == [str(tmp_path / "hsndb.fasta")]

    (tmp_path / "blastdb").mkdir()
    for extension in (".phr", ".pin", ".psq"):
        (tmp_path / "blastdb" / f"hsndb{extension}").write_bytes(b"")
    assert bootstrap_find_missing_required_files(settings) == []


def test_bootstrap_record_store_is_optional(tmp_path: Path) -> None:
    assert bootstrap_create_record_store(_build_settings(tmp_path)) is None

    record_store = bootstrap_create_record_store(
        _build_settings(tmp_path, record_store_url=f"sqlite:///{tmp_path / 'hsndb.sqlite'}")
    )
    assert record_store is not None
    assert record_store.records_source_label().startswith("sqlite:///")


def test_bootstrap_create_application_mounts_routes_under_prefix(tmp_path: Path) -> None:
    application = bootstrap_create_application(_build_settings(tmp_path))

    route_paths = {route.path for route in application.routes}

    assert "/api/health" in route_paths
    assert "/api/blast/submit" in route_paths
    assert "/api/database/info" in route_paths


def test_main_read_query_sequence_prefers_argument_then_file_then_stdin(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Resolve the query from `--sequence`, `--sequence-file` or standard input.

    Args:
        tmp_path: Pytest temporary directory.
        monkeypatch: Pytest patch helper.

    Returns:
        None: Assertions validate input precedence.

    Raises:
        AssertionError: Raised when the wrong source is used.
    """

    sequence_file = tmp_path / "query.fasta"
    sequence_file.write_text(">query\nMKTAYIAKQR\n", encoding="utf-8")
    monkeypatch.setattr("sys.stdin", io.StringIO("STDINSEQUENCE"))

    assert main_module.main_read_query_sequence("MKTAYIAKQRQISFVK", str(sequence_file)) == "MKTAYIAKQRQISFVK"
    assert main_module.main_read_query_sequence(None, str(sequence_file)) == ">query\nMKTAYIAKQR\n"
    assert main_module.main_read_query_sequence(None, None) == "STDINSEQUENCE"


def test_main_build_search_summary_without_result_reports_error() -> None:
    snapshot = CoordinatorSnapshot(
        job_id="job-1",
        status=JobStatus(job_id="job-1", status="running", progress=40),
        result=None,
        is_submitting=False,
        is_polling=False,
        is_loading_result=False,
        is_searching=True,
        is_completed=False,
        is_failed=False,
        progress=40,
        estimated_time_remaining=None,
        current_error="Job not found",
        current_error_code="JOB_NOT_FOUND",
    )

    assert main_module.main_build_search_summary(snapshot) == {
        "jobId": "job-1",
        "status": "running",
        "error": "Job not found",
        "errorCode": "JOB_NOT_FOUND",
    }
