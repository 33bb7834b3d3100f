"""Regression tests for the `/blast/*` submit, status, results and job list endpoints."""

from __future__ import annotations

import time
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from hsndb_blast.api.application import create_api_application
from hsndb_blast.compute import (
    BlastDatabaseManager,
    BlastJobStore,
    BlastRunner,
    ProteinHitMapper,
    StoredBlastJob,
)
from hsndb_blast.config import AppSettings
from hsndb_blast.domain import ResultSet, ResultStatistics, SearchParameters

_REPORT_XML = """<?xml version="1.0"?>
<BlastOutput>
  <BlastOutput_iterations>
    <Iteration>
      <Iteration_hits>
        <Hit>
          <Hit_id>sp|P04406|G3P_HUMAN</Hit_id>
          <Hit_def>sp|P04406|G3P_HUMAN Glyceraldehyde-3-phosphate dehydrogenase OS=Homo sapiens</Hit_def>
          <Hit_hsps>
            <Hsp>
              <Hsp_score>70</Hsp_score>
              <Hsp_evalue>3e-12</Hsp_evalue>
              <Hsp_identity>9</Hsp_identity>
              <Hsp_positive>10</Hsp_positive>
              <Hsp_align-len>10</Hsp_align-len>
              <Hsp_qseq>MKTAYIAKQR</Hsp_qseq>
              <Hsp_hseq>MKTAYIAKQK</Hsp_hseq>
              <Hsp_midline>MKTAYIAKQ+</Hsp_midline>
            </Hsp>
          </Hit_hsps>
        </Hit>
      </Iteration_hits>
    </Iteration>
  </BlastOutput_iterations>
</BlastOutput>
"""


class _ProcessExecutorStub:
    """Process executor stub writing a canned report to the `-out` path."""

    def __init__(self):
        self.commands: list[list[str]] = []

    async def __call__(self, command: list[str], timeout_seconds: float) -> str:
        self.commands.append(command)
        Path(command[command.index("-out") + 1]).write_text(_REPORT_XML, encoding="utf-8")
        return ""


def _build_settings(tmp_path: Path) -> AppSettings:
    return AppSettings(
        environment_name="test",
        blast_db_path=str(tmp_path / "blastdb" / "hsndb"),
        blast_fasta_file=str(tmp_path / "hsndb.fasta"),
        blast_temp_dir=str(tmp_path / "temp"),
        blast_default_max_target_seqs=250,
        record_store_url=None,
    )


def _build_application(tmp_path: Path, job_store: BlastJobStore, executor: _ProcessExecutorStub):
    """Create application wired to a shared job store and executor stub.

    Args:
        tmp_path: Pytest temporary directory.
        job_store: Job store shared with the test for direct seeding.
        executor: Process executor stub.

    Returns:
        FastAPI: Application under test.

    Raises:
        ValueError: Raised when dependencies are invalid.
    """

    settings = _build_settings(tmp_path)
    blast_runner = BlastRunner(
        job_store=job_store,
        hit_mapper=ProteinHitMapper(),
        blast_db_path=settings.blast_db_path,
        temp_dir=settings.blast_temp_dir,
        default_max_target_seqs=settings.blast_default_max_target_seqs,
        process_executor=executor,
    )
    database_manager = BlastDatabaseManager(
        blast_db_path=settings.blast_db_path,
        fasta_file=settings.blast_fasta_file,
        process_executor=executor,
    )
    return create_api_application(settings, blast_runner, database_manager)


def _stored_job(job_id: str, status: str, progress: int = 0, **changes: object) -> StoredBlastJob:
    return StoredBlastJob(
        job_id=job_id,
        status=status,
        progress=progress,
        started_at=1_700_000_000.0,
        parameters=SearchParameters(sequence="MKTAYIAKQRQISFVK"),
        **changes,
    )


def _wait_for_terminal_status(client: TestClient, job_id: str) -> dict[str, object]:
    deadline = time.monotonic() + 5
    while time.monotonic() < deadline:
        payload = client.get(f"/api/blast/status/{job_id}").json()
        if payload["status"] in ("completed", "failed"):
            return payload
        time.sleep(0.01)
    raise AssertionError(f"job {job_id} did not finish")


def test_api_blast_submit_runs_job_and_serves_results(tmp_path: Path) -> None:
    """Submit one search, follow its status and fetch the parsed results.

    Args:
        tmp_path: Pytest temporary directory.

    Returns:
        None: Assertions validate the full compute contract.

    Raises:
        AssertionError: Raised when responses differ from the contract.
    """

    executor = _ProcessExecutorStub()
    with TestClient(_build_application(tmp_path, BlastJobStore(), executor)) as client:
        submit_response = client.post(
            "/api/blast/submit",
            json={"sequence": "MKTAYIAKQRQISFVK", "algorithm": "blastp", "gapOpen": 11},
        )
        job_id = submit_response.json()["jobId"]
        status_payload = _wait_for_terminal_status(client, job_id)
        results_response = client.get(f"/api/blast/results/{job_id}")

    assert submit_response.status_code == 200
    assert submit_response.json()["message"] == "BLAST search submitted successfully"
    assert submit_response.json()["estimatedTime"] == "5-30 seconds"
    assert status_payload == {"jobId": job_id, "status": "completed", "progress": 100}

    command = executor.commands[0]
    assert command[command.index("-max_target_seqs") + 1] == "250"
    assert command[command.index("-gapopen") + 1] == "11"

    assert results_response.status_code == 200
    results_payload = results_response.json()
    assert results_payload["jobId"] == job_id
    assert results_payload["totalHits"] == 1
    assert results_payload["hits"][0]["uniprotId"] == "P04406"
    assert results_payload["hits"][0]["geneName"] == "G3P"
    assert results_payload["hits"][0]["identity"] == 90.0
    assert results_payload["statistics"]["database"] == "HSNDB"


@pytest.mark.parametrize(
    ("body", "expected_error"),
    [
        ({}, "Sequence is required"),
        ({"sequence": ""}, "Sequence is required"),
        ({"sequence": "MKTA"}, "Sequence must be at least 10 characters long"),
        ({"sequence": "MKTAYIAKQRQISFVK", "algorithm": "psiblast"}, "Invalid algorithm. Must be one of: blastp"),
        ({"sequence": "MKTAYIAKQRQISFVK", "evalue": "abc"}, "evalue"),
    ],
)
def test_api_blast_submit_rejects_invalid_requests(tmp_path: Path, body: dict[str, object], expected_error: str) -> None:
    """Return HTTP 400 with an `{error}` payload for invalid submit bodies.

    Args:
        tmp_path: Pytest temporary directory.
        body: Request body under test.
        expected_error: Expected error message prefix.

    Returns:
        None: Assertions validate rejection behavior.

    Raises:
        AssertionError: Raised when invalid input is accepted.
    """

    job_store = BlastJobStore()
    with TestClient(_build_application(tmp_path, job_store, _ProcessExecutorStub())) as client:
        response = client.post("/api/blast/submit", json=body)

    assert response.status_code == 400
    assert response.json()["error"].startswith(expected_error)
    assert job_store.compute_job_count() == 0


def test_api_blast_submit_rejects_non_object_body(tmp_path: Path) -> None:
    client = TestClient(_build_application(tmp_path, BlastJobStore(), _ProcessExecutorStub()))

    array_response = client.post("/api/blast/submit", json=["MKTAYIAKQRQISFVK"])
    text_response = client.post(
        "/api/blast/submit",
        content="sequence=MKTAYIAKQRQISFVK",
        headers={"Content-Type": "application/json"},
    )

    assert array_response.status_code == 400
    assert array_response.json() == {"error": "Request body must be a JSON object"}
    assert text_response.status_code == 400


@pytest.mark.parametrize("literal", ["NaN", "Infinity", "-Infinity"])
def test_api_blast_submit_rejects_non_finite_evalue(tmp_path: Path, literal: str) -> None:
    job_store = BlastJobStore()
    client = TestClient(_build_application(tmp_path, job_store, _ProcessExecutorStub()))

    response = client.post(
        "/api/blast/submit",
        content=f'{{"sequence": "MKTAYIAKQRQISFVK", "evalue": {literal}}}',
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json()["error"].startswith("evalue")
    assert job_store.compute_job_count() == 0


def test_api_blast_status_rejects_malformed_and_unknown_ids(tmp_path: Path) -> None:
    client = TestClient(_build_application(tmp_path, BlastJobStore(), _ProcessExecutorStub()))

    malformed_response = client.get("/api/blast/status/bad.id")
    unknown_response = client.get("/api/blast/status/unknown-job")

    assert malformed_response.status_code == 400
    assert malformed_response.json() == {"error": "Invalid job ID"}
    assert unknown_response.status_code == 404
    assert unknown_response.json() == {"error": "Job not found"}


def test_api_blast_status_reports_failure_message(tmp_path: Path) -> None:
    job_store = BlastJobStore()
    job_store.compute_job_put(_stored_job("job-failed", "failed", 50, error="BLAST execution failed: no db"))
    client = TestClient(_build_application(tmp_path, job_store, _ProcessExecutorStub()))

    response = client.get("/api/blast/status/job-failed")

    assert response.status_code == 200
    assert response.json() == {
        "jobId": "job-failed",
        "status": "failed",
        "progress": 50,
        "error": "BLAST execution failed: no db",
    }


def test_api_blast_results_status_codes_follow_job_state(tmp_path: Path) -> None:
    """Map running, failed, result-less and unknown jobs to 202, 400 and 404.

    Args:
        tmp_path: Pytest temporary directory.

    Returns:
        None: Assertions validate result endpoint status codes.

    Raises:
        AssertionError: Raised when a status code differs.
    """

    job_store = BlastJobStore()
    job_store.compute_job_put(_stored_job("job-running", "running", 30))
    job_store.compute_job_put(_stored_job("job-failed", "failed", 50, error="BLAST execution failed"))
    job_store.compute_job_put(_stored_job("job-empty", "completed", 100))
    client = TestClient(_build_application(tmp_path, job_store, _ProcessExecutorStub()))

    running_response = client.get("/api/blast/results/job-running")
    failed_response = client.get("/api/blast/results/job-failed")
    empty_response = client.get("/api/blast/results/job-empty")
    unknown_response = client.get("/api/blast/results/job-unknown")

    assert running_response.status_code == 202
    assert running_response.json() == {"message": "Job not completed yet", "status": "running", "progress": 30}
    assert failed_response.status_code == 400
    assert failed_response.json() == {"error": "BLAST execution failed"}
    assert empty_response.status_code == 404
    assert empty_response.json() == {"error": "No results available"}
    assert unknown_response.status_code == 404


def test_api_blast_results_serves_stored_result_set(tmp_path: Path) -> None:
    job_store = BlastJobStore()
    result_set = ResultSet(
        job_id="job-done",
        query_length=16,
        database_size=4533,
        total_hits=0,
        statistics=ResultStatistics(
            kappa=0.041,
            lambda_=0.267,
            entropy=0.14,
            database="HSNDB",
            database_version="2024.1",
            total_sequences=4533,
        ),
        execution_time=0.8,
    )
    job_store.compute_job_put(_stored_job("job-done", "completed", 100, results=result_set))
    client = TestClient(_build_application(tmp_path, job_store, _ProcessExecutorStub()))

    response = client.get("/api/blast/results/job-done")

    assert response.status_code == 200
    assert response.json()["hits"] == []
    assert response.json()["executionTime"] == 0.8


def test_api_blast_job_list_reports_stored_jobs(tmp_path: Path) -> None:
    job_store = BlastJobStore()
    job_store.compute_job_put(_stored_job("job-1", "pending"))
    job_store.compute_job_put(_stored_job("job-2", "completed", 100))
    client = TestClient(_build_application(tmp_path, job_store, _ProcessExecutorStub()))

    response = client.get("/api/blast/jobs")

    assert response.status_code == 200
    payload = response.json()
    assert payload["total"] == 2
    assert payload["jobs"][0] == {
        "jobId": "job-1",
        "status": "pending",
        "progress": 0,
        "startTime": "2023-11-14T22:13:20+00:00",
        "parameters": {"algorithm": "blastp", "sequenceLength": 16},
    }
    assert payload["stats"] == {
        "jobs": {"total": 2, "completed": 1, "running": 1, "failed": 0, "maxSize": 1000},
        "mappings": {"fastaToHsnMappings": 0, "hsnToProteinMappings": 0},
    }
