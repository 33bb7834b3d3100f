"""Asynchronous BLAST job execution for the compute service.

Each accepted job runs as one asyncio task: write the query FASTA file, run
the BLAST+ program as a child process, parse its XML report and store the
result set (or the failure message) in the job store.
"""

from __future__ import annotations

import asyncio
import os
import time
import uuid
from pathlib import Path
from typing import Awaitable, Callable, Final

import structlog

from hsndb_blast.domain import (
    JOB_STATUS_COMPLETED,
    JOB_STATUS_FAILED,
    JOB_STATUS_PENDING,
    JOB_STATUS_RUNNING,
    JobStatus,
    SearchParameters,
    domain_validate_search_parameters,
    domain_validate_sequence,
)

from .blast_xml import compute_parse_blast_xml
from .hit_mapper import ProteinHitMapper
from .job_store import BlastJobStore, StoredBlastJob

_LOGGER = structlog.get_logger(__name__)

MATRIX_ALGORITHMS: Final[frozenset[str]] = frozenset({"blastp", "blastx", "tblastn"})
DEFAULT_WORD_SIZES: Final[dict[str, int]] = {
    "blastp": 3,
    "blastn": 11,
    "blastx": 3,
    "tblastn": 3,
    "tblastx": 3,
}

PROGRESS_STARTED: Final[int] = 10
PROGRESS_QUERY_WRITTEN: Final[int] = 30
PROGRESS_EXECUTING: Final[int] = 50
PROGRESS_EXECUTED: Final[int] = 80
PROGRESS_PARSED: Final[int] = 95
PROGRESS_DONE: Final[int] = 100

ProcessExecutor = Callable[[list[str], float], Awaitable[str]]


async def compute_execute_process(command: list[str], timeout_seconds: float) -> str:
    """Run one command without a shell and return its standard output.

    Args:
        command: Program path followed by its arguments.
        timeout_seconds: Wall-clock limit; the process is killed on expiry.

    Returns:
        str: Decoded standard output.

    Raises:
        RuntimeError: Raised when the program is missing, times out or exits non-zero.
    """

    try:
        process = await asyncio.create_subprocess_exec(
            *command,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except (FileNotFoundError, PermissionError) as error:
        raise RuntimeError(f"BLAST execution failed: cannot start {command[0]}") from error

    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout_seconds)
    except asyncio.TimeoutError as error:
        process.kill()
        await process.wait()
        raise RuntimeError(f"BLAST execution timed out after {timeout_seconds:g} seconds") from error

    if process.returncode != 0:
        detail = stderr.decode(errors="replace").strip() or f"exit code {process.returncode}"
        raise RuntimeError(f"BLAST execution failed: {detail}")
    return stdout.decode(errors="replace")


class BlastRunner:
    """Submit BLAST jobs and track them through the job store."""

    def __init__(
        self,
        job_store: BlastJobStore,
        hit_mapper: ProteinHitMapper,
        blast_db_path: str,
        temp_dir: str,
        blast_bin_path: str = "",
        execution_timeout_seconds: float = 300.0,
        default_evalue: float = 10.0,
        default_max_target_seqs: int = 500,
        default_matrix: str = "BLOSUM62",
        database_name: str = "HSNDB",
        database_version: str = "2024.1",
        total_sequences: int = 4533,
        process_executor: ProcessExecutor | None = None,
        clock: Callable[[], float] | None = None,
    ):
        """Initialize BLAST runner.

        Args:
            job_store: Store receiving job records.
            hit_mapper: Mapper resolving hit identifiers to protein details.
            blast_db_path: BLAST database path prefix passed to `-db`.
            temp_dir: Directory for query and report files.
            blast_bin_path: Directory holding BLAST+ programs; blank uses PATH lookup.
            execution_timeout_seconds: Per-job process time limit.
            default_evalue: E-value used when a request omits it.
            default_max_target_seqs: Hit limit used when a request omits it.
            default_matrix: Matrix used when a request omits it.
            database_name: Database label reported in result statistics.
            database_version: Database version reported in result statistics.
            total_sequences: Database size reported in result statistics.
            process_executor: Optional coroutine running one command.
            clock: Optional epoch-seconds provider.

        Returns:
            None: This initializer does not return a value.

        Raises:
            ValueError: Raised when dependencies or limits are invalid.
        """

        if job_store is None:
            raise ValueError("job_store must not be None")
        if hit_mapper is None:
            raise ValueError("hit_mapper must not be None")
        if execution_timeout_seconds <= 0:
            raise ValueError("execution_timeout_seconds must be > 0")

        self._job_store = job_store
        self._hit_mapper = hit_mapper
        self._blast_db_path = blast_db_path
        self._temp_dir = Path(temp_dir)
        self._blast_bin_path = blast_bin_path
        self._execution_timeout_seconds = execution_timeout_seconds
        self._default_evalue = default_evalue
        self._default_max_target_seqs = default_max_target_seqs
        self._default_matrix = default_matrix
        self._database_name = database_name
        self._database_version = database_version
        self._total_sequences = total_sequences
        self._process_executor = process_executor or compute_execute_process
        self._clock = clock or time.time
        self._tasks: set[asyncio.Task[None]] = set()

    async def compute_runner_initialize(self) -> bool:
        """Load protein mappings off the event loop; False means fallback parsing."""

        return await asyncio.to_thread(self._hit_mapper.compute_mapper_initialize)

    async def compute_submit_job(self, parameters: SearchParameters) -> str:
        """Validate one request, store a pending job and start its execution task.

        Args:
            parameters: Search parameters; unset optionals take runner defaults.

        Returns:
            str: New job identifier.

        Raises:
            SearchValidationError: Raised when the sequence or parameters are invalid.
        """

        cleaned_sequence = domain_validate_sequence(parameters.sequence)
        domain_validate_search_parameters(parameters)

        job_id = str(uuid.uuid4())
        self._job_store.compute_job_put(
            StoredBlastJob(
                job_id=job_id,
                status=JOB_STATUS_PENDING,
                progress=0,
                started_at=self._clock(),
                parameters=parameters,
            )
        )
        _LOGGER.info(
            "blast_job_accepted",
            job_id=job_id,
            algorithm=parameters.algorithm,
            sequence_length=len(cleaned_sequence),
        )

        task = asyncio.get_running_loop().create_task(self._runner_process_job(job_id, parameters, cleaned_sequence))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return job_id

    def compute_build_command(self, parameters: SearchParameters, input_file: str, output_file: str) -> list[str]:
        """Build the BLAST+ argument list for one search.

        Args:
            parameters: Search parameters.
            input_file: Query FASTA path.
            output_file: XML report path.

        Returns:
            list[str]: Program path followed by its arguments.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        algorithm = parameters.algorithm
        evalue = parameters.evalue if parameters.evalue is not None else self._default_evalue
        max_target_seqs = parameters.max_target_seqs or self._default_max_target_seqs
        matrix = parameters.matrix or self._default_matrix

        executable = os.path.join(self._blast_bin_path, algorithm) if self._blast_bin_path else algorithm
        command = [
            executable,
            "-query",
            input_file,
            "-db",
            self._blast_db_path,
            "-evalue",
            f"{evalue:g}",
            "-max_target_seqs",
            str(max_target_seqs),
            "-outfmt",
            "5",
            "-out",
            output_file,
        ]
        if algorithm in MATRIX_ALGORITHMS:
            command.extend(["-matrix", matrix])

        word_size = parameters.word_size or DEFAULT_WORD_SIZES.get(algorithm)
        if word_size:
            command.extend(["-word_size", str(word_size)])
        if parameters.gap_open is not None:
            command.extend(["-gapopen", str(parameters.gap_open)])
        if parameters.gap_extend is not None:
            command.extend(["-gapextend", str(parameters.gap_extend)])
        return command

    def compute_job_record(self, job_id: str) -> StoredBlastJob | None:
        return self._job_store.compute_job_get(job_id)

    def compute_job_list(self) -> list[StoredBlastJob]:
        return self._job_store.compute_job_list()

    def compute_runner_stats(self) -> dict[str, dict[str, int]]:
        """Return job store counts and loaded protein mapping sizes."""

        return {
            "jobs": self._job_store.compute_jobs_stats(),
            "mappings": self._hit_mapper.compute_mapper_stats(),
        }

    def compute_job_status(self, job_id: str) -> JobStatus | None:
        """Return the wire status of one job, or None when unknown.

        Args:
            job_id: Job identifier.

        Returns:
            JobStatus | None: Status snapshot with a remaining-time estimate for
            running jobs that reported progress.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        job = self._job_store.compute_job_get(job_id)
        if job is None:
            return None

        estimated_time_remaining = None
        if job.status == JOB_STATUS_RUNNING and job.progress > 0:
            elapsed_seconds = self._clock() - job.started_at
            total_estimated_seconds = elapsed_seconds / (job.progress / 100)
            estimated_time_remaining = max(0, round(total_estimated_seconds - elapsed_seconds))

        return JobStatus(
            job_id=job.job_id,
            status=job.status,
            progress=job.progress,
            estimated_time_remaining=estimated_time_remaining,
            error=job.error if job.status == JOB_STATUS_FAILED else None,
        )

    def compute_cleanup_expired(self, max_age_seconds: float) -> int:
        removed_count = self._job_store.compute_jobs_cleanup_expired(max_age_seconds)
        if removed_count:
            _LOGGER.info("blast_jobs_cleaned_up", removed=removed_count)
        return removed_count

    def compute_active_task_count(self) -> int:
        return len(self._tasks)

    async def compute_runner_shutdown(self) -> None:
        """Cancel running job tasks and wait for them to finish."""

        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    async def _runner_process_job(self, job_id: str, parameters: SearchParameters, cleaned_sequence: str) -> None:
        input_file = self._temp_dir / f"query_{job_id}.fasta"
        output_file = self._temp_dir / f"results_{job_id}.xml"
        started_monotonic = time.monotonic()

        try:
            self._job_store.compute_job_update(job_id, status=JOB_STATUS_RUNNING, progress=PROGRESS_STARTED)

            self._temp_dir.mkdir(parents=True, exist_ok=True)
            input_file.write_text(f">query\n{cleaned_sequence}", encoding="utf-8")
            self._job_store.compute_job_update(job_id, progress=PROGRESS_QUERY_WRITTEN)

            command = self.compute_build_command(parameters, str(input_file), str(output_file))
            _LOGGER.info("blast_job_executing", job_id=job_id, command=command)
            self._job_store.compute_job_update(job_id, progress=PROGRESS_EXECUTING)

            await self._process_executor(command, self._execution_timeout_seconds)
            self._job_store.compute_job_update(job_id, progress=PROGRESS_EXECUTED)

            xml_text = output_file.read_text(encoding="utf-8")
            result_set = compute_parse_blast_xml(
                xml_text=xml_text,
                job_id=job_id,
                query_sequence=cleaned_sequence,
                resolve_protein=self._hit_mapper.compute_mapper_resolve,
                database_name=self._database_name,
                database_version=self._database_version,
                total_sequences=self._total_sequences,
                execution_time=round(time.monotonic() - started_monotonic, 2),
            )
            self._job_store.compute_job_update(job_id, progress=PROGRESS_PARSED)

            self._job_store.compute_job_update(
                job_id,
                status=JOB_STATUS_COMPLETED,
                progress=PROGRESS_DONE,
                results=result_set,
                completed_at=self._clock(),
            )
            _LOGGER.info("blast_job_completed", job_id=job_id, total_hits=result_set.total_hits)
        except asyncio.CancelledError:
            self._job_store.compute_job_update(job_id, status=JOB_STATUS_FAILED, error="BLAST job cancelled")
            raise
        except Exception as error:
            _LOGGER.error("blast_job_failed", job_id=job_id, error=str(error))
            self._job_store.compute_job_update(
                job_id,
                status=JOB_STATUS_FAILED,
                error=str(error) or type(error).__name__,
                completed_at=self._clock(),
            )
        finally:
            for path in (input_file, output_file):
                try:
                    path.unlink(missing_ok=True)
                except OSError as error:
                    _LOGGER.warning("blast_temp_file_cleanup_failed", path=str(path), error=str(error))
