"""Main module entrypoint for local runtime execution.

This module validates startup configuration and launches the compute service
or runs one client-side search against it.
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

import structlog
import uvicorn

from hsndb_blast.bootstrap import (
    bootstrap_create_application,
    bootstrap_create_coordinator,
    bootstrap_create_database_manager,
    bootstrap_find_missing_required_files,
)
from hsndb_blast.config import AppSettings, config_configure_logging, config_load_settings
from hsndb_blast.domain import SearchParameters
from hsndb_blast.jobs import CoordinatorSnapshot, job_analyze_results

_LOGGER = structlog.get_logger(__name__)


def main() -> None:
    """Run selected runtime command with validated startup configuration.

    Returns:
        None: This function does not return a runtime value.

    Raises:
        SettingsLoadError: Raised when configuration validation fails.
        SystemExit: Raised with a non-zero code when the command fails.
    """

    argument_parser = argparse.ArgumentParser(description="HSNDB BLAST runtime entrypoint")
    argument_parser.add_argument(
        "command",
        nargs="?",
        default="api",
        choices=("api", "search", "init-db"),
        help="Runtime command: `api` starts the compute service, `search` runs one search against "
        "BLAST_API_URL, `init-db` builds the BLAST database from the FASTA file",
        type=str,
    )
    argument_parser.add_argument("--sequence", dest="sequence", type=str, help="Query sequence for `search`")
    argument_parser.add_argument(
        "--sequence-file",
        dest="sequence_file",
        type=str,
        help="Path of a FASTA or plain sequence file for `search`",
    )
    argument_parser.add_argument("--algorithm", dest="algorithm", type=str, default="blastp")
    argument_parser.add_argument("--evalue", dest="evalue", type=float, default=10.0)
    argument_parser.add_argument("--matrix", dest="matrix", type=str, default="BLOSUM62")
    argument_parser.add_argument("--max-target-seqs", dest="max_target_seqs", type=int)
    argument_parser.add_argument(
        "--timeout",
        dest="timeout_seconds",
        type=float,
        help="Maximum seconds to wait for `search` to settle",
    )
    parsed_arguments = argument_parser.parse_args()

    settings = config_load_settings()
    config_configure_logging(level=settings.log_level, json_format=settings.log_json)

    if parsed_arguments.command == "init-db":
        database_manager = bootstrap_create_database_manager(settings)
        try:
            asyncio.run(database_manager.compute_database_create())
        except (FileNotFoundError, RuntimeError) as error:
            _LOGGER.error("blast_database_init_failed", error=str(error))
            raise SystemExit(1) from error
        return

    if parsed_arguments.command == "search":
        sequence = main_read_query_sequence(parsed_arguments.sequence, parsed_arguments.sequence_file)
        parameters = SearchParameters(
            sequence=sequence,
            algorithm=parsed_arguments.algorithm,
            evalue=parsed_arguments.evalue,
            matrix=parsed_arguments.matrix,
            max_target_seqs=parsed_arguments.max_target_seqs,
        )
        try:
            snapshot = asyncio.run(main_run_search(settings, parameters, parsed_arguments.timeout_seconds))
        except asyncio.TimeoutError as error:
            _LOGGER.error("blast_search_timed_out", timeout_seconds=parsed_arguments.timeout_seconds)
            raise SystemExit(1) from error
        print(json.dumps(main_build_search_summary(snapshot), indent=2))
        if snapshot.current_error is not None or snapshot.result is None:
            raise SystemExit(1)
        return

    missing_files = bootstrap_find_missing_required_files(settings)
    if missing_files:
        _LOGGER.error("required_files_missing", missing=missing_files)
        raise SystemExit(1)

    database_manager = bootstrap_create_database_manager(settings)
    try:
        asyncio.run(database_manager.compute_database_initialize())
    except (FileNotFoundError, RuntimeError) as error:
        _LOGGER.error("blast_database_init_failed", error=str(error))
        raise SystemExit(1) from error

    application = bootstrap_create_application(settings)
    uvicorn.run(
        application,
        host=settings.application_host,
        port=settings.application_port,
        log_config=None,
    )


def main_read_query_sequence(sequence: str | None, sequence_file: str | None) -> str:
    """Return the query from `--sequence`, `--sequence-file` or standard input."""

    if sequence:
        return sequence
    if sequence_file:
        return Path(sequence_file).read_text(encoding="utf-8")
    return sys.stdin.read()


async def main_run_search(
    settings: AppSettings,
    parameters: SearchParameters,
    timeout_seconds: float | None = None,
) -> CoordinatorSnapshot:
    """Submit one search through the coordinator and wait for it to settle.

    Args:
        settings: Validated runtime settings.
        parameters: Search parameters.
        timeout_seconds: Optional wait limit.

    Returns:
        CoordinatorSnapshot: Final observable state.

    Raises:
        asyncio.TimeoutError: Raised when the job does not settle within timeout_seconds.
    """

    coordinator, compute_adapter = bootstrap_create_coordinator(settings)
    try:
        await coordinator.job_submit(parameters)
        return await coordinator.job_wait_until_settled(timeout_seconds=timeout_seconds)
    finally:
        coordinator.job_clear()
        await compute_adapter.adapter_close()


def main_build_search_summary(snapshot: CoordinatorSnapshot) -> dict[str, object]:
    """Build the JSON summary printed by the `search` command."""

    summary: dict[str, object] = {
        "jobId": snapshot.job_id,
        "status": snapshot.status.status if snapshot.status is not None else None,
        "error": snapshot.current_error,
        "errorCode": snapshot.current_error_code,
    }
    if snapshot.result is None:
        return summary

    analysis = job_analyze_results(snapshot.result)
    summary["totalHits"] = snapshot.result.total_hits
    summary["significantHits"] = analysis.significant_hits
    summary["highIdentityHits"] = analysis.high_identity_hits
    summary["averageIdentity"] = round(analysis.average_identity, 1)
    summary["evalueBins"] = analysis.evalue_bins
    summary["topHits"] = [
        {
            "hsnId": hit.hsn_id,
            "geneName": hit.gene_name,
            "proteinName": hit.protein_name,
            "evalue": hit.evalue,
            "identity": hit.identity,
        }
        for hit in snapshot.result.hits[:10]
    ]
    return summary


if __name__ == "__main__":
    main()
