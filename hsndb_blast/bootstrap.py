"""Application bootstrap wiring for startup validation and dependency assembly."""

from pathlib import Path

import httpx
from fastapi import FastAPI

from hsndb_blast.adapters import BlastHttpAdapter
from hsndb_blast.api import create_api_application
from hsndb_blast.compute import BlastDatabaseManager, BlastJobStore, BlastRunner, ProteinHitMapper
from hsndb_blast.config import AppSettings, config_load_settings
from hsndb_blast.db import SQLAlchemyProteinRecordStore, db_create_engine
from hsndb_blast.jobs import (
    BlastJobCoordinator,
    BlastJobSubmitter,
    BlastResultFetcher,
    BlastSearchHistory,
    BlastStatusPoller,
)


def bootstrap_create_record_store(settings: AppSettings) -> SQLAlchemyProteinRecordStore | None:
    """Build the SQLAlchemy record store when a record store URL is configured.

    Args:
        settings: Validated runtime settings.

    Returns:
        SQLAlchemyProteinRecordStore | None: Record store, or None to use FASTA header parsing.

    Raises:
        ValueError: Raised when the configured URL is invalid.
    """

    if settings.record_store_url is None:
        return None
    engine = db_create_engine(database_url=settings.record_store_url)
    return SQLAlchemyProteinRecordStore(engine=engine)


def bootstrap_create_database_manager(settings: AppSettings) -> BlastDatabaseManager:
    return BlastDatabaseManager(
        blast_db_path=settings.blast_db_path,
        fasta_file=settings.blast_fasta_file,
        blast_bin_path=settings.blast_bin_path,
        total_sequences=settings.blast_database_total_sequences,
        database_version=settings.blast_database_version,
    )


def bootstrap_create_blast_runner(
    settings: AppSettings,
    record_store: SQLAlchemyProteinRecordStore | None = None,
) -> BlastRunner:
    """Build the BLAST runner with its job store and hit mapper.

    Args:
        settings: Validated runtime settings.
        record_store: Optional record store used for hit enrichment.

    Returns:
        BlastRunner: Runner ready to accept jobs.

    Raises:
        ValueError: Raised when settings hold invalid limits.
    """

    return BlastRunner(
        job_store=BlastJobStore(max_size=settings.job_store_max_size),
        hit_mapper=ProteinHitMapper(record_store=record_store),
        blast_db_path=settings.blast_db_path,
        temp_dir=settings.blast_temp_dir,
        blast_bin_path=settings.blast_bin_path,
        execution_timeout_seconds=settings.blast_execution_timeout_seconds,
        default_evalue=settings.blast_default_evalue,
        default_max_target_seqs=settings.blast_default_max_target_seqs,
        default_matrix=settings.blast_default_matrix,
        database_name=settings.blast_database_name,
        database_version=settings.blast_database_version,
        total_sequences=settings.blast_database_total_sequences,
    )


def bootstrap_create_application(settings: AppSettings | None = None) -> FastAPI:
    """Assemble the compute service application after validating startup configuration.

    Args:
        settings: Optional preloaded settings; loaded from the environment when omitted.

    Returns:
        FastAPI: Fully initialized FastAPI application instance.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
    """

    resolved_settings = settings or config_load_settings()
    record_store = bootstrap_create_record_store(resolved_settings)
    return create_api_application(
        settings=resolved_settings,
        blast_runner=bootstrap_create_blast_runner(resolved_settings, record_store=record_store),
        database_manager=bootstrap_create_database_manager(resolved_settings),
        db_health_service=record_store,
    )


def bootstrap_create_coordinator(
    settings: AppSettings | None = None,
    client: httpx.AsyncClient | None = None,
) -> tuple[BlastJobCoordinator, BlastHttpAdapter]:
    """Build a job coordinator talking to the configured compute service.

    The caller owns the returned adapter and must close it with `adapter_close()`.

    Args:
        settings: Optional preloaded settings; loaded from the environment when omitted.
        client: Optional preconfigured HTTP client, mainly for tests.

    Returns:
        tuple[BlastJobCoordinator, BlastHttpAdapter]: Coordinator and its HTTP adapter.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
    """

    resolved_settings = settings or config_load_settings()
    compute_adapter = BlastHttpAdapter(
        base_url=resolved_settings.blast_api_url,
        request_timeout_seconds=resolved_settings.blast_request_timeout_seconds,
        client=client,
    )
    coordinator = BlastJobCoordinator(
        submitter=BlastJobSubmitter(compute_adapter=compute_adapter),
        poller=BlastStatusPoller(
            compute_adapter=compute_adapter,
            interval_seconds=resolved_settings.blast_poll_interval_seconds,
            max_attempts=resolved_settings.blast_poll_max_attempts,
            max_consecutive_failures=resolved_settings.blast_poll_max_consecutive_failures,
        ),
        result_fetcher=BlastResultFetcher(compute_adapter=compute_adapter),
        history=BlastSearchHistory(),
        health_checker=compute_adapter if resolved_settings.blast_check_health_before_submit else None,
    )
    return coordinator, compute_adapter


def bootstrap_find_missing_required_files(settings: AppSettings) -> list[str]:
    """Return required input files that are absent.

    The FASTA file is required only while the BLAST database has not been built.

    Args:
        settings: Validated runtime settings.

    Returns:
        list[str]: Missing file paths; empty when startup can proceed.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    database_manager = bootstrap_create_database_manager(settings)
    if not database_manager.compute_database_missing_files():
        return []
    if Path(settings.blast_fasta_file).is_file():
        return []
    return [settings.blast_fasta_file]
