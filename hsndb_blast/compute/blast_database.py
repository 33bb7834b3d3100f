"""BLAST protein database verification and creation."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

import structlog

from .blast_runner import ProcessExecutor, compute_execute_process

_LOGGER = structlog.get_logger(__name__)

PROTEIN_DATABASE_EXTENSIONS: Final[tuple[str, ...]] = (".phr", ".pin", ".psq")
DATABASE_TITLE: Final[str] = "HSNDB S-nitrosylated Proteins Database"


@dataclass(frozen=True)
class BlastDatabaseInfo:
    """Database metadata reported by the compute API.

    Attributes:
        valid: Whether the database files exist and were accepted.
        path: Database path prefix.
        total_sequences: Configured number of sequences.
        database_version: Configured database version label.
    """

    valid: bool
    path: str
    total_sequences: int
    database_version: str


class BlastDatabaseManager:
    """Verify and build the BLAST database from the HSNDB FASTA file."""

    def __init__(
        self,
        blast_db_path: str,
        fasta_file: str,
        blast_bin_path: str = "",
        total_sequences: int = 4533,
        database_version: str = "2024.1",
        process_executor: ProcessExecutor | None = None,
        verify_timeout_seconds: float = 30.0,
        create_timeout_seconds: float = 600.0,
    ):
        self._blast_db_path = blast_db_path
        self._fasta_file = fasta_file
        self._blast_bin_path = blast_bin_path
        self._total_sequences = total_sequences
        self._database_version = database_version
        self._process_executor = process_executor or compute_execute_process
        self._verify_timeout_seconds = verify_timeout_seconds
        self._create_timeout_seconds = create_timeout_seconds

    def compute_database_missing_files(self) -> list[str]:
        """Return the database file extensions that are not present on disk."""

        return [
            extension
            for extension in PROTEIN_DATABASE_EXTENSIONS
            if not Path(f"{self._blast_db_path}{extension}").exists()
        ]

    async def compute_database_verify(self) -> bool:
        """Check database files and query them with `blastdbcmd -info`.

        A failing info query is logged but does not invalidate a database whose
        files are all present.

        Returns:
            bool: True when every database file exists.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        missing_files = self.compute_database_missing_files()
        if missing_files:
            _LOGGER.info("blast_database_files_missing", path=self._blast_db_path, missing=missing_files)
            return False

        command = [self._database_program("blastdbcmd"), "-db", self._blast_db_path, "-info"]
        try:
            output = await self._process_executor(command, self._verify_timeout_seconds)
            _LOGGER.info("blast_database_verified", path=self._blast_db_path, info=output.strip())
        except RuntimeError as error:
            _LOGGER.warning("blast_database_info_failed", path=self._blast_db_path, error=str(error))
        return True

    async def compute_database_create(self) -> str:
        """Build the protein database with `makeblastdb`.

        Returns:
            str: Tool output.

        Raises:
            FileNotFoundError: Raised when the FASTA file does not exist.
            RuntimeError: Raised when `makeblastdb` fails.
        """

        if not Path(self._fasta_file).is_file():
            raise FileNotFoundError(f"FASTA file not found at {self._fasta_file}")

        Path(self._blast_db_path).parent.mkdir(parents=True, exist_ok=True)
        command = [
            self._database_program("makeblastdb"),
            "-in",
            self._fasta_file,
            "-dbtype",
            "prot",
            "-out",
            self._blast_db_path,
            "-title",
            DATABASE_TITLE,
            "-parse_seqids",
        ]
        _LOGGER.info("blast_database_creating", command=command)
        output = await self._process_executor(command, self._create_timeout_seconds)
        _LOGGER.info("blast_database_created", path=self._blast_db_path)
        return output

    async def compute_database_initialize(self) -> bool:
        """Reuse a valid database or create a new one.

        Returns:
            bool: True once a usable database exists.

        Raises:
            FileNotFoundError: Raised when creation is needed and the FASTA file is missing.
            RuntimeError: Raised when creation fails.
        """

        if await self.compute_database_verify():
            return True
        await self.compute_database_create()
        return True

    async def compute_database_info(self) -> BlastDatabaseInfo:
        return BlastDatabaseInfo(
            valid=await self.compute_database_verify(),
            path=self._blast_db_path,
            total_sequences=self._total_sequences,
            database_version=self._database_version,
        )

    def _database_program(self, program: str) -> str:
        return os.path.join(self._blast_bin_path, program) if self._blast_bin_path else program
