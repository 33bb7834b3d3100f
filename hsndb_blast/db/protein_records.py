"""Protein record store implementations backed by SQLAlchemy or memory."""

from __future__ import annotations

from typing import Iterable

from sqlalchemy import Engine, text
from sqlalchemy.exc import SQLAlchemyError

from hsndb_blast.domain import HealthStatus

from .interfaces import DatabaseHealthPort, FastaHeaderRecord, ProteinRecord, ProteinRecordStorePort


class SQLAlchemyProteinRecordStore(ProteinRecordStorePort, DatabaseHealthPort):
    """Record store reading the `formats` and `proteins` tables through one engine."""

    def __init__(self, engine: Engine):
        """Initialize record store.

        Args:
            engine: SQLAlchemy engine used for all reads.

        Returns:
            None: This initializer does not return a value.

        Raises:
            ValueError: Raised when engine is None.
        """

        if engine is None:
            raise ValueError("engine must not be None")
        self._engine = engine

    def records_source_label(self) -> str:
        """Return the target database URL with the password hidden."""

        return self._engine.url.render_as_string(hide_password=True)

    def records_load_fasta_headers(self) -> list[FastaHeaderRecord]:
        """Load FASTA rows that carry both an identifier and sequence text.

        Returns:
            list[FastaHeaderRecord]: FASTA rows.

        Raises:
            ConnectionError: Raised when the query fails.
        """

        try:
            with self._engine.connect() as connection:
                rows = connection.execute(
                    text("SELECT hsn_id, fasta FROM formats WHERE hsn_id IS NOT NULL AND fasta IS NOT NULL")
                ).mappings()
                return [FastaHeaderRecord(hsn_id=str(row["hsn_id"]), fasta=str(row["fasta"])) for row in rows]
        except SQLAlchemyError as error:
            raise ConnectionError("failed to load FASTA records from formats table") from error

    def records_load_proteins(self) -> list[ProteinRecord]:
        """Load protein metadata rows that carry an identifier.

        Returns:
            list[ProteinRecord]: Protein rows.

        Raises:
            ConnectionError: Raised when the query fails.
        """

        try:
            with self._engine.connect() as connection:
                rows = connection.execute(
                    text(
                        "SELECT hsn_id, uniprot_id, gene_name, protein_name "
                        "FROM proteins WHERE hsn_id IS NOT NULL"
                    )
                ).mappings()
                return [
                    ProteinRecord(
                        hsn_id=str(row["hsn_id"]),
                        uniprot_id=row["uniprot_id"],
                        gene_name=row["gene_name"],
                        protein_name=row["protein_name"],
                    )
                    for row in rows
                ]
        except SQLAlchemyError as error:
            raise ConnectionError("failed to load protein records from proteins table") from error

    def db_connection_label(self) -> str:
        """Return the target database URL for diagnostics."""

        return self.records_source_label()

    def db_check_health(self) -> HealthStatus:
        """Verify database connectivity using a deterministic lightweight query.

        Returns:
            HealthStatus: Health payload with status and diagnostic detail.

        Raises:
            ConnectionError: Raised when connectivity check fails.
        """

        try:
            with self._engine.connect() as connection:
                connection.execute(text("SELECT 1"))
            return HealthStatus(status="ok", detail="record store connectivity verified")
        except SQLAlchemyError as error:
            raise ConnectionError("record store connectivity check failed") from error


class InMemoryProteinRecordStore(ProteinRecordStorePort):
    """Record store serving fixed rows, used when no database is configured and in tests."""

    def __init__(
        self,
        fasta_headers: Iterable[FastaHeaderRecord] = (),
        proteins: Iterable[ProteinRecord] = (),
    ):
        self._fasta_headers = list(fasta_headers)
        self._proteins = list(proteins)

    def records_source_label(self) -> str:
        return "memory"

    def records_load_fasta_headers(self) -> list[FastaHeaderRecord]:
        return list(self._fasta_headers)

    def records_load_proteins(self) -> list[ProteinRecord]:
        return list(self._proteins)
