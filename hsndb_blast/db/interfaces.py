"""Typed interfaces for the protein record store boundary.

All SQL access must remain in the db package and its submodules.
"""

from dataclasses import dataclass
from typing import Protocol

from hsndb_blast.domain import HealthStatus


@dataclass(frozen=True)
class FastaHeaderRecord:
    """One stored FASTA entry keyed by HSNDB identifier.

    Attributes:
        hsn_id: HSNDB protein identifier.
        fasta: Full FASTA text; only the header line is used for mapping.
    """

    hsn_id: str
    fasta: str


@dataclass(frozen=True)
class ProteinRecord:
    """Protein metadata row used to enrich BLAST hits.

    Attributes:
        hsn_id: HSNDB protein identifier.
        uniprot_id: Optional UniProt accession.
        gene_name: Optional gene symbol.
        protein_name: Optional recommended protein name.
    """

    hsn_id: str
    uniprot_id: str | None
    gene_name: str | None
    protein_name: str | None


class ProteinRecordStorePort(Protocol):
    """Port definition for reading protein records from the record store."""

    def records_source_label(self) -> str:
        """Return a stable label for the record store target.

        Returns:
            str: Store label for diagnostics.

        Raises:
            RuntimeError: Raised when store metadata is unavailable.
        """

    def records_load_fasta_headers(self) -> list[FastaHeaderRecord]:
        """Load every stored FASTA entry.

        Returns:
            list[FastaHeaderRecord]: FASTA rows with HSNDB identifiers.

        Raises:
            ConnectionError: Raised when the store cannot be read.
        """

    def records_load_proteins(self) -> list[ProteinRecord]:
        """Load every protein metadata row.

        Returns:
            list[ProteinRecord]: Protein rows.

        Raises:
            ConnectionError: Raised when the store cannot be read.
        """


class DatabaseHealthPort(Protocol):
    """Port definition for record store connectivity verification."""

    def db_connection_label(self) -> str:
        """Return a stable label for the active database connection target."""

    def db_check_health(self) -> HealthStatus:
        """Check database connectivity and return deterministic health payload.

        Returns:
            HealthStatus: Database health status payload.

        Raises:
            ConnectionError: Raised when database cannot be reached.
        """
