"""Map BLAST hit identifiers to HSNDB protein metadata.

The mapper loads two lookup tables from the record store once: FASTA
identifier to HSNDB id, and HSNDB id to protein details. When the store
cannot be read, hit metadata is parsed from UniProt-style FASTA headers.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Final

import structlog

from hsndb_blast.db import ProteinRecordStorePort

_LOGGER = structlog.get_logger(__name__)

UNKNOWN_GENE_NAME: Final[str] = "Unknown"
UNKNOWN_PROTEIN_NAME: Final[str] = "Unknown protein"
DEFAULT_ORGANISM: Final[str] = "Homo sapiens"

# Checked in order; the first match wins.
_FASTA_IDENTIFIER_PATTERNS: Final[tuple[re.Pattern[str], ...]] = (
    re.compile(r"^([A-Z0-9]+)"),
    re.compile(r"sp\|([A-Z0-9]+)\|"),
    re.compile(r"tr\|([A-Z0-9]+)\|"),
    re.compile(r"(HSN\d+)"),
    re.compile(r"^([^\s|]+)"),
)


@dataclass(frozen=True)
class ProteinDetails:
    """Protein metadata attached to one BLAST hit.

    Attributes:
        id: Navigation identifier, `protein_<hsn id>`.
        hsn_id: HSNDB identifier, or the raw hit id when unmapped.
        gene_name: Gene symbol.
        protein_name: Protein name.
        description: Human-readable hit description.
        uniprot_id: Optional UniProt accession.
        organism: Source organism.
    """

    id: str
    hsn_id: str
    gene_name: str
    protein_name: str
    description: str
    uniprot_id: str | None = None
    organism: str = DEFAULT_ORGANISM


def compute_extract_fasta_identifier(fasta_header: str) -> str:
    """Extract the lookup identifier from a FASTA header or BLAST hit id.

    Args:
        fasta_header: Header line with or without the leading `>`.

    Returns:
        str: Identifier such as `P12345` or `HSN001`; empty for a blank header.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    cleaned_header = re.sub(r"^>", "", fasta_header).strip()
    for pattern in _FASTA_IDENTIFIER_PATTERNS:
        match = pattern.search(cleaned_header)
        if match:
            return match.group(1)
    parts = cleaned_header.split()
    return parts[0] if parts else ""


def compute_parse_fallback_details(hit_id: str, hit_def: str) -> ProteinDetails:
    """Derive protein details from a `sp|ACC|NAME_SPECIES desc OS=...` header.

    Args:
        hit_id: BLAST hit identifier.
        hit_def: BLAST hit definition line.

    Returns:
        ProteinDetails: Parsed details; unknown defaults for unrecognized headers.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    id_parts = hit_def.split(" ")[0].split("|")
    gene_name = UNKNOWN_GENE_NAME
    protein_name = UNKNOWN_PROTEIN_NAME
    uniprot_id = compute_extract_fasta_identifier(hit_id) or None

    if len(id_parts) >= 3:
        uniprot_id = id_parts[1]
        protein_code = id_parts[2]
        if "_" in protein_code:
            gene_name = protein_code.split("_")[0]

        description_start = hit_def.find(" ")
        if description_start > 0:
            description = hit_def[description_start + 1 :]
            organism_index = description.find(" OS=")
            protein_name = description[:organism_index] if organism_index > 0 else description

    return ProteinDetails(
        id=f"protein_{uniprot_id or hit_id}",
        hsn_id=hit_id,
        gene_name=gene_name,
        protein_name=protein_name,
        description="Parsed from FASTA header (fallback)",
        uniprot_id=uniprot_id,
    )


class ProteinHitMapper:
    """Resolve BLAST hits to protein details through cached record store lookups."""

    def __init__(self, record_store: ProteinRecordStorePort | None = None):
        """Initialize hit mapper.

        Args:
            record_store: Optional record store; without one only header parsing is used.

        Returns:
            None: This initializer does not return a value.

        Raises:
            RuntimeError: This initializer does not raise runtime errors.
        """

        self._record_store = record_store
        self._fasta_to_hsn: dict[str, str] = {}
        self._hsn_to_details: dict[str, ProteinDetails] = {}
        self._initialized = False

    def compute_mapper_initialize(self) -> bool:
        """Load lookup tables from the record store once.

        Returns:
            bool: True when the tables were loaded; False when the store failed
            and fallback header parsing is in effect.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        if self._initialized:
            return True
        if self._record_store is None:
            _LOGGER.info("protein_mapping_disabled", reason="no record store configured")
            return False

        try:
            fasta_headers = self._record_store.records_load_fasta_headers()
            proteins = self._record_store.records_load_proteins()
        except ConnectionError as error:
            _LOGGER.warning(
                "protein_mapping_unavailable",
                source=self._record_store.records_source_label(),
                error=str(error),
            )
            return False

        fasta_to_hsn: dict[str, str] = {}
        for record in fasta_headers:
            header_line = record.fasta.split("\n")[0]
            fasta_id = compute_extract_fasta_identifier(header_line)
            if fasta_id:
                fasta_to_hsn[fasta_id] = record.hsn_id

        hsn_to_details: dict[str, ProteinDetails] = {}
        for protein in proteins:
            protein_name = protein.protein_name or UNKNOWN_PROTEIN_NAME
            hsn_to_details[protein.hsn_id] = ProteinDetails(
                id=f"protein_{protein.hsn_id}",
                hsn_id=protein.hsn_id,
                gene_name=protein.gene_name or UNKNOWN_GENE_NAME,
                protein_name=protein_name,
                description=f"S-nitrosylated protein: {protein_name}",
                uniprot_id=protein.uniprot_id,
            )

        self._fasta_to_hsn = fasta_to_hsn
        self._hsn_to_details = hsn_to_details
        self._initialized = True
        _LOGGER.info(
            "protein_mapping_loaded",
            fasta_mappings=len(fasta_to_hsn),
            protein_details=len(hsn_to_details),
        )
        return True

    def compute_mapper_is_initialized(self) -> bool:
        return self._initialized

    def compute_mapper_resolve(self, hit_id: str, hit_def: str) -> ProteinDetails:
        """Return protein details for one BLAST hit.

        Args:
            hit_id: BLAST `Hit_id` value.
            hit_def: BLAST `Hit_def` value.

        Returns:
            ProteinDetails: Mapped details, defaults for unmapped identifiers, or
            header-parsed details when the lookup tables are not loaded.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        if not self._initialized:
            return compute_parse_fallback_details(hit_id, hit_def)

        fasta_id = compute_extract_fasta_identifier(hit_id)
        hsn_id = self._fasta_to_hsn.get(fasta_id)
        if hsn_id is None:
            _LOGGER.debug("protein_mapping_missing_hsn_id", fasta_id=fasta_id)
            return self._mapper_default_details(fasta_id)

        details = self._hsn_to_details.get(hsn_id)
        if details is None:
            _LOGGER.debug("protein_mapping_missing_details", hsn_id=hsn_id)
            return self._mapper_default_details(fasta_id, hsn_id)
        return details

    def compute_mapper_stats(self) -> dict[str, int]:
        return {
            "fastaToHsnMappings": len(self._fasta_to_hsn),
            "hsnToProteinMappings": len(self._hsn_to_details),
        }

    @staticmethod
    def _mapper_default_details(fasta_id: str, hsn_id: str | None = None) -> ProteinDetails:
        resolved_id = hsn_id or fasta_id
        return ProteinDetails(
            id=f"protein_{resolved_id}",
            hsn_id=resolved_id,
            gene_name=UNKNOWN_GENE_NAME,
            protein_name=UNKNOWN_PROTEIN_NAME,
            description="Protein details not found in database",
        )
