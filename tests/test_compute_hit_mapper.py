"""Tests for FASTA identifier extraction and hit-to-protein mapping."""

from __future__ import annotations

import pytest

from hsndb_blast.compute import (
    ProteinHitMapper,
    compute_extract_fasta_identifier,
    compute_parse_fallback_details,
)
from hsndb_blast.db import FastaHeaderRecord, InMemoryProteinRecordStore, ProteinRecord


class _FailingRecordStoreStub:
    """Record store stub whose reads fail with a connectivity error."""

    def records_source_label(self) -> str:
        return "postgresql://hsndb@db/hsndb"

    def records_load_fasta_headers(self) -> list[FastaHeaderRecord]:
        raise ConnectionError("failed to load FASTA records from formats table")

    def records_load_proteins(self) -> list[ProteinRecord]:
        raise AssertionError("proteins must not be loaded after a failed FASTA load")


def _build_record_store() -> InMemoryProteinRecordStore:
    return InMemoryProteinRecordStore(
        fasta_headers=[
            FastaHeaderRecord(hsn_id="HSN001", fasta=">sp|P04406|G3P_HUMAN GAPDH OS=Homo sapiens\nMGKVKVGVNG"),
            FastaHeaderRecord(hsn_id="HSN002", fasta=">HSN002 orphan entry\nMKTAYIAKQR"),
        ],
        proteins=[
            ProteinRecord(
                hsn_id="HSN001",
                uniprot_id="P04406",
                gene_name="GAPDH",
                protein_name="Glyceraldehyde-3-phosphate dehydrogenase",
            ),
        ],
    )


@pytest.mark.parametrize(
    ("header", "expected_identifier"),
    [
        (">sp|P04406|G3P_HUMAN GAPDH", "P04406"),
        ("tr|A0A024R161|A0A024R161_HUMAN", "A0A024R161"),
        (">HSN001 protein", "HSN001"),
        ("P04406", "P04406"),
        ("gi|12345|ref", "gi"),
        ("   ", ""),
    ],
)
def test_compute_extract_fasta_identifier(header: str, expected_identifier: str) -> None:
    """Extract accessions and HSNDB ids from common header shapes."""

    assert compute_extract_fasta_identifier(header) == expected_identifier


def test_compute_parse_fallback_details_reads_uniprot_style_header() -> None:
    """Derive gene, accession and protein name from a Swiss-Prot header.

    Returns:
        None: Assertions validate fallback parsing.

    Raises:
        AssertionError: Raised when parsed fields differ.
    """

    details = compute_parse_fallback_details(
        "sp|P04406|G3P_HUMAN",
        "sp|P04406|G3P_HUMAN Glyceraldehyde-3-phosphate dehydrogenase OS=Homo sapiens OX=9606",
    )

    assert details.uniprot_id == "P04406"
    assert details.gene_name == "G3P"
    assert details.protein_name == "Glyceraldehyde-3-phosphate dehydrogenase"
    assert details.id == "protein_P04406"
    assert details.hsn_id == "sp|P04406|G3P_HUMAN"
    assert details.description == "Parsed from FASTA header (fallback)"


def test_compute_parse_fallback_details_defaults_for_plain_definition() -> None:
    details = compute_parse_fallback_details("HSN001", "some protein")

    assert details.gene_name == "Unknown"
    assert details.protein_name == "Unknown protein"
    assert details.id == "protein_HSN001"


def test_compute_hit_mapper_resolves_through_loaded_tables() -> None:
    """Map FASTA ids to HSNDB ids and HSNDB ids to protein details.

    Returns:
        None: Assertions validate lookup resolution.

    Raises:
        AssertionError: Raised when mappings differ.
    """

    mapper = ProteinHitMapper(record_store=_build_record_store())

    assert mapper.compute_mapper_initialize() is True
    mapped = mapper.compute_mapper_resolve("sp|P04406|G3P_HUMAN", "GAPDH")
    missing_details = mapper.compute_mapper_resolve("HSN002", "orphan entry")
    unmapped = mapper.compute_mapper_resolve("sp|Q99999|XYZ_HUMAN", "unknown")

    assert mapped.id == "protein_HSN001"
    assert mapped.gene_name == "GAPDH"
    assert mapped.description == "S-nitrosylated protein: Glyceraldehyde-3-phosphate dehydrogenase"
    assert mapped.uniprot_id == "P04406"
    assert (missing_details.hsn_id, missing_details.gene_name) == ("HSN002", "Unknown")
    assert unmapped.id == "protein_Q99999"
    assert unmapped.description == "Protein details not found in database"
    assert mapper.compute_mapper_stats() == {"fastaToHsnMappings": 2, "hsnToProteinMappings": 1}


def test_compute_hit_mapper_falls_back_when_store_fails() -> None:
    """Keep serving header-parsed details when the record store is unreachable."""

    mapper = ProteinHitMapper(record_store=_FailingRecordStoreStub())

    assert mapper.compute_mapper_initialize() is False
    assert mapper.compute_mapper_is_initialized() is False
    details = mapper.compute_mapper_resolve("sp|P04406|G3P_HUMAN", "sp|P04406|G3P_HUMAN GAPDH OS=Homo sapiens")
    assert details.description == "Parsed from FASTA header (fallback)"


def test_compute_hit_mapper_without_store_uses_fallback_parsing() -> None:
    mapper = ProteinHitMapper()

    assert mapper.compute_mapper_initialize() is False
    assert mapper.compute_mapper_resolve("HSN001", "protein").hsn_id == "HSN001"
