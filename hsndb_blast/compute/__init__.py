"""Compute service layer running BLAST+ jobs behind the HTTP contract."""

from .blast_database import BlastDatabaseInfo, BlastDatabaseManager
from .blast_runner import BlastRunner, compute_execute_process
from .blast_xml import compute_parse_blast_xml
from .hit_mapper import (
	ProteinDetails,
	ProteinHitMapper,
	compute_extract_fasta_identifier,
	compute_parse_fallback_details,
)
from .job_store import BlastJobStore, StoredBlastJob

__all__ = [
	"BlastDatabaseInfo",
	"BlastDatabaseManager",
	"BlastJobStore",
	"BlastRunner",
	"ProteinDetails",
	"ProteinHitMapper",
	"StoredBlastJob",
	"compute_execute_process",
	"compute_extract_fasta_identifier",
	"compute_parse_blast_xml",
	"compute_parse_fallback_details",
]
