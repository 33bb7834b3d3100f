"""Parser for BLAST+ XML output (`-outfmt 5`)."""

from __future__ import annotations

import xml.etree.ElementTree as element_tree
from typing import Callable, Final

from hsndb_blast.domain import Hit, ResultSet, ResultStatistics

from .hit_mapper import ProteinDetails

DEFAULT_KAPPA: Final[float] = 0.041
DEFAULT_LAMBDA: Final[float] = 0.267
DEFAULT_ENTROPY: Final[float] = 0.14
MISSING_EVALUE: Final[float] = 999.0

ProteinResolver = Callable[[str, str], ProteinDetails]


def compute_parse_blast_xml(
    xml_text: str,
    job_id: str,
    query_sequence: str,
    resolve_protein: ProteinResolver,
    database_name: str,
    database_version: str,
    total_sequences: int,
    execution_time: float,
) -> ResultSet:
    """Parse the first iteration of a BLAST XML report into a result set.

    Only the best HSP of each hit is kept. Hits are sorted by ascending
    e-value. A report without iterations yields an empty result set.

    Args:
        xml_text: Raw XML report.
        job_id: Job identifier stamped on the result set.
        query_sequence: Cleaned query sequence.
        resolve_protein: Callable mapping `(Hit_id, Hit_def)` to protein details.
        database_name: Searched database label.
        database_version: Searched database version label.
        total_sequences: Number of sequences in the searched database.
        execution_time: Measured execution time in seconds.

    Returns:
        ResultSet: Parsed results.

    Raises:
        ValueError: Raised when the report is not well-formed BLAST XML.
    """

    try:
        root = element_tree.fromstring(xml_text)
    except element_tree.ParseError as error:
        raise ValueError("Failed to parse BLAST results") from error
    if root.tag != "BlastOutput":
        raise ValueError("Invalid BLAST XML output")

    iteration = root.find("BlastOutput_iterations/Iteration")
    hits: list[Hit] = []
    kappa, lambda_, entropy = DEFAULT_KAPPA, DEFAULT_LAMBDA, DEFAULT_ENTROPY

    if iteration is not None:
        for hit_element in iteration.findall("Iteration_hits/Hit"):
            parsed_hit = _blast_xml_parse_hit(hit_element, resolve_protein)
            if parsed_hit is not None:
                hits.append(parsed_hit)
        hits.sort(key=lambda hit: hit.evalue)

        statistics_element = iteration.find("Iteration_stat/Statistics")
        if statistics_element is not None:
            kappa = _blast_xml_float(statistics_element, "Statistics_kappa", DEFAULT_KAPPA)
            lambda_ = _blast_xml_float(statistics_element, "Statistics_lambda", DEFAULT_LAMBDA)
            entropy = _blast_xml_float(statistics_element, "Statistics_entropy", DEFAULT_ENTROPY)

    return ResultSet(
        job_id=job_id,
        query_length=len(query_sequence),
        database_size=total_sequences,
        total_hits=len(hits),
        statistics=ResultStatistics(
            kappa=kappa,
            lambda_=lambda_,
            entropy=entropy,
            database=database_name,
            database_version=database_version,
            total_sequences=total_sequences,
        ),
        execution_time=execution_time,
        hits=tuple(hits),
    )


def _blast_xml_parse_hit(hit_element: element_tree.Element, resolve_protein: ProteinResolver) -> Hit | None:
    hit_id = _blast_xml_text(hit_element, "Hit_id")
    hit_def = _blast_xml_text(hit_element, "Hit_def")
    if not hit_id or not hit_def:
        return None

    best_hsp = hit_element.find("Hit_hsps/Hsp")
    if best_hsp is None:
        return None

    details = resolve_protein(hit_id, hit_def)
    align_length = _blast_xml_int(best_hsp, "Hsp_align-len", 1) or 1
    identity_count = _blast_xml_int(best_hsp, "Hsp_identity", 0)
    positive_count = _blast_xml_int(best_hsp, "Hsp_positive", 0)

    return Hit(
        id=details.id,
        hsn_id=details.hsn_id,
        gene_name=details.gene_name,
        protein_name=details.protein_name,
        description=details.description,
        uniprot_id=details.uniprot_id,
        evalue=_blast_xml_float(best_hsp, "Hsp_evalue", MISSING_EVALUE),
        score=_blast_xml_float(best_hsp, "Hsp_score", 0.0),
        identity=round(identity_count / align_length * 100, 1),
        positives=round(positive_count / align_length * 100, 1),
        gaps=_blast_xml_int(best_hsp, "Hsp_gaps", 0),
        query_start=_blast_xml_int(best_hsp, "Hsp_query-from", 1),
        query_end=_blast_xml_int(best_hsp, "Hsp_query-to", 1),
        subject_start=_blast_xml_int(best_hsp, "Hsp_hit-from", 1),
        subject_end=_blast_xml_int(best_hsp, "Hsp_hit-to", 1),
        query_seq=_blast_xml_text(best_hsp, "Hsp_qseq"),
        subject_seq=_blast_xml_text(best_hsp, "Hsp_hseq"),
        alignment=_blast_xml_text(best_hsp, "Hsp_midline", strip=False),
        length=align_length,
    )


def _blast_xml_text(element: element_tree.Element, path: str, strip: bool = True) -> str:
    child = element.find(path)
    if child is None or child.text is None:
        return ""
    return child.text.strip() if strip else child.text


def _blast_xml_int(element: element_tree.Element, path: str, default: int) -> int:
    text = _blast_xml_text(element, path)
    try:
        return int(text)
    except ValueError:
        return default


def _blast_xml_float(element: element_tree.Element, path: str, default: float) -> float:
    text = _blast_xml_text(element, path)
    try:
        return float(text)
    except ValueError:
        return default
