"""Summary statistics over the hits of one result set."""

from __future__ import annotations

import math
import sys
from dataclasses import dataclass
from typing import Final

from hsndb_blast.domain import Hit, ResultSet

SIGNIFICANT_EVALUE_THRESHOLD: Final[float] = 1e-5
HIGH_IDENTITY_THRESHOLD: Final[float] = 90.0


@dataclass(frozen=True)
class ResultAnalysis:
    """Derived significance and identity summary of one result set.

    Attributes:
        total_hits: Number of hits.
        significant_hits: Hits with e-value below 1e-5.
        high_identity_hits: Hits with identity above 90 percent.
        average_identity: Mean identity percentage, 0 without hits.
        average_log10_evalue: Mean log10 e-value, 0 without hits.
        top_hit: First (most significant) hit.
        evalue_bins: Hit counts per significance bin.
    """

    total_hits: int
    significant_hits: int
    high_identity_hits: int
    average_identity: float
    average_log10_evalue: float
    top_hit: Hit | None
    evalue_bins: dict[str, int]


def job_analyze_results(result_set: ResultSet) -> ResultAnalysis:
    """Summarize hit significance and identity of one result set.

    Args:
        result_set: Fetched results.

    Returns:
        ResultAnalysis: Derived summary.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    hits = result_set.hits
    if not hits:
        return ResultAnalysis(
            total_hits=0,
            significant_hits=0,
            high_identity_hits=0,
            average_identity=0.0,
            average_log10_evalue=0.0,
            top_hit=None,
            evalue_bins={"highly_significant": 0, "significant": 0, "moderate": 0, "weak": 0},
        )

    evalues = [hit.evalue for hit in hits]
    return ResultAnalysis(
        total_hits=len(hits),
        significant_hits=sum(1 for evalue in evalues if evalue < SIGNIFICANT_EVALUE_THRESHOLD),
        high_identity_hits=sum(1 for hit in hits if hit.identity > HIGH_IDENTITY_THRESHOLD),
        average_identity=sum(hit.identity for hit in hits) / len(hits),
        average_log10_evalue=sum(math.log10(max(evalue, sys.float_info.min)) for evalue in evalues) / len(hits),
        top_hit=hits[0],
        evalue_bins={
            "highly_significant": sum(1 for evalue in evalues if evalue < 1e-50),
            "significant": sum(1 for evalue in evalues if 1e-50 <= evalue < 1e-10),
            "moderate": sum(1 for evalue in evalues if 1e-10 <= evalue < SIGNIFICANT_EVALUE_THRESHOLD),
            "weak": sum(1 for evalue in evalues if evalue >= SIGNIFICANT_EVALUE_THRESHOLD),
        },
    )
