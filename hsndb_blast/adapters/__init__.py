"""Adapter layer package for compute service integration boundaries."""

from .blast_http import BlastHttpAdapter
from .interfaces import BlastComputePort

__all__ = [
	"BlastComputePort",
	"BlastHttpAdapter",
]
