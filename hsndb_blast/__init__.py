"""HSNDB BLAST job lifecycle coordinator and compute service."""

__version__ = "1.0.0"
