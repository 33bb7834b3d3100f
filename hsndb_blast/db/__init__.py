"""Database layer package for the protein record store boundary."""

from .interfaces import DatabaseHealthPort, FastaHeaderRecord, ProteinRecord, ProteinRecordStorePort
from .protein_records import InMemoryProteinRecordStore, SQLAlchemyProteinRecordStore
from .session import db_create_engine

__all__ = [
	"DatabaseHealthPort",
	"FastaHeaderRecord",
	"InMemoryProteinRecordStore",
	"ProteinRecord",
	"ProteinRecordStorePort",
	"SQLAlchemyProteinRecordStore",
	"db_create_engine",
]
