"""API router package for endpoint composition."""

from .blast import BlastSubmitRequest, api_create_blast_router
from .database import api_create_database_router
from .health import api_create_health_router

__all__ = [
	"BlastSubmitRequest",
	"api_create_blast_router",
	"api_create_database_router",
	"api_create_health_router",
]
