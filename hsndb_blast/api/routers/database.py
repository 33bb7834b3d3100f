"""BLAST database information router."""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
import structlog

from hsndb_blast.compute import BlastDatabaseManager

_LOGGER = structlog.get_logger(__name__)


def api_create_database_router(database_manager: BlastDatabaseManager) -> APIRouter:
    """Create router exposing BLAST database metadata.

    Args:
        database_manager: Manager verifying the BLAST database files.

    Returns:
        APIRouter: Router exposing `/database/info`.

    Raises:
        ValueError: Raised when database_manager is None.
    """

    if database_manager is None:
        raise ValueError("database_manager must not be None")

    router = APIRouter(prefix="/database", tags=["database"])

    @router.get("/info")
    async def api_database_info() -> JSONResponse:
        try:
            database_info = await database_manager.compute_database_info()
        except OSError as error:
            _LOGGER.error("database_info_failed", error=str(error))
            return JSONResponse(
                content={"error": "Failed to get database info"},
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

        payload = {
            "valid": database_info.valid,
            "path": database_info.path,
            "totalSequences": database_info.total_sequences,
            "databaseVersion": database_info.database_version,
        }
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    return router
