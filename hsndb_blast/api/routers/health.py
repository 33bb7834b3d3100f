"""Health endpoint router composition for service and record store checks."""

from datetime import datetime, timezone

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from hsndb_blast.config import AppSettings
from hsndb_blast.db import DatabaseHealthPort

SERVICE_VERSION = "1.0.0"


def api_create_health_router(
    settings: AppSettings,
    db_health_service: DatabaseHealthPort | None = None,
) -> APIRouter:
    """Create health-check router with service and optional record store status.

    Args:
        settings: Runtime settings used for the database label.
        db_health_service: Optional record store health service.

    Returns:
        APIRouter: Router exposing `/health` endpoint.

    Raises:
        ValueError: Raised when settings is None.
    """

    if settings is None:
        raise ValueError("settings must not be None")

    router = APIRouter(tags=["health"])

    @router.get("/health")
    def api_health_status() -> JSONResponse:
        """Return service health with the configured database label.

        Returns:
            JSONResponse: 200 when healthy, 503 when the record store is unreachable.

        Raises:
            RuntimeError: Raised if route handler cannot produce a response.
        """

        payload: dict[str, object] = {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "database": settings.blast_database_name,
            "version": SERVICE_VERSION,
        }
        if db_health_service is None:
            return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

        try:
            record_store_health = db_health_service.db_check_health()
            payload["recordStore"] = {
                "status": record_store_health.status,
                "detail": record_store_health.detail,
                "target": db_health_service.db_connection_label(),
            }
            return JSONResponse(content=payload, status_code=status.HTTP_200_OK)
        except ConnectionError as error:
            payload["status"] = "degraded"
            payload["recordStore"] = {
                "status": "down",
                "detail": str(error),
                "target": db_health_service.db_connection_label(),
            }
            return JSONResponse(content=payload, status_code=status.HTTP_503_SERVICE_UNAVAILABLE)

    return router
