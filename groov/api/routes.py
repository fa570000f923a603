"""Health endpoint."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from groov.api.dependencies import get_container
from groov.container import Container
from groov.database import health_check as db_health_check

router = APIRouter()


@router.get("/health")
async def health_check(container: Container = Depends(get_container)) -> dict:
    """Health check endpoint.

    Returns:
        Status, timestamp in ISO8601 format, and database health
    """
    health_status = {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }

    if container.pool is None:
        health_status["database"] = "unavailable"
    elif await db_health_check(container.pool):
        health_status["database"] = "healthy"
    else:
        health_status["database"] = "unhealthy"

    return health_status
