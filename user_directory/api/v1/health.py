# 📄 File: user_directory/api/v1/health.py
# 🧭 Purpose (Layman Explanation):
# Tells load balancers and operators whether the directory and its storage are working.
# 🧪 Purpose (Technical Summary):
# Liveness and store-backed health endpoints. /health reports the record store's own
# health check and answers 503 when the store is unhealthy.
# 🔗 Dependencies:
# FastAPI, user_directory.shared.config.settings, directory service dependency
# 🔄 Connected Modules / Calls From:
# user_directory.api.v1.router, load balancers, monitoring systems

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from user_directory.modules.user_management.domain.services.user_service import (
    UserDirectoryService,
)
from user_directory.modules.user_management.presentation.dependencies import (
    get_user_directory_service,
)
from user_directory.shared.config.settings import get_settings
from user_directory.shared.utils.logging import SERVICE_NAME

logger = logging.getLogger(__name__)

health_router = APIRouter()


@health_router.get(
    "/health",
    summary="Health Check",
    description="Service and record store health for load balancers and monitoring",
)
async def health_check(
    service: UserDirectoryService = Depends(get_user_directory_service),
) -> JSONResponse:
    """
    Health check including the record store.

    Returns 200 when the store answers, 503 otherwise.
    """
    store_health = await service.health()
    healthy = store_health.get("status") == "healthy"

    if not healthy:
        logger.warning(f"Health check failed: {store_health}")

    return JSONResponse(
        status_code=200 if healthy else 503,
        content={
            "status": "healthy" if healthy else "unhealthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "service": SERVICE_NAME,
            "version": get_settings().APP_VERSION,
            "store": store_health,
        },
    )


@health_router.get("/health/live", summary="Liveness Probe")
async def liveness_probe() -> dict:
    """Process is up; does not touch the record store."""
    return {"status": "alive"}
