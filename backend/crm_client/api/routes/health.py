"""Health & Readiness Probes — liveness of the gateway, readiness of the upstream API.

Invariants:
    - GET /health/ always returns 200 if process is up (liveness)
    - GET /health/ready returns 503 if the upstream /health probe fails (readiness)
"""

import logging
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from crm_client.api.dependencies import get_api_client
from crm_client.infrastructure.api_client import ApiClient

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    """Basic liveness probe. Returns 200 if the process is up."""
    return {"status": "healthy", "service": "crm-dashboard-gateway"}


@router.get("/ready")
async def readiness_check(client: ApiClient = Depends(get_api_client)):
    """Readiness probe: includes upstream API connectivity."""
    report = await client.health_check()
    if report["status"] != "healthy":
        logger.warning(f"Upstream not ready: {report.get('error')}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "upstream": report},
        )
    return {
        "status": "ready",
        "transport": client.mode.value,
        "upstream": report,
        "stats": client.get_stats(),
    }
