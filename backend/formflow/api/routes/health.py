"""Health Routes — liveness plus a readiness check covering the database and form registry.

Invariants:
    - GET /health/ returns 200 while the process runs, with the served form names
    - GET /health/ready returns 503 when the database is unreachable or no form is registered
    - Readiness reports how many flows are held in memory (lost on restart)
"""

import logging
from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from formflow.api.routes.flows import active_flow_count
from formflow.domain.product_form import FORMS
from formflow.infrastructure import database

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    return {
        "status": "healthy",
        "service": "formflow-api",
        "forms": sorted(FORMS),
    }


@router.get("/ready")
async def readiness_check():
    manager = database.db_manager
    db_ok = await manager.health_check() if manager else False
    if not db_ok or not FORMS:
        reason = "database_unavailable" if not db_ok else "no_forms_registered"
        logger.warning("Readiness check failed", extra={"error_code": reason})
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "reason": reason},
        )
    return {
        "status": "ready",
        "checks": {"database": "healthy", "forms": len(FORMS)},
        "active_flows": active_flow_count(),
    }
