"""
Los Inmaduros Backend — Health Check Route
===========================================

What:  Health check endpoint for monitoring and load balancer probes.
Why:   Load balancers and the container runtime need to know whether this
       instance can serve traffic.
How:   Probes the database and the storage backend and returns an aggregate.

Status levels:
    - healthy:   database and storage OK (HTTP 200)
    - degraded:  storage unavailable; reads still work (HTTP 200)
    - unhealthy: database unreachable (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text

from inmaduros import __version__
from inmaduros.config import settings
from inmaduros.database import engine
from inmaduros.schemas.common import HealthResponse
from inmaduros.services.storage_service import storage_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
)
async def health_check():
    """
    Runs `SELECT 1` against the database and a cheap storage probe.
    """
    db_status = "connected"
    overall = "healthy"

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    storage_status, _ = storage_service.health()
    if storage_status != "available" and overall == "healthy":
        overall = "degraded"

    body = HealthResponse(
        status=overall,
        version=__version__,
        environment=settings.environment,
        database=db_status,
        storage=storage_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    if overall == "unhealthy":
        return JSONResponse(status_code=503, content=body.model_dump())
    return body
