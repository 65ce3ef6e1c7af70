"""
VetDesk Backend — Health Check Route
======================================

What:  Liveness/readiness check for Docker and load balancers.
How:   Runs SELECT 1 against the database and reports the storage mode.

Status levels:
    healthy    database reachable, S3 configured
    degraded   database reachable, images served by the in-memory store
    unhealthy  database unreachable (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Response
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from vetdesk import __version__
from vetdesk.database import engine
from vetdesk.schemas.common import HealthResponse
from vetdesk.services.storage import storage_mode

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(response: Response) -> HealthResponse:
    db_status = "connected"
    overall = "healthy"

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    storage = storage_mode()
    if storage == "in_memory" and overall == "healthy":
        overall = "degraded"

    if overall == "unhealthy":
        response.status_code = 503

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        storage=storage,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
