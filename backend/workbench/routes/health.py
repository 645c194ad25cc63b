"""
Workbench Backend: Health Check Route
======================================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Runs SELECT 1, then checks that every resource collection is provisioned.

Status levels:
    - healthy:   database reachable, all collections provisioned   (HTTP 200)
    - degraded:  database reachable, some collection missing       (HTTP 200)
                 requests to that resource will fail with 500
    - unhealthy: database unreachable                               (HTTP 503)
"""

import logging
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Response
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from workbench import __version__
from workbench.database import get_db_session
from workbench.resources import collection_names
from workbench.schemas.document import HealthResponse
from workbench.services.document_store import DocumentStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description=(
        "Returns the health status of the backend and whether each resource "
        "collection has been provisioned."
    ),
)
async def health_check(
    response: Response,
    db: AsyncSession = Depends(get_db_session),
) -> HealthResponse:
    database = "connected"
    collections = {name: False for name in collection_names()}
    overall = "healthy"

    try:
        await db.execute(text("SELECT 1"))
        provisioned = set(await DocumentStore(db).collections())
        collections = {name: name in provisioned for name in collections}
        if not all(collections.values()):
            overall = "degraded"
    except SQLAlchemyError as e:
        database = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    if overall == "unhealthy":
        response.status_code = 503

    return HealthResponse(
        status=overall,
        version=__version__,
        database=database,
        collections=collections,
        uptime_seconds=round(time.time() - _start_time, 2),
        checked_at=datetime.now(timezone.utc),
    )
