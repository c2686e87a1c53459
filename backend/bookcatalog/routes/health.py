"""
Book Catalog — Health Check Route
===================================

What:  Health check endpoint for monitoring and container probes.
Why:   Orchestrators need to tell "process up" from "store reachable".
How:   Sends a `ping` to MongoDB through the shared client.
Who:   Called by Docker health checks, load balancers and monitoring.

Status levels:
    - healthy:   MongoDB answered the ping
    - unhealthy: MongoDB unreachable, or the client was never created
"""

import logging
import time

from fastapi import APIRouter, Depends
from pymongo import AsyncMongoClient

from bookcatalog import __version__
from bookcatalog.database import ping
from bookcatalog.dependencies import get_mongo_client
from bookcatalog.schemas.responses import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description="Returns the health status of the service and its document store.",
)
async def health_check(
    client: AsyncMongoClient | None = Depends(get_mongo_client),
) -> HealthResponse:
    connected = client is not None and await ping(client)
    if not connected:
        logger.warning("Health check: document store unreachable")

    return HealthResponse(
        status="healthy" if connected else "unhealthy",
        version=__version__,
        database="connected" if connected else "disconnected",
        uptime_seconds=round(time.time() - _start_time, 2),
    )
