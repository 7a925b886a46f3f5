"""
Revisio Backend — Health Check Route
=====================================

What:  Health check endpoint for monitoring and container probes.
How:   Checks Gemini reachability (model listing, no token cost) and
       reports uptime.

    Status levels:
    - healthy:   Gemini reachable
    - degraded:  Gemini unreachable (the service still answers, but every
                 generation will end in an upstream-failure placeholder)
"""

import logging
import time

from fastapi import APIRouter

from revisio import __version__
from revisio.schemas.revision import HealthResponse
from revisio.services.gemini_service import gemini_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check() -> HealthResponse:
    gemini_status = "available"
    overall = "healthy"

    try:
        if not await gemini_service.health_check():
            gemini_status = "unavailable"
            overall = "degraded"
    except Exception as e:
        gemini_status = "unavailable"
        overall = "degraded"
        logger.warning("Health check: Gemini unreachable: %s", str(e))

    return HealthResponse(
        status=overall,
        version=__version__,
        gemini=gemini_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
