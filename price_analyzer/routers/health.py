"""Health check endpoints for system monitoring."""

import logging
import time
from typing import Dict, List, Literal

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from price_analyzer.logic import price_analysis
from price_analyzer.routers.dependencies import get_services
from price_analyzer.services.container import ServiceContainer

# Create router
router = APIRouter(prefix="/health", tags=["System"])

# Configure logger
logger = logging.getLogger(__name__)


class ServiceCheck(BaseModel):
    """Model for individual service health check."""

    name: str
    status: Literal["healthy", "unhealthy"]
    duration_ms: float | None = None
    error: str | None = None


class HealthCheckResponse(BaseModel):
    """Response model for health check endpoint."""

    status: Literal["healthy", "unhealthy"]
    timestamp: float
    duration_ms: float
    checks: List[ServiceCheck]


class ConnectionsResponse(BaseModel):
    timestamp: float
    services: Dict[str, bool]


async def database_reachable(services: ServiceContainer) -> bool:
    try:
        return await services.document_repository.ping()
    except Exception as e:
        logger.error(f"Database connection check failed: {e}")
        return False


@router.get("/", summary="System health check", response_model=HealthCheckResponse)
async def health_check(services: ServiceContainer = Depends(get_services)) -> HealthCheckResponse:
    """Basic health check endpoint.

    Raises:
        HTTPException: If the database is unreachable
    """
    start_time = time.time()

    db_start = time.time()
    db_healthy = await database_reachable(services)
    db_duration = time.time() - db_start
    if not db_healthy:
        logger.error("Database health check failed")

    checks = [
        ServiceCheck(
            name="database",
            status="healthy" if db_healthy else "unhealthy",
            duration_ms=round(db_duration * 1000, 2),
        )
    ]

    response = HealthCheckResponse(
        status="healthy" if db_healthy else "unhealthy",
        timestamp=time.time(),
        duration_ms=round((time.time() - start_time) * 1000, 2),
        checks=checks,
    )

    # Return 503 if unhealthy
    if not db_healthy:
        raise HTTPException(status_code=503, detail=response.model_dump())

    return response


@router.get("/connections", summary="External service self-test", response_model=ConnectionsResponse)
async def connections(services: ServiceContainer = Depends(get_services)) -> ConnectionsResponse:
    """Probe the generative service, document store, nearest-neighbor search and embeddings.

    A failing probe is returned as an error naming that probe.
    """
    results = await price_analysis.check_connections(services)
    return ConnectionsResponse(timestamp=time.time(), services=results)
