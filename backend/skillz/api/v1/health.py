"""
Health check endpoints for monitoring and readiness probes.

This module provides endpoints for:
- Liveness probe: /health (basic "is the server running" check)
- Readiness probe: /health/ready (checks the database)
"""

from datetime import datetime, timezone
from typing import Dict

from fastapi import APIRouter, Response, status

from skillz.core.config import VERSION, settings
from skillz.core.probes import check_database, timed_probe
from skillz.schemas.health import CheckResult, HealthResponse, ReadinessResponse


router = APIRouter()


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Liveness probe",
    description="Basic health check to verify the service is running",
)
async def health_check() -> HealthResponse:
    """
    Basic liveness probe.

    This endpoint should always return 200 if the application is running.

    Example response:
        {
            "status": "ok",
            "service": "Skillz",
            "version": "0.1.0",
            "timestamp": "2016-06-01T10:30:00.123456+00:00"
        }
    """
    return HealthResponse(
        status="ok",
        service=settings.project_name,
        version=VERSION,
        timestamp=datetime.now(timezone.utc),
    )


@router.get(
    "/health/ready",
    response_model=ReadinessResponse,
    summary="Readiness probe",
    description="Readiness check including the database",
)
async def readiness_check(response: Response) -> ReadinessResponse:
    """
    Readiness probe with dependency checks.

    Returns 200 if all checks pass, 503 if any check fails.
    Individual check results are included in the response.

    Example response (unhealthy):
        {
            "status": "not_ready",
            "service": "Skillz",
            "checks": {
                "db": {"healthy": false, "latency_ms": 2000.4, "error": "..."}
            },
            "timestamp": "2016-06-01T10:30:00.123456+00:00"
        }
    """
    db_healthy, db_latency = await timed_probe(check_database)

    checks: Dict[str, CheckResult] = {
        "db": CheckResult(
            healthy=db_healthy,
            latency_ms=db_latency,
            error=None if db_healthy else "Database connection failed or timed out",
        ),
    }

    all_healthy = all(check.healthy for check in checks.values())
    if not all_healthy:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return ReadinessResponse(
        status="ready" if all_healthy else "not_ready",
        service=settings.project_name,
        checks=checks,
        timestamp=datetime.now(timezone.utc),
    )
