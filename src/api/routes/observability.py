"""Health and readiness endpoints."""

from fastapi import APIRouter

from src.config import config
from src.models import HealthResponse, ReadinessResponse


router = APIRouter()


@router.get(
    "/healthz",
    response_model=HealthResponse,
    summary="Health Check",
    description="Returns health status"
)
async def healthz():
    """Health check endpoint."""
    return HealthResponse(status="ok")


@router.get(
    "/readyz",
    response_model=ReadinessResponse,
    summary="Readiness Check",
    description="Returns readiness status with bucket and credential info"
)
async def readyz():
    """Readiness check endpoint."""
    credentials_ok = config.has_credentials()

    return ReadinessResponse(
        status="ready" if credentials_ok else "degraded",
        bucket=config.get_bucket(),
        credentials_configured=credentials_ok
    )
