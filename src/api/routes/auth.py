"""Viewer authentication endpoint."""

from fastapi import APIRouter, Depends

from src.api.dependencies import get_aps_client
from src.models import TokenResponse
from src.services.aps_client import ApsClient


router = APIRouter()


@router.get(
    "/api/auth/token",
    response_model=TokenResponse,
    summary="Viewer Token",
    description="Returns a short-lived, read-only APS access token for the viewer"
)
async def get_token(aps: ApsClient = Depends(get_aps_client)):
    """Relay a viewer access token."""
    return TokenResponse(**await aps.get_public_token())
