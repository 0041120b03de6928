"""Dependency injection functions for route handlers."""

from fastapi import Depends, Request

from src.config import config
from src.services.aps_client import ApsClient
from src.services.model_service import ModelService


def get_aps_client(request: Request) -> ApsClient:
    """Get the APS client created at startup."""
    return request.app.state.aps_client


def get_model_service(aps: ApsClient = Depends(get_aps_client)) -> ModelService:
    """Get a model service bound to the APS client."""
    return ModelService(aps, config.get_max_upload_bytes())
