"""Pydantic models for request/response validation."""

from typing import Any, Dict, List, Optional, Union
from pydantic import BaseModel, Field


class TokenResponse(BaseModel):
    """Response for GET /api/auth/token endpoint."""

    access_token: str = Field(..., description="Access token for the viewer")
    token_type: str = Field(..., description="Type of token", examples=["Bearer"])
    expires_in: int = Field(..., description="Seconds until the token expires")


class ModelEntry(BaseModel):
    """A model stored in the bucket."""

    name: str = Field(..., description="Object key of the model file")
    urn: str = Field(..., description="URL-safe base64 model reference")


class ModelStatus(BaseModel):
    """Response for GET /api/models/{urn}/status endpoint.

    Only ``status`` is present when the model has not been translated yet.
    """

    status: str = Field(..., description="Manifest status, or 'n/a' when no manifest exists")
    progress: Optional[Union[str, int, float]] = Field(
        default=None, description="Translation progress, a percentage or a descriptive string"
    )
    messages: Optional[List[Dict[str, Any]]] = Field(
        default=None, description="Messages of every derivative, flattened in tree order"
    )


class HealthResponse(BaseModel):
    """Response for /healthz endpoint."""

    status: str


class ReadinessResponse(BaseModel):
    """Response for /readyz endpoint."""

    status: str
    bucket: str
    credentials_configured: bool
