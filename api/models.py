"""
Pydantic models for API contracts.

Documentation payloads (Api, Service, ApiListEntry) are the domain models from
models.py; this module holds the endpoint-specific envelopes.
"""

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str = Field(..., description="Service status")


class ServiceInfo(BaseModel):
    """Service information model."""

    version: str = Field(..., description="API version")
    name: str = Field(default="apidocs-api", description="Service name")
    app_config_path: str = Field(..., description="Application file the documentation is built from")
