"""Health check schemas for the ingest service."""

from typing import Any, Literal

from pydantic import BaseModel, Field

DependencyState = Literal["healthy", "unhealthy"]


class ServiceStatus(BaseModel):
    """State of one dependency the ingest endpoint needs (database or cipher)."""

    status: DependencyState
    message: str
    details: dict[str, Any] = Field(default_factory=dict)


class HealthResponse(BaseModel):
    """Aggregate health. Degraded when any dependency is unhealthy."""

    status: Literal["ok", "degraded"]
    version: str
    services: dict[str, ServiceStatus]
    timestamp: str = Field(description="UTC ISO-8601 with Z suffix")
