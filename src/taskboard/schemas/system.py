"""Common system-level response models."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from .common import CamelModel


class RootResponse(CamelModel):
    """Metadata payload returned by the root endpoint."""

    name: str = Field(description="Human-friendly service name")
    environment: str = Field(description="Deployment environment identifier")
    version: str = Field(description="Semantic version of the service")
    api_prefix: str = Field(description="Base path for API routes")


class HealthCheckResponse(CamelModel):
    """Payload returned by the health check endpoint."""

    status: str = Field(default="ok", description="Service health indicator")
    timestamp: datetime


class ErrorResponse(CamelModel):
    """Standardised error envelope returned by exception handlers."""

    status_code: int = Field(description="HTTP status of the failure")
    timestamp: datetime
    path: str
    method: str
    message: str | list[str] = Field(description="Human-readable error message(s)")
    error: str = Field(description="Machine-readable error identifier")


__all__ = ["ErrorResponse", "HealthCheckResponse", "RootResponse"]
