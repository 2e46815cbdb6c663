"""Pydantic models for API requests and responses."""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field


# =============================================================================
# Error Models
# =============================================================================


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str = Field(..., description="Error type identifier")
    message: str = Field(..., description="Human-readable error message")
    detail: Optional[str] = Field(None, description="Additional error details")
    path: Optional[str] = Field(None, description="Request path that caused the error")
    timestamp: datetime = Field(..., description="When the error occurred")


# =============================================================================
# Health Models
# =============================================================================


class HealthResponse(BaseModel):
    """Liveness response."""

    status: Literal["healthy"] = "healthy"
    version: str
    environment: str
    active_sessions: int = Field(0, ge=0)


# =============================================================================
# Session Models
# =============================================================================


class LocationRequest(BaseModel):
    """Browser-reported coordinates."""

    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)
