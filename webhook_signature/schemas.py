"""
Pydantic response schemas for the receiver service.
"""

from typing import Optional

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response model for health check endpoints."""
    status: str = Field(..., description="Health status")
    reason: Optional[str] = Field(None, description="Reason when not ready")


class WebhookResponse(BaseModel):
    """Response model for an accepted webhook."""
    status: str = Field(default="ok", description="Operation status")
    bytes: int = Field(..., ge=0, description="Size of the accepted body")


class ErrorResponse(BaseModel):
    """Response model for error responses."""
    detail: str = Field(..., description="Error description")
