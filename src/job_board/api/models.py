"""API models for request/response schemas not owned by the domain layer."""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import Field

from job_board.core.models import CamelModel


class ErrorResponse(CamelModel):
    """Error response model."""
    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Error message")
    details: Optional[Dict[str, Any]] = Field(None, description="Additional error details")
    timestamp: datetime = Field(..., description="Error timestamp")


class DeleteResponse(CamelModel):
    """Result of a delete."""
    success: bool = Field(..., description="Whether the resource was deleted")


class UploadResponse(CamelModel):
    """Stored resume location."""
    url: str = Field(..., description="Durable URL of the uploaded file")
    public_id: str = Field(..., description="Storage identifier")


class HealthCheck(CamelModel):
    """Health check response."""
    status: str = Field(..., description="Service status")
    timestamp: datetime = Field(..., description="Check timestamp")
    version: str = Field(..., description="Service version")
    components: Dict[str, str] = Field(..., description="Component status")
