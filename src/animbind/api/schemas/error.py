"""
Error schemas - Pydantic models for error responses

Every error the HTTP surface returns has the same envelope, so clients can
branch on error.code without parsing messages.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ErrorDetail(BaseModel):
    """Detailed error information"""
    code: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error message")
    details: Optional[Dict[str, Any]] = Field(
        None,
        description="Additional context (instance id, path, kind, ...)"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the error occurred"
    )


class ErrorResponse(BaseModel):
    """API error response - standardized format"""
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "error": {
                    "code": "PROPERTY_NOT_FOUND",
                    "message": "Property 'settings/colour' not found in 'hero'",
                    "details": {"instance_id": "hero", "path": "settings/colour"},
                    "timestamp": "2026-10-18T10:30:00Z"
                },
                "request_id": "3f0c..."
            }
        }
    )

    error: ErrorDetail = Field(description="Error information")
    request_id: Optional[str] = Field(None, description="Request ID for logging/debugging")


class ValidationErrorResponse(BaseModel):
    """Validation error - when request body is invalid"""
    error: ErrorDetail = Field(description="Error information")
    validation_errors: list[Dict[str, Any]] = Field(
        description="Per-field validation errors"
    )
    request_id: Optional[str] = Field(None, description="Request ID for logging/debugging")
