"""
Pydantic schemas for logger API endpoints.

This module defines request/response models for:
- Log level enumeration
- Log category enumeration
- Log history entries
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import List


class LogLevelResponse(BaseModel):
    """Response containing available log levels."""
    levels: List[str] = Field(
        ...,
        description="List of available log level names (DEBUG, INFO, WARN, ERROR)"
    )


class LogCategoryResponse(BaseModel):
    """Response containing available log categories."""
    categories: List[str] = Field(
        ...,
        description="List of available log category names"
    )


class LogMessage(BaseModel):
    """Single log history entry."""
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "timestamp": "2026-10-18T14:30:45.123456",
                "level": "INFO",
                "category": "REGISTRY",
                "message": "Registered instance (instance: hero)"
            }
        }
    )

    timestamp: str = Field(
        ...,
        description="ISO 8601 timestamp of log entry"
    )
    level: str = Field(
        ...,
        description="Log level (DEBUG, INFO, WARN, ERROR)"
    )
    category: str = Field(
        ...,
        description="Log category (e.g., REGISTRY, COLOR, DISCOVERY)"
    )
    message: str = Field(
        ...,
        description="Log message text"
    )

    @property
    def is_expected(self) -> bool:
        """DEBUG/INFO entries are expected; WARN/ERROR are not"""
        return self.level in ("DEBUG", "INFO")


class RecentLogsResponse(BaseModel):
    """Recent log entries from the history buffer."""
    logs: List[LogMessage]
    count: int
