"""
Logger API routes for exposing log levels, categories and the log history.

Provides:
- GET /api/v1/logger/levels - List available log levels
- GET /api/v1/logger/categories - List available log categories
- GET /api/v1/logger/recent - Recent entries from the history buffer
- GET /api/v1/logger/export - History as plain text
- DELETE /api/v1/logger/recent - Clear the history buffer
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import PlainTextResponse

from animbind.api.dependencies import get_service_container
from animbind.api.schemas.logger import LogCategoryResponse, LogLevelResponse, RecentLogsResponse
from animbind.models.enums import LogCategory, LogLevel
from animbind.services.service_container import ServiceContainer
from animbind.utils.enum_helper import EnumHelper

router = APIRouter(
    prefix="/logger",
    tags=["Logger"],
)


@router.get("/levels", response_model=LogLevelResponse)
async def get_log_levels():
    """
    Get all available log levels.

    Returns:
        List of log level names (DEBUG, INFO, WARN, ERROR)
    """
    return LogLevelResponse(levels=EnumHelper.list_names(LogLevel))


@router.get("/categories", response_model=LogCategoryResponse)
async def get_log_categories():
    """
    Get all available log categories.
    """
    return LogCategoryResponse(categories=EnumHelper.list_names(LogCategory))


@router.get("/recent", response_model=RecentLogsResponse)
async def get_recent_logs(
    limit: int = Query(100, ge=1, le=1000),
    expected: Optional[bool] = Query(None, description="True: DEBUG/INFO only, False: WARN/ERROR only"),
    search: Optional[str] = Query(None, description="Case-insensitive text filter"),
    services: ServiceContainer = Depends(get_service_container)
):
    """
    Get recently logged messages from the history buffer (newest last).
    """
    history = services.log_history
    if search:
        logs = history.search(search)
    elif expected is not None:
        logs = history.get_by_type(expected)
    else:
        logs = history.get_recent(limit)

    logs = logs[-limit:]
    return RecentLogsResponse(logs=logs, count=len(logs))


@router.get("/export", response_class=PlainTextResponse)
async def export_logs(services: ServiceContainer = Depends(get_service_container)):
    return services.log_history.export_as_string()


@router.delete("/recent", status_code=204)
async def clear_logs(services: ServiceContainer = Depends(get_service_container)):
    services.log_history.clear()
