"""
Error handling for the HTTP surface

Maps binding-layer errors (AnimBindError subclasses) and request validation
failures onto the ErrorResponse envelope.
"""

import json
import uuid

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from animbind.api.schemas.error import ErrorDetail, ErrorResponse, ValidationErrorResponse
from animbind.models.errors import AnimBindError
from animbind.utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.API)


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with FastAPI app"""

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle Pydantic validation errors (bad JSON structure)"""
        request_id = str(uuid.uuid4())
        errors = exc.errors()

        log.warn("Request validation failed", request_id=request_id, errors=len(errors))

        validation_errors = []
        for error in errors:
            field = ".".join(str(x) for x in error["loc"][1:])  # Skip "body"
            validation_errors.append({
                "field": field,
                "message": error["msg"],
                "type": error["type"]
            })

        response = ValidationErrorResponse(
            error=ErrorDetail(
                code="VALIDATION_ERROR",
                message="Request validation failed",
                details={"error_count": len(errors)},
            ),
            validation_errors=validation_errors,
            request_id=request_id
        )

        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=json.loads(response.model_dump_json())
        )

    @app.exception_handler(AnimBindError)
    async def binding_exception_handler(request: Request, exc: AnimBindError):
        """Handle binding-layer errors raised by route handlers"""
        request_id = str(uuid.uuid4())

        log.warn(f"{exc.code}: {exc.message}", request_id=request_id)

        response = ErrorResponse(
            error=ErrorDetail(code=exc.code, message=exc.message, details=exc.details),
            request_id=request_id
        )

        return JSONResponse(
            status_code=exc.status_code,
            content=json.loads(response.model_dump_json())
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected errors"""
        request_id = str(uuid.uuid4())

        log.error(
            "Unexpected error",
            request_id=request_id,
            exception_type=type(exc).__name__,
            error=str(exc)
        )

        response = ErrorResponse(
            error=ErrorDetail(
                code="INTERNAL_SERVER_ERROR",
                message="An unexpected error occurred. Please try again.",
                details={"request_id": request_id},
            ),
            request_id=request_id
        )

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=json.loads(response.model_dump_json())
        )
