"""Exception handlers for FastAPI application.

Provides centralized exception handling with standardized error responses.
"""

import logging
from typing import Any

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .http_exceptions import AppError, ErrorResponse, InternalServerError

logger = logging.getLogger(__name__)


async def app_exception_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle custom AppError and its subclasses.

    Server-side failures (5xx) are logged; client errors are not.
    """
    if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error("%s on %s: %s", exc.error_code, request.url.path, exc.message)

    error_response = exc.to_error_response(path=request.url.path)

    return JSONResponse(
        status_code=exc.status_code,
        content=error_response.model_dump(exclude_none=True),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle Pydantic request validation errors (422)."""
    error_response = ErrorResponse(
        error_code="ValidationError",
        message="Request validation failed",
        detail={"errors": jsonable_errors(exc)},
        path=request.url.path,
    )

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=error_response.model_dump(exclude_none=True),
    )


def jsonable_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    # ctx may hold the raw exception object, which is not JSON serializable
    return [
        {key: value for key, value in error.items() if key != "ctx"}
        for error in exc.errors()
    ]


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions (500)."""
    logger.error(f"Unexpected error: {exc}", exc_info=True)

    internal_exc = InternalServerError(
        message="An unexpected error occurred",
        detail={"error": str(exc)} if logger.isEnabledFor(logging.DEBUG) else None,
    )

    error_response = internal_exc.to_error_response(path=request.url.path)

    return JSONResponse(
        status_code=internal_exc.status_code,
        content=error_response.model_dump(exclude_none=True),
    )


def register_exception_handlers(app: Any) -> None:
    """Register all exception handlers with FastAPI app.

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(AppError, app_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
