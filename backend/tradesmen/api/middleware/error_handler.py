"""
Error handler middleware and custom exceptions.

This is the single place where errors become HTTP responses. Every error
body has the shape ``{"error": ..., "detail": ..., "correlation_id": ...}``
where ``detail`` is omitted when there is nothing safe to show the client.
"""
import logging
from typing import Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from tradesmen.lib.logging import get_logger
from tradesmen.lib.request_context import get_request_correlation_id
from tradesmen.services.errors import (
    EntityNotFoundError,
    ModelError,
    ModelValidationError,
    UniqueViolationError,
)

logger = get_logger(__name__)


# Custom exception classes
class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail: Optional[str] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.detail = detail
        super().__init__(self.message)


class NotFoundException(AppException):
    """Resource not found exception."""

    def __init__(self, resource: str, resource_id: Optional[object] = None):
        detail = f"{resource} not found"
        if resource_id is not None:
            detail = f"{resource} with id {resource_id} not found"
        super().__init__(
            message="Resource not found",
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
        )


class UnauthorizedException(AppException):
    """Unauthorized access exception."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(
            message=message,
            status_code=status.HTTP_401_UNAUTHORIZED,
        )


class ForbiddenException(AppException):
    """Forbidden access exception."""

    def __init__(self, message: str = "Insufficient permissions"):
        super().__init__(
            message=message,
            status_code=status.HTTP_403_FORBIDDEN,
        )


class BadRequestException(AppException):
    """Bad request exception."""

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
        )


class ConflictException(AppException):
    """Resource conflict exception."""

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(
            message=message,
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
        )


class ValidationException(AppException):
    """Input validation failed."""

    def __init__(self, detail: str):
        super().__init__(
            message="Validation failed",
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
        )


def _error_response(
    request: Request,
    status_code: int,
    error: str,
    detail: Optional[object] = None,
) -> JSONResponse:
    content = {"error": error}
    if detail is not None:
        content["detail"] = detail
    content["correlation_id"] = get_request_correlation_id(request)
    return JSONResponse(status_code=status_code, content=content)


# Exception handlers
async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """
    Handler for custom application exceptions.
    """
    log_level = logging.WARNING if exc.status_code < 500 else logging.ERROR
    logger.log(
        log_level,
        f"Application error: {exc.message}",
        extra={
            "status_code": exc.status_code,
            "path": request.url.path,
            "method": request.method,
            "detail": exc.detail,
        },
    )
    return _error_response(request, exc.status_code, exc.message, exc.detail)


async def model_exception_handler(request: Request, exc: ModelError) -> JSONResponse:
    """
    Handler for errors raised by the data-access layer.

    Not-found, uniqueness and validation errors are mapped to client errors;
    any other model error is treated as internal and its details stay in the
    server log.
    """
    if isinstance(exc, EntityNotFoundError):
        status_code, error, detail = (
            status.HTTP_404_NOT_FOUND,
            "Resource not found",
            f"{exc.entity} with id {exc.entity_id} not found",
        )
    elif isinstance(exc, UniqueViolationError):
        status_code, error, detail = (
            status.HTTP_409_CONFLICT,
            "Unique constraint violation",
            f"{exc.constraint} constraint on {exc.table}",
        )
    elif isinstance(exc, ModelValidationError):
        status_code, error, detail = (
            status.HTTP_400_BAD_REQUEST,
            "Validation error",
            exc.message,
        )
    else:
        logger.error(
            f"Model error: {exc!r}",
            extra={"path": request.url.path, "method": request.method},
        )
        return _error_response(
            request, status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error"
        )

    logger.warning(
        f"Model error: {exc}",
        extra={
            "status_code": status_code,
            "path": request.url.path,
            "method": request.method,
        },
    )
    return _error_response(request, status_code, error, detail)


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """
    Handler for Pydantic validation errors.

    Request bodies and query parameters that fail schema validation are
    input-validation failures and are reported as 400.
    """
    errors = []
    for error in exc.errors():
        errors.append({
            "loc": list(error["loc"]),
            "msg": error["msg"],
            "type": error["type"],
        })

    logger.warning(
        "Validation error",
        extra={
            "path": request.url.path,
            "method": request.method,
            "errors": errors,
        },
    )

    return _error_response(
        request, status.HTTP_400_BAD_REQUEST, "Validation failed", errors
    )


async def http_exception_handler(
    request: Request,
    exc: StarletteHTTPException,
) -> JSONResponse:
    """
    Handler for Starlette HTTP exceptions (unknown routes, wrong methods).
    """
    logger.warning(
        f"HTTP exception: {exc.detail}",
        extra={
            "status_code": exc.status_code,
            "path": request.url.path,
            "method": request.method,
        },
    )
    return _error_response(request, exc.status_code, str(exc.detail))


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handler for unhandled exceptions.

    Logs full stack trace and returns generic error message.
    """
    logger.error(
        f"Unhandled exception: {exc}",
        extra={
            "path": request.url.path,
            "method": request.method,
        },
        exc_info=exc,
    )
    return _error_response(
        request, status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error"
    )
