"""Map pipeline errors onto typed JSON responses."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.schemas import ErrorEnvelope
from errors import (
    FetchError,
    FetchErrorKind,
    InsufficientDataError,
    NotFoundError,
    ScanTimeoutError,
    StoreError,
    ValidationError,
    VisiAIError,
)

logger = logging.getLogger(__name__)

STATUS_CODES = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    InsufficientDataError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    FetchError: status.HTTP_502_BAD_GATEWAY,
    ScanTimeoutError: status.HTTP_504_GATEWAY_TIMEOUT,
    StoreError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def error_response(
    *,
    message: str,
    status_code: int,
    error_type: str,
    retryable: bool = False,
) -> JSONResponse:
    """Single source of truth for error responses."""
    body = ErrorEnvelope(error=message, errorType=error_type, retryable=retryable)
    return JSONResponse(status_code=status_code, content=body.model_dump())


def status_for(exc: VisiAIError) -> int:
    if isinstance(exc, FetchError) and exc.kind == FetchErrorKind.TIMEOUT:
        return status.HTTP_504_GATEWAY_TIMEOUT
    for error_class, code in STATUS_CODES.items():
        if isinstance(exc, error_class):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def add_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(VisiAIError)
    async def visiai_error_handler(request: Request, exc: VisiAIError):
        message = "not found" if isinstance(exc, NotFoundError) else exc.message
        return error_response(
            message=message,
            status_code=status_for(exc),
            error_type=exc.error_type,
            retryable=exc.retryable,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        details = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        return error_response(
            message=f"Invalid request: {details}",
            status_code=status.HTTP_400_BAD_REQUEST,
            error_type=ValidationError.error_type,
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        message = "not found" if exc.status_code == 404 else str(exc.detail)
        return error_response(message=message, status_code=exc.status_code, error_type="http")

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled exception: {exc}")
        return error_response(
            message="internal server error",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_type="internal",
        )
