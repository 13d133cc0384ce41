import logging

from fastapi import FastAPI, Request, HTTPException
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from shared.core.config import settings
from shared.core.exceptions import (
    AlreadyPaidError,
    ConflictError,
    ConstraintViolation,
    DataIncompleteError,
    ExternalStorageError,
    LeaseOverlapError,
    NotFoundError,
    RentalError,
    ValidationError,
)
from shared.core.schemas import JsonOutResult
from shared.utils.app_status_code import AppStatusCode

logger = logging.getLogger(__name__)

APP_STATUS_CODES = {
    ValidationError: AppStatusCode.INVALID_INPUT,
    NotFoundError: AppStatusCode.RECORD_NOT_FOUND,
    LeaseOverlapError: AppStatusCode.LEASE_OVERLAP,
    AlreadyPaidError: AppStatusCode.ALREADY_PAID,
    ConflictError: AppStatusCode.CONFLICT,
    ConstraintViolation: AppStatusCode.DUPLICATE_ADD_ERROR,
    DataIncompleteError: AppStatusCode.INCOMPLETE_DATA,
    ExternalStorageError: AppStatusCode.STORAGE_FAILURE,
}


def status_code_for(exc: RentalError) -> str:
    # most specific class wins
    for cls in type(exc).__mro__:
        if cls in APP_STATUS_CODES:
            return APP_STATUS_CODES[cls]
    return AppStatusCode.OPERATION_FAILED


def failure(message: str, status_code: str, http_status: int, data=None) -> JSONResponse:
    wrapped = JsonOutResult(
        data=data,
        status="Failure",
        status_code=status_code,
        message=message
    ).model_dump()
    return JSONResponse(content=wrapped, status_code=http_status)


def setup_exception_handlers(app: FastAPI):

    @app.exception_handler(RentalError)
    async def rental_exception_handler(request: Request, exc: RentalError):
        app_code = status_code_for(exc)
        return failure(exc.message, app_code, exc.status_code, exc.details or None)

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        if isinstance(exc.detail, dict):
            return failure(
                str(exc.detail.get("message", "")),
                str(exc.detail.get("status_code", AppStatusCode.OPERATION_FAILED)),
                exc.status_code,
            )
        return failure(str(exc.detail), AppStatusCode.OPERATION_FAILED, exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return failure(str(exc), AppStatusCode.INVALID_INPUT, 422)

    @app.exception_handler(PoolTimeoutError)
    async def pool_timeout_handler(request: Request, exc: PoolTimeoutError):
        logger.error("Database connection pool exhausted: %s", exc)
        return failure("Database temporarily unavailable",
                       AppStatusCode.DATABASE_UNAVAILABLE, 503)

    # Catch all unhandled exceptions
    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception on %s %s",
                         request.method, request.url.path)
        message = "Internal server error" if settings.is_production else str(exc)
        return failure(message, AppStatusCode.OPERATION_FAILED, 500)
