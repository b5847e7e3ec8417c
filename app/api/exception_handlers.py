import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from app.services.errors import (
    ConcurrentCreationConflict,
    DataUnavailable,
    InsufficientStock,
    InvalidArgument,
    ReconciliationError,
)

logger = logging.getLogger(__name__)

ERROR_STATUS_CODES: dict[type[ReconciliationError], int] = {
    DataUnavailable: status.HTTP_404_NOT_FOUND,
    InvalidArgument: status.HTTP_400_BAD_REQUEST,
    ConcurrentCreationConflict: status.HTTP_409_CONFLICT,
    InsufficientStock: status.HTTP_400_BAD_REQUEST,
}


def status_code_for(exc: ReconciliationError) -> int:
    for error_type in type(exc).__mro__:
        if error_type in ERROR_STATUS_CODES:
            return ERROR_STATUS_CODES[error_type]
    return status.HTTP_400_BAD_REQUEST


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ReconciliationError)
    async def reconciliation_error_handler(request: Request, exc: ReconciliationError) -> JSONResponse:
        body = {"detail": exc.message, "code": exc.code}
        if exc.details is not None:
            body["details"] = exc.details
        return JSONResponse(status_code=status_code_for(exc), content=body)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error", "code": "INTERNAL_ERROR"},
        )
