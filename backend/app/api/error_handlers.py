"""Error Handlers — how a failed user/items operation becomes an HTTP response.

Invariants:
    - InputValidationError and malformed path parameters → 400 with one entry per
      violated field ({field, message, type}), same shape either way
    - StoreError → status by StoreFailure: constraint 500, unavailable 503,
      deadline_exceeded 504, unknown 500; the body names the failed operation's code
    - CacheError / PublishError never get here: the service absorbs them
    - Anything else → 500 INTERNAL_ERROR carrying only the request id

Design Decisions:
    - 4xx logged at warning (caller's fault), 5xx at error
    - The request id in the 500 body is the only link from a client report to the log
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.core.errors import (
    ErrorCategory, ErrorSeverity, StoreError, UserItemsError,
)

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(UserItemsError, _user_items_error)
    app.add_exception_handler(RequestValidationError, _bad_path_params)
    app.add_exception_handler(Exception, _unexpected_error)


async def _user_items_error(request: Request, exc: UserItemsError) -> JSONResponse:
    extra = {"error_code": exc.code, "path": request.url.path}
    if isinstance(exc, StoreError):
        extra["transaction_tag"] = exc.context.transaction_tag
        logger.error(
            f"{exc.operation} failed ({exc.reason.value}): {exc.message}",
            extra=extra,
        )
    elif exc.http_status >= 500:
        logger.error(f"{type(exc).__name__}: {exc.message}", extra=extra)
    else:
        logger.warning(f"Rejected input: {exc.message}", extra=extra)
    return JSONResponse(status_code=exc.http_status, content=exc.to_response())


async def _bad_path_params(
    request: Request, exc: RequestValidationError,
) -> JSONResponse:
    details = [
        {
            "field": str(err["loc"][-1]),
            "message": err["msg"],
            "type": err["type"],
        }
        for err in exc.errors()
    ]
    logger.warning(
        f"Rejected path parameters: {[d['field'] for d in details]}",
        extra={"error_code": "VALIDATION_ERROR", "path": request.url.path},
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": {
                "code": "VALIDATION_ERROR",
                "message": "Invalid path parameters",
                "category": ErrorCategory.VALIDATION.value,
                "severity": ErrorSeverity.ERROR.value,
                "details": details,
            },
        },
    )


async def _unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Unhandled exception on {request.url.path}: {exc}",
        extra={
            "error_code": "INTERNAL_ERROR",
            "path": request.url.path,
            "request_id": getattr(request.state, "request_id", None),
        },
        exc_info=True,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred",
                "category": ErrorCategory.INTERNAL.value,
                "severity": ErrorSeverity.CRITICAL.value,
                "request_id": getattr(request.state, "request_id", None),
            },
        },
    )
