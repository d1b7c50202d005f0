"""Error Handlers — maps sync failures onto HTTP responses.

Invariants:
    - GateSyncError answers its own http_status with the to_response() envelope
    - Retryable errors (UpstreamError) carry a Retry-After header
    - Request body validation failures answer 400 in the same envelope, one entry per field
    - Anything else answers 500 with no internal detail

Design Decisions:
    - Log level follows ErrorSeverity: NOT_YET_APPROVED and INTEGRATION_DISABLED are
      expected outcomes on the registration path and log at WARNING
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from gate_sync.core.errors import ErrorSeverity, GateSyncError

logger = logging.getLogger(__name__)

RETRY_AFTER_SECONDS = 30

_QUIET_SEVERITIES = (ErrorSeverity.INFO, ErrorSeverity.WARNING)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(GateSyncError, handle_sync_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(Exception, handle_unexpected)


async def handle_sync_error(request: Request, exc: GateSyncError) -> JSONResponse:
    log = logger.warning if exc.severity in _QUIET_SEVERITIES else logger.error
    log(
        f"{exc.code} on {request.method} {request.url.path}: {exc.message}",
        extra={
            **exc.context.as_log_extra(),
            "error_code": exc.code,
            "path": request.url.path,
        },
    )
    headers = {"Retry-After": str(RETRY_AFTER_SECONDS)} if exc.retryable else None
    return JSONResponse(
        status_code=exc.http_status, content=exc.to_response(), headers=headers,
    )


async def handle_request_validation(
    request: Request, exc: RequestValidationError,
) -> JSONResponse:
    details = [
        {
            "field": ".".join(str(part) for part in err["loc"] if part != "body"),
            "message": err["msg"],
        }
        for err in exc.errors()
    ]
    logger.warning(
        f"Rejected {request.method} {request.url.path}: "
        f"{', '.join(d['field'] for d in details)}",
        extra={"error_code": "VALIDATION_ERROR", "path": request.url.path},
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": {
                "code": "VALIDATION_ERROR",
                "message": "Invalid request body",
                "category": "validation",
                "severity": ErrorSeverity.ERROR.value,
                "retryable": False,
                "details": details,
            },
        },
    )


async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Unhandled {type(exc).__name__} on {request.method} {request.url.path}",
        extra={"path": request.url.path},
        exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred",
                "category": "internal",
                "severity": ErrorSeverity.CRITICAL.value,
                "retryable": False,
            },
        },
    )
