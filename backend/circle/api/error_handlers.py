"""Error Handlers — every failure leaves the API in the same JSON envelope.

Invariants:
    - CircleError → its own status and to_response() body
    - RequestValidationError → 400 with field-level details
    - Starlette HTTPException (unknown route, wrong method) → same envelope, same status
    - Anything else → 500 that never leaks internal details

Design Decisions:
    - Client errors log at INFO, server errors at ERROR with the request path
    - Extracted from main.py (ADR: ExMA import fan-out < 10)
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from circle.core.errors import CircleError, ErrorCategory, ErrorSeverity

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CircleError, handle_circle_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(Exception, handle_unexpected_error)


def _envelope(
    code: str, message: str, category: ErrorCategory, severity: ErrorSeverity,
    **extra,
) -> dict:
    return {
        "error": {
            "code": code,
            "message": message,
            "category": category.value,
            "severity": severity.value,
            **extra,
        },
    }


async def handle_circle_error(request: Request, exc: CircleError) -> JSONResponse:
    log = logger.error if exc.http_status >= 500 else logger.info
    log(
        f"{exc.code}: {exc.message}",
        extra={"error_code": exc.code, "path": request.url.path},
    )
    return JSONResponse(status_code=exc.http_status, content=exc.to_response())


async def handle_validation_error(
    request: Request, exc: RequestValidationError,
) -> JSONResponse:
    logger.info(
        f"Validation error: {exc.errors()}",
        extra={"error_code": "VALIDATION_ERROR", "path": request.url.path},
    )
    details = [
        {
            "field": ".".join(str(loc) for loc in e["loc"]),
            "message": e["msg"],
            "type": e["type"],
        }
        for e in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_envelope(
            "VALIDATION_ERROR", "Invalid request data",
            ErrorCategory.VALIDATION, ErrorSeverity.ERROR, details=details,
        ),
    )


async def handle_http_exception(
    request: Request, exc: StarletteHTTPException,
) -> JSONResponse:
    category = (
        ErrorCategory.RESOURCE_NOT_FOUND
        if exc.status_code == status.HTTP_404_NOT_FOUND
        else ErrorCategory.VALIDATION
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=_envelope(
            f"HTTP_{exc.status_code}", str(exc.detail), category, ErrorSeverity.WARNING,
        ),
        headers=getattr(exc, "headers", None),
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Unhandled exception: {exc}",
        exc_info=True,
        extra={"error_code": "INTERNAL_ERROR", "path": request.url.path},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_envelope(
            "INTERNAL_ERROR", "An unexpected error occurred",
            ErrorCategory.INTERNAL, ErrorSeverity.CRITICAL,
        ),
    )
