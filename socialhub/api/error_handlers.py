"""Error Handlers — global exception handlers for the SocialHub REST surface.

Invariants:
    - SocialHubError → structured JSON envelope with its own http_status
    - RequestValidationError → 400 with field-level details (REST counterpart of
      the channel's silent drop of malformed payloads)
    - Exception (catch-all) → 500, never leaks internal details

Design Decisions:
    - Client mistakes (4xx) logged at warning, server failures (5xx) at error
    - Kept out of main.py so the app module only wires routers and lifespan
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from socialhub.core.errors import SocialHubError, ErrorSeverity

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    app.add_exception_handler(SocialHubError, _domain_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(Exception, _generic_error_handler)


async def _domain_error_handler(request: Request, exc: SocialHubError):
    level = logging.ERROR if exc.http_status >= 500 else logging.WARNING
    logger.log(
        level,
        f"{exc.code} on {request.url.path}: {exc.message}",
        extra={"error_code": exc.code, "path": request.url.path},
    )
    return JSONResponse(status_code=exc.http_status, content=exc.to_response())


async def _validation_error_handler(request: Request, exc: RequestValidationError):
    logger.warning(
        f"Validation error on {request.url.path}: {exc.errors()}",
        extra={"error_code": "VALIDATION_ERROR", "path": request.url.path},
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=build_validation_error_response(exc),
    )


async def _generic_error_handler(request: Request, exc: Exception):
    """Catch-all — never leaks internal details."""
    logger.error(
        f"Unhandled exception on {request.url.path}: {exc}",
        exc_info=True,
        extra={"path": request.url.path},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred",
                "category": "internal",
                "severity": ErrorSeverity.CRITICAL.value,
            },
        },
    )


def build_validation_error_response(exc: RequestValidationError) -> dict:
    """Field-level 400 envelope."""
    return {
        "error": {
            "code": "VALIDATION_ERROR",
            "message": "Invalid request data",
            "category": "validation",
            "severity": ErrorSeverity.ERROR.value,
            "details": [
                {
                    "field": ".".join(str(loc) for loc in e["loc"]),
                    "message": e["msg"],
                    "type": e["type"],
                }
                for e in exc.errors()
            ],
        },
    }
