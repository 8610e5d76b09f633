"""
Error Handlers

Global exception handlers. Every failure path renders the same envelope:
``{"code": str, "message": str, "details": optional}``.

- ApplicationServiceError -> its own status, code and message
- HTTPException -> envelope keyed by status (404 NOT_FOUND, ...)
- RequestValidationError -> 400 VALIDATION_ERROR with field details
- Anything else -> 500 SERVER_ERROR, never leaking internal detail
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from astro_api.core.schemas import ErrorResponse
from astro_api.modules.applications.service import ApplicationServiceError

logger = logging.getLogger(__name__)

HTTP_ERROR_CODES = {
    status.HTTP_400_BAD_REQUEST: "BAD_REQUEST",
    status.HTTP_404_NOT_FOUND: "NOT_FOUND",
    status.HTTP_405_METHOD_NOT_ALLOWED: "METHOD_NOT_ALLOWED",
    status.HTTP_413_CONTENT_TOO_LARGE: "PAYLOAD_TOO_LARGE",
}


def _envelope(
    status_code: int,
    code: str,
    message: str,
    details=None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    body = ErrorResponse(code=code, message=message, details=details)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(exclude_none=True),
        headers=headers,
    )


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""

    @app.exception_handler(ApplicationServiceError)
    async def service_error_handler(request: Request, exc: ApplicationServiceError):
        if exc.status_code >= 500:
            logger.error(f"{exc.error_code} on {request.url.path}")
        else:
            logger.info(f"{exc.error_code} on {request.url.path}: {exc.message}")
        return _envelope(exc.status_code, exc.error_code, exc.message, exc.details, exc.headers)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        code = HTTP_ERROR_CODES.get(exc.status_code, "HTTP_ERROR")
        if exc.status_code == status.HTTP_404_NOT_FOUND:
            message = "Endpoint not found."
        else:
            message = exc.detail if isinstance(exc.detail, str) else "Request failed."
        return _envelope(exc.status_code, code, message, headers=getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logger.warning(f"Validation error on {request.url.path}: {exc.errors()}")
        details = [
            {
                "field": ".".join(str(loc) for loc in e["loc"]),
                "reason": e["msg"],
                "type": e["type"],
            }
            for e in exc.errors()
        ]
        return _envelope(
            status.HTTP_400_BAD_REQUEST, "VALIDATION_ERROR", "Invalid request data.", details
        )

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
        return _envelope(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "SERVER_ERROR",
            "An unexpected error occurred.",
        )
