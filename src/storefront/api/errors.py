"""Failure taxonomy → HTTP responses.

Each failure kind has one status code. The body is always
``{"kind": ..., "message": ...}``; anything outside the taxonomy becomes an
``internal_error`` whose message says nothing about the cause.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from storefront.errors import StorefrontError

logger = structlog.get_logger(__name__)

INTERNAL_ERROR = "internal_error"
INTERNAL_MESSAGE = "An unexpected error occurred"

STATUS_CODES = {
    "not_found": 404,
    "validation_failed": 400,
    "insufficient_stock": 409,
    "limit_reached": 409,
    "duplicate_review": 409,
    "unauthorized": 403,
    "compensation_failed": 500,
}


def error_payload(exc: Exception) -> dict:
    if isinstance(exc, StorefrontError):
        return {"kind": exc.kind, "message": exc.client_message}
    return {"kind": INTERNAL_ERROR, "message": INTERNAL_MESSAGE}


def status_for(exc: Exception) -> int:
    if isinstance(exc, StorefrontError):
        return STATUS_CODES.get(exc.kind, 500)
    return 500


async def storefront_error_handler(request: Request, exc: StorefrontError) -> JSONResponse:
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error("Request failed", path=request.url.path, kind=exc.kind, error=str(exc))
    return JSONResponse(status_code=status_code, content=error_payload(exc))


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error", path=request.url.path)
    return JSONResponse(status_code=500, content=error_payload(exc))


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StorefrontError, storefront_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)
