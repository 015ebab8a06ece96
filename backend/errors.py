"""Custom exceptions and centralized FastAPI error handlers."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class QuoteServiceError(Exception):
    """Base exception with HTTP status code."""

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.status_code = status_code


class StoreUnavailableError(QuoteServiceError):
    def __init__(self, message: str = "Quote store unavailable"):
        super().__init__(message, status_code=500)


class QuoteNotFoundError(QuoteServiceError):
    def __init__(self, message: str = "No quotes found"):
        super().__init__(message, status_code=404)


class CacheError(Exception):
    """Cache-layer failure. Never shown to clients; readers treat it as a miss."""


class CacheUnavailableError(CacheError):
    pass


class CacheCorruptError(CacheError):
    pass


def internal_error_response(exc: Exception) -> JSONResponse:
    """Log an unexpected exception and build the generic 500 body."""
    logger.error("Unhandled error: %s", exc, exc_info=exc)
    return JSONResponse(
        {"error": "Internal server error"},
        status_code=500,
    )


def register_error_handlers(app: FastAPI) -> None:
    """Register centralized exception handlers on the FastAPI app."""

    @app.exception_handler(QuoteServiceError)
    async def handle_quote_service_error(_request: Request, exc: QuoteServiceError):
        return JSONResponse({"error": str(exc)}, status_code=exc.status_code)

    @app.exception_handler(Exception)
    async def handle_unexpected(_request: Request, exc: Exception):
        return internal_error_response(exc)
