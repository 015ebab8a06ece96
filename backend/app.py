"""FastAPI application entry point for the quote API."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response

from config import configure_logging, settings
from context import AppContext, build_context
from errors import internal_error_response, register_error_handlers
from metrics import HttpMetrics
from services.quotes import QuoteReader

configure_logging("api")

logger = logging.getLogger(__name__)


def _attach(app: FastAPI, context: AppContext) -> None:
    reader = QuoteReader(
        context.store,
        context.cache,
        context.executor,
        batch_size=context.batch_size,
        cache_ttl_seconds=context.cache_ttl_seconds,
    )
    app.state.context = context
    app.state.reader = reader
    app.state.probe = reader


def create_app(context: AppContext | None = None) -> FastAPI:
    """Build the API app. Without a context, one is built from settings at startup."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = context is None
        if owned:
            _attach(app, build_context(settings))
        logger.info(
            "Quote API started (environment=%s, version=%s, batch_size=%d, cache_ttl=%ds)",
            settings.environment,
            settings.version,
            app.state.context.batch_size,
            app.state.context.cache_ttl_seconds,
        )
        yield
        logger.info("Quote API shutting down")
        if owned:
            app.state.context.close()

    app = FastAPI(title="Quote API", version="1.0.0", lifespan=lifespan)
    if context is not None:
        _attach(app, context)

    # Security headers
    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        try:
            response: Response = await call_next(request)
        except Exception as exc:
            # Unhandled errors would otherwise bypass these headers and the metrics.
            response = internal_error_response(exc)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        if settings.is_production:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response

    HttpMetrics().install(app)

    # Centralized error handlers
    register_error_handlers(app)

    from routes.demo import router as demo_router
    from routes.health import router as health_router
    from routes.quotes import router as quotes_router

    app.include_router(health_router)
    app.include_router(quotes_router)
    app.include_router(demo_router)

    return app


app = create_app()
