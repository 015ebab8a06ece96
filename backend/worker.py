"""Worker process: keeps the quote cache warm and serves health probes."""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from config import configure_logging, settings
from context import AppContext, build_context
from errors import register_error_handlers
from services.scheduler import RefreshScheduler

configure_logging("worker")

logger = logging.getLogger(__name__)


def create_worker_app(context: AppContext | None = None, **scheduler_kwargs) -> FastAPI:
    """Health server whose lifespan owns the refresh scheduler."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        ctx = context or build_context(settings)
        scheduler = RefreshScheduler(
            ctx.store,
            ctx.cache,
            batch_size=ctx.batch_size,
            cache_ttl_seconds=ctx.cache_ttl_seconds,
            maintenance_interval_seconds=ctx.maintenance_interval_seconds,
            **scheduler_kwargs,
        )
        app.state.scheduler = scheduler
        app.state.probe = scheduler
        scheduler.start()
        logger.info(
            "Worker started (environment=%s, version=%s, port=%d)",
            settings.environment,
            settings.version,
            settings.worker_port,
        )
        yield
        logger.info("Worker shutting down")
        # Running jobs are not awaited; the thread is a daemon.
        scheduler.stop()
        if context is None:
            ctx.close()
        logger.info("Worker stopped")

    app = FastAPI(title="Quote Worker", version="1.0.0", lifespan=lifespan)
    register_error_handlers(app)

    from routes.health import router as health_router

    app.include_router(health_router)
    return app


def main() -> None:
    uvicorn.run(create_worker_app(), host="0.0.0.0", port=settings.worker_port, log_config=None)


if __name__ == "__main__":
    main()
