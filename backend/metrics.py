"""Prometheus HTTP metrics and the /metrics endpoint."""

import time

from fastapi import FastAPI, Request, Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)


class HttpMetrics:
    """Request counter and latency histogram on a per-app registry."""

    def __init__(self, registry: CollectorRegistry | None = None):
        self.registry = registry or CollectorRegistry()
        self.requests_total = Counter(
            "http_requests_total",
            "Total number of HTTP requests",
            ["status"],
            registry=self.registry,
        )
        self.request_duration = Histogram(
            "http_request_duration_seconds",
            "HTTP request duration in seconds",
            registry=self.registry,
        )

    def install(self, app: FastAPI) -> None:
        """Add the recording middleware and the /metrics route."""

        @app.middleware("http")
        async def record_request(request: Request, call_next):
            start = time.perf_counter()
            status = "500"
            try:
                response: Response = await call_next(request)
                status = str(response.status_code)
                return response
            finally:
                self.requests_total.labels(status=status).inc()
                self.request_duration.observe(time.perf_counter() - start)

        @app.get("/metrics", include_in_schema=False)
        def metrics() -> Response:
            return Response(generate_latest(self.registry), media_type=CONTENT_TYPE_LATEST)
