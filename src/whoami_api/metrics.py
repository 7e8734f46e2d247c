"""Prometheus metrics for the API."""

from __future__ import annotations

import logging
import time

from fastapi import FastAPI, Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

logger = logging.getLogger("whoami_api.access")

HTTP_REQUESTS = Counter(
    "whoami_http_requests_total",
    "Total number of HTTP requests",
    ["method", "path", "status"],
)
HTTP_DURATION = Histogram(
    "whoami_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "path", "status"],
    buckets=(0.01, 0.05, 0.1, 0.3, 0.5, 1, 2, 5),
)
VISIT_FALLBACKS = Counter(
    "whoami_visit_fallbacks_total",
    "Visit store operations that fell back from Redis to the file store",
    ["operation"],
)


def _route_path(request: Request) -> str:
    # Label by route template to keep cardinality bounded.
    route = request.scope.get("route")
    return getattr(route, "path", None) or request.url.path


def install_metrics(app: FastAPI) -> None:
    @app.middleware("http")
    async def observe_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - started
        path = _route_path(request)
        status = str(response.status_code)
        HTTP_REQUESTS.labels(method=request.method, path=path, status=status).inc()
        HTTP_DURATION.labels(method=request.method, path=path, status=status).observe(elapsed)
        logger.info(f"{request.method} {request.url.path} {response.status_code}")
        return response

    @app.get("/metrics", include_in_schema=False)
    async def metrics() -> Response:
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
