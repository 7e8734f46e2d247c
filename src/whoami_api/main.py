"""FastAPI entrypoint."""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from whoami_api.config import Settings, settings as default_settings
from whoami_api.exceptions import AppError
from whoami_api.metrics import install_metrics
from whoami_api.profile.geo import GeoResolver
from whoami_api.profile.router import router as whoami_router
from whoami_api.rate_limit import WindowLimiter
from whoami_api.visits.file_store import FileVisitStore
from whoami_api.visits.health import StoreHealth
from whoami_api.visits.redis_store import LinearBackoff, RedisVisitStore
from whoami_api.visits.router import router as visits_router
from whoami_api.visits.service import VisitAccounting
from whoami_api.web.router import router as web_router

logger = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
}


def build_redis_store(settings: Settings, health: StoreHealth) -> RedisVisitStore | None:
    if not settings.redis_url:
        return None
    return RedisVisitStore.from_url(
        settings.redis_url,
        health,
        socket_timeout=settings.redis_socket_timeout,
        total_key=settings.redis_total_key,
        clients_key=settings.redis_clients_key,
        backoff=LinearBackoff(
            step=settings.redis_backoff_step_ms / 1000,
            cap=settings.redis_backoff_max_ms / 1000,
        ),
        heartbeat_seconds=settings.redis_heartbeat_seconds,
    )


def create_app(app_settings: Settings | None = None) -> FastAPI:
    settings = app_settings or default_settings
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        file_store = FileVisitStore(settings.visits_file)
        file_store.ensure_exists()
        health = StoreHealth()
        redis_store = build_redis_store(settings, health)
        if redis_store is not None:
            redis_store.start()
        else:
            logger.info(f"REDIS_URL not set, counting visits in {settings.visits_file}")

        app.state.health = health
        app.state.redis_store = redis_store
        app.state.accounting = VisitAccounting(file_store, redis_store)
        app.state.geo = GeoResolver(
            provider=settings.geo_provider,
            api_key=settings.geo_api_key,
            database_path=settings.geoip_db_path,
            cache_ttl_seconds=settings.geo_cache_ttl_seconds,
            timeout_seconds=settings.geo_timeout_seconds,
        )
        try:
            yield
        finally:
            app.state.geo.close()
            if redis_store is not None:
                await redis_store.close()

    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.state.settings = settings
    app.state.started_at = time.monotonic()
    app.state.rate_limiter = (
        WindowLimiter(settings.rate_limit_max_requests, settings.rate_limit_window_seconds)
        if settings.rate_limit_enabled
        else None
    )

    app.add_middleware(CORSMiddleware, allow_origins=[settings.allowed_origin])
    install_metrics(app)

    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response

    @app.exception_handler(AppError)
    async def app_error_handler(_, exc: AppError):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.code, "message": exc.message},
            headers=exc.headers,
        )

    def _liveness():
        return {
            "status": "ok",
            "uptime": round(time.monotonic() - app.state.started_at, 3),
            "redis": app.state.health.ready,
        }

    @app.get("/health")
    async def health_check():
        return _liveness()

    @app.get("/healthz")
    async def healthz():
        return _liveness()

    @app.get("/ready")
    async def readiness():
        if settings.redis_url:
            return {"ready": app.state.health.ready}
        return {"ready": True}

    app.include_router(web_router)
    app.include_router(whoami_router, prefix="/api")
    app.include_router(visits_router, prefix="/api")
    return app


app = create_app()
