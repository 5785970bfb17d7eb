"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import redis
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from starlette.middleware.gzip import GZipMiddleware
from starlette.middleware.sessions import SessionMiddleware

from tripsignals.config import get_settings
from tripsignals.errors import (
    GatewayUnavailable,
    InvalidRating,
    MalformedGatewayResponse,
    NotAuthenticated,
    NotFound,
    PersistenceError,
    TripSignalsError,
    UnknownInteractionKind,
    UnknownRecommendationContext,
)
from tripsignals.models.base import get_engine, get_session_factory
from tripsignals.api.v1 import router as api_v1_router

logger = logging.getLogger(__name__)
settings = get_settings()

ERROR_STATUS = {
    NotAuthenticated: 401,
    NotFound: 404,
    InvalidRating: 422,
    UnknownInteractionKind: 422,
    UnknownRecommendationContext: 422,
    PersistenceError: 500,
    MalformedGatewayResponse: 502,
    GatewayUnavailable: 503,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown."""
    logger.info("Starting %s...", settings.app_name)
    yield
    logger.info("Shutting down...")
    get_engine().dispose()


app = FastAPI(
    title=settings.app_name,
    description="Interaction-weighted preference scoring and recommendation gateway",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(GZipMiddleware, minimum_size=500)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(SessionMiddleware, secret_key=settings.secret_key)


@app.exception_handler(TripSignalsError)
async def domain_error_handler(request: Request, exc: TripSignalsError):
    status_code = ERROR_STATUS.get(type(exc), 400)
    if status_code >= 500:
        logger.error("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status_code,
        content={"error": type(exc).__name__, "detail": str(exc)},
    )


# Include API routers
app.include_router(api_v1_router)


@app.get("/health")
async def health_check():
    return {"status": "healthy", "app": settings.app_name}


@app.get("/health/detailed")
def detailed_health_check():
    checks = {}

    # Database
    try:
        with get_session_factory()() as session:
            session.execute(text("SELECT 1")).scalar()
            checks["database"] = {"ok": True}
    except Exception as e:
        checks["database"] = {"ok": False, "message": str(e)}

    # Redis
    try:
        r = redis.from_url(settings.redis_url, socket_timeout=5)
        r.ping()
        checks["redis"] = {"ok": True}
    except Exception as e:
        checks["redis"] = {"ok": False, "message": str(e)}

    # Celery workers
    try:
        from tripsignals.tasks.celery_app import celery_app
        inspect = celery_app.control.inspect(timeout=5)
        active_workers = inspect.active()
        checks["celery_workers"] = {
            "ok": bool(active_workers),
            "workers": list(active_workers.keys()) if active_workers else [],
        }
    except Exception as e:
        checks["celery_workers"] = {"ok": False, "message": str(e)}

    all_ok = all(check.get("ok", False) for check in checks.values())
    status = "healthy" if all_ok else "degraded"

    return {
        "status": status,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "checks": checks,
    }
