"""FastAPI application entrypoint."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, HTTPException, Request, Response, status
from sqlalchemy import text

from coachbook.core.config import get_settings
from coachbook.core.database import SessionLocal, close_engine
from coachbook.core.metrics import build_metrics_response, instrument_http_request
from coachbook.modules.availability.router import router as availability_router
from coachbook.modules.booking.router import router as booking_router
from coachbook.modules.identity.router import router as identity_router
from coachbook.modules.scheduling.router import router as scheduling_router
from coachbook.shared.exceptions import register_exception_handlers
from coachbook.shared.utils import utc_now

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown hooks."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    logger.info("Starting %s", settings.app_name)
    if not settings.calendar_configured:
        logger.warning("Google Calendar is not configured; busy intervals will not filter slots")

    app.state.http_client = httpx.AsyncClient(timeout=settings.calendar_timeout_seconds)
    try:
        yield
    finally:
        logger.info("Shutting down %s", settings.app_name)
        await app.state.http_client.aclose()
        app.state.http_client = None
        await close_engine()


app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
    lifespan=lifespan,
)
app.middleware("http")(instrument_http_request)

register_exception_handlers(app)

app.include_router(identity_router, prefix=settings.api_prefix)
app.include_router(availability_router, prefix=settings.api_prefix)
app.include_router(booking_router, prefix=settings.api_prefix)
app.include_router(scheduling_router, prefix=settings.api_prefix)


@app.get("/health")
async def healthcheck() -> dict[str, str]:
    """Liveness probe endpoint."""
    return {"status": "ok"}


async def _is_database_ready() -> bool:
    """Return True if DB accepts basic queries."""
    try:
        async with SessionLocal() as session:
            await session.execute(text("SELECT 1"))
        return True
    except Exception:
        logger.exception("Database readiness check failed")
        return False


@app.get("/ready")
async def readiness_check() -> dict[str, str]:
    """Readiness probe endpoint with DB dependency check."""
    if not await _is_database_ready():
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database is not ready",
        )
    return {
        "status": "ready",
        "database": "ok",
        "calendar": "configured" if settings.calendar_configured else "unconfigured",
        "timestamp": utc_now().isoformat(),
    }


@app.get("/metrics", include_in_schema=False)
async def metrics_endpoint(_: Request) -> Response:
    """Prometheus metrics endpoint."""
    return build_metrics_response()
