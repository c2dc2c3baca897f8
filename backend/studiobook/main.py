# backend/studiobook/main.py

import asyncio
import logging
import os
import time

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.exc import TimeoutError as SA_TimeoutError
from starlette.middleware.gzip import GZipMiddleware

from .api import api_booking, api_room
from .core.config import settings
from .core.observability import setup_logging, setup_tracer
from .database import SessionLocal
from .middleware.security_headers import SecurityHeadersMiddleware
from .utils.errors import BookingError, http_status_for
from .utils.redis_cache import close_redis_client
from .utils.status_logger import register_status_listeners

# Configure logging before creating any loggers
setup_logging()
logger = logging.getLogger(__name__)

_BOOT_TS = time.time()

app = FastAPI(title="Studio Booking API", default_response_class=ORJSONResponse)
setup_tracer(app)
register_status_listeners()

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
logger.info("CORS origins set to: %s", settings.CORS_ORIGINS)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(GZipMiddleware, minimum_size=1024)


@app.middleware("http")
async def catch_exceptions(request: Request, call_next):
    """Turn unhandled failures into JSON instead of bare 500 pages."""
    try:
        return await call_next(request)
    except SA_TimeoutError as exc:  # DB pool timeout -> 503 to reduce retry storms
        logger.error("DB timeout at %s: %s", request.url.path, str(exc))
        return ORJSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"detail": "Database busy, please retry"},
        )
    except Exception as exc:  # pragma: no cover - generic handler
        logger.exception("Unhandled error: %s", exc)
        return ORJSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal Server Error"},
        )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Return request schema errors with details and log them for debugging."""
    errors = exc.errors()
    logger.warning("Validation error at %s: %s", request.url.path, errors)
    field_errors = {
        ".".join(str(part) for part in err.get("loc", ()) if part != "body"): err.get("msg", "invalid")
        for err in errors
    }
    return ORJSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": {"message": "Invalid request", "field_errors": field_errors}},
    )


@app.exception_handler(BookingError)
async def booking_error_handler(request: Request, exc: BookingError):
    code = http_status_for(exc)
    logger.info(
        "%s at %s -> %s: %s", type(exc).__name__, request.url.path, code, exc.message
    )
    headers = {"WWW-Authenticate": "Bearer"} if code == status.HTTP_401_UNAUTHORIZED else None
    return ORJSONResponse(
        status_code=code,
        content={"detail": {"message": exc.message, "field_errors": exc.field_errors}},
        headers=headers,
    )


def _ping_db() -> float:
    started = time.perf_counter()
    with SessionLocal() as db:
        db.execute(text("SELECT 1"))
    return (time.perf_counter() - started) * 1000


@app.get("/healthz/live", tags=["health"])
async def health_live():
    """Liveness probe: process can respond; does not touch the DB."""
    return {
        "status": "ok",
        "kind": "live",
        "uptime_s": round(time.time() - _BOOT_TS, 1),
        "pid": os.getpid(),
    }


@app.get("/healthz/ready", tags=["health"])
async def health_ready():
    """Readiness probe: the database answers a trivial query."""
    try:
        ping_ms = await asyncio.to_thread(_ping_db)
    except SQLAlchemyError as exc:
        logger.warning("Readiness probe failed: %s", exc)
        return ORJSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "error", "kind": "ready", "ready": False, "error": str(exc)},
            headers={"Cache-Control": "no-store"},
        )
    return ORJSONResponse(
        content={"status": "ok", "kind": "ready", "ready": True, "db_ping_ms": round(ping_ms, 2)},
        headers={"Cache-Control": "no-store"},
    )


@app.get("/")
def read_root():
    return {"message": "Welcome to the Studio Booking API"}


api_prefix = settings.API_V1_STR  # usually "/api/v1"

app.include_router(api_booking.router, prefix=f"{api_prefix}/bookings")
app.include_router(api_room.router, prefix=f"{api_prefix}/rooms")


@app.on_event("shutdown")
def shutdown_redis_client() -> None:
    """Close Redis connections when the application shuts down."""
    logger.info("Closing Redis client")
    close_redis_client()
