"""
Shift Booking API - Main Application Entry Point

Reservation ledger for timed sessions ("shifts"):
- Unique, strictly increasing ticket numbers under concurrent reservations
- Per-shift booked counter kept in step with booking status
- Compare-and-swap transactions instead of locks
- Push-based change feed for dashboards (SSE, Redis fan-out)
- Structured logging with request correlation
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shiftbook.core.config import get_settings
from shiftbook.core.logging import setup_logging, get_logger
from shiftbook.core.metrics import metrics_endpoint
from shiftbook.api.errors import register_exception_handlers
from shiftbook.api.router import api_router
from shiftbook.api.middleware import RequestLoggingMiddleware
from shiftbook.infrastructure.redis_client import close_redis, get_redis_status
from shiftbook.services.change_feed import change_feed

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle: startup and shutdown hooks."""
    setup_logging()
    logger = get_logger(__name__)

    logger.info(
        "application_starting",
        app=settings.APP_NAME,
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
    )

    if await change_feed.start_relay():
        logger.info("redis_ready")
    else:
        logger.warning("redis_unavailable", message="Change feed is process-local")

    yield

    await change_feed.stop_relay()
    await close_redis()
    logger.info("application_shutdown")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Reservation ledger for shift bookings: tickets, capacity and booking lifecycle",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Restrict in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)

register_exception_handlers(app)
app.include_router(api_router)


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint for Docker and load balancers."""
    return {
        "status": "healthy",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "redis": await get_redis_status(),
        "feed_subscribers": change_feed.subscriber_count,
    }


@app.get("/metrics", tags=["Health"], include_in_schema=False)
async def metrics():
    return metrics_endpoint()


@app.get("/", tags=["Root"])
async def root():
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.APP_VERSION,
        "docs": "/docs",
    }
