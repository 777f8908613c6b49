"""
FastAPI application factory.

This file:
1. Creates the FastAPI app
2. Runs startup logic (create DB tables, connect to Redis)
3. Registers the routers (bookings, health) and the NotFound handler
4. Runs shutdown logic (close connections)

To run:  uvicorn api.main:app --host 0.0.0.0 --port 8000 --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from redis import Redis

from config.settings import settings
from models.base import engine, Base
import models.job  # noqa: F401  registers every booking table on Base.metadata
from booking.errors import NotFound
from api.routers import bookings, health

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup (before yield):
    - Creates all DB tables if they don't exist (safe to run multiple times)
    - Connects to Redis, where outbound notifications are queued

    Shutdown (after yield):
    - Closes Redis connection
    - Disposes the DB engine (closes connection pool)
    """
    logger.info("Creating database tables...")
    Base.metadata.create_all(engine)

    app.state.redis = Redis.from_url(settings.redis_url)
    logger.info("API ready")

    yield

    app.state.redis.close()
    engine.dispose()
    logger.info("API shut down")


async def not_found_handler(request: Request, exc: NotFound) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": str(exc)})


def create_app() -> FastAPI:
    """Factory function that builds and configures the FastAPI application."""
    app = FastAPI(
        title="Translator Bookings",
        description="Booking backend for interpreter jobs: accept, reassign, cancel and complete bookings",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_exception_handler(NotFound, not_found_handler)
    app.include_router(health.router)
    app.include_router(bookings.router)

    return app


# This is what uvicorn imports: `uvicorn api.main:app`
app = create_app()
