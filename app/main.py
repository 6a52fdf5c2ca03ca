"""FastAPI application entry point for the routine tracer."""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI

from app.api.v1.router import router as api_v1_router
from app.config import DEFAULT_JWT_SECRET_KEY, get_settings
from app.database import engine
from app.services.routines import load_routine_modules

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan - startup and shutdown events."""
    # Startup
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info(f"Starting routine tracer API ({settings.app_env})")
    logger.info(f"Database: {settings.async_database_url.split('@')[-1]}")  # Hide credentials

    if settings.is_production and settings.jwt_secret_key == DEFAULT_JWT_SECRET_KEY:
        raise RuntimeError("JWT_SECRET_KEY must be set in production")

    count = load_routine_modules(settings.routine_modules)
    logger.info(f"Routine catalog ready with {count} routine(s)")

    yield

    # Shutdown
    logger.info("Shutting down routine tracer API")
    await engine.dispose()


# Create FastAPI app
app = FastAPI(
    title="Routine Tracer API",
    description="Invoke stored routines by call expression and report every statement they run",
    version="0.1.0",
    lifespan=lifespan,
)

# Include routers
app.include_router(api_v1_router, prefix="/api/v1")


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {
        "name": "Routine Tracer API",
        "version": "0.1.0",
        "description": "Statement tracing for routine invocations",
    }


@app.get("/health")
async def health() -> dict[str, str]:
    """Global health check."""
    return {"status": "ok"}
