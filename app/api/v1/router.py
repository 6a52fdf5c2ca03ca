"""Main API router for v1 endpoints."""

from fastapi import APIRouter

from app.api.v1 import admin, trace

router = APIRouter()

# Include all sub-routers
router.include_router(admin.router)  # Admin auth (login)
router.include_router(trace.router)  # Routine tracing, admin-only


@router.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "ok", "message": "Routine tracer API is running"}
