"""Pydantic schemas for the routine tracer API."""

from app.schemas.admin import AdminLoginRequest, AdminLoginResponse
from app.schemas.trace import (
    RoutineSummary,
    TraceArgument,
    TraceErrorDetail,
    TraceErrorResponse,
    TraceRequest,
    TraceResponse,
)

__all__ = [
    # Admin
    "AdminLoginRequest",
    "AdminLoginResponse",
    # Trace
    "TraceRequest",
    "TraceResponse",
    "TraceArgument",
    "TraceErrorDetail",
    "TraceErrorResponse",
    "RoutineSummary",
]
