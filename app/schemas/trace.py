"""Schemas for routine trace endpoints."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class TraceRequest(BaseModel):
    """Request to invoke a routine and trace its statements."""

    call: str = Field(min_length=1)  # "demo.add(1, 2)"


class TraceArgument(BaseModel):
    """A coerced argument as passed to the routine."""

    position: int
    type: str
    value: Any = None


class TraceResponse(BaseModel):
    """Rendered trace of a successful invocation."""

    call: str
    routine: str  # Resolved qualified name
    statement_count: int
    arguments: list[TraceArgument] = Field(default_factory=list)
    report: str


class TraceErrorDetail(BaseModel):
    """Structured failure returned as the HTTP error detail."""

    kind: str  # "parse_error", "resolution_error", ...
    message: str


class TraceErrorResponse(BaseModel):
    """Error body of a failed trace."""

    detail: TraceErrorDetail


class RoutineSummary(BaseModel):
    """A routine available for tracing."""

    id: int
    qualified_name: str
    parameter_types: list[str]
    signature: str

    model_config = ConfigDict(from_attributes=True)
