"""Routine invocation tracing.

This package invokes a catalog routine from a textual call expression and
reports every statement the routine executed, directly or through nested
calls.

Usage:
    from app.services.tracing import InvocationEngine, install_pipeline

    # Once per engine:
    install_pipeline(engine)

    # Per trace, inside a sync Session (or via AsyncSession.run_sync):
    tracer = InvocationEngine(get_routine_catalog(), get_type_catalog())
    report = tracer.trace_call(db, "billing.close_invoice(42, true)")
"""

from app.services.tracing.collector import TraceCollector, TraceEntry, TraceLog
from app.services.tracing.engine import InvocationEngine, TraceResult
from app.services.tracing.errors import (
    ArgumentTypeError,
    ArityError,
    InvocationError,
    LiteralConversionError,
    NullResultError,
    ParseError,
    ResolutionError,
    TraceError,
)
from app.services.tracing.parser import ParsedCall, parse_call
from app.services.tracing.pipeline import ExecutionPipeline, QueryDesc, install_pipeline, pipeline_for
from app.services.tracing.report import format_report

__all__ = [
    "InvocationEngine",
    "TraceResult",
    "TraceCollector",
    "TraceEntry",
    "TraceLog",
    "ExecutionPipeline",
    "QueryDesc",
    "install_pipeline",
    "pipeline_for",
    "ParsedCall",
    "parse_call",
    "format_report",
    # Errors
    "TraceError",
    "ParseError",
    "ResolutionError",
    "ArgumentTypeError",
    "LiteralConversionError",
    "ArityError",
    "InvocationError",
    "NullResultError",
]
