"""Services for the routine tracer."""

# Service modules are imported individually where needed
# to avoid circular imports

__all__ = [
    "routines",
    "type_catalog",
    "tracing",
]
