"""Argument summaries for logs and API responses.

Coerced arguments can be any Python value. These helpers turn them into
short, JSON-serializable summaries keyed by parameter position and type, with
long strings truncated.
"""

from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Sequence
from uuid import UUID

if TYPE_CHECKING:
    from app.services.routines import RoutineDescriptor


# Maximum string length before truncation
MAX_STRING_LENGTH = 200

# Maximum number of items to show in lists/dicts
MAX_COLLECTION_ITEMS = 10


def sanitize_value(value: Any, depth: int = 0) -> Any:
    """Sanitize a single value for safe display.

    Args:
        value: The value to sanitize
        depth: Current recursion depth (to prevent infinite loops)

    Returns:
        A sanitized, JSON-serializable representation
    """
    # Prevent deep recursion
    if depth > 3:
        return f"<{type(value).__name__}>"

    if value is None or isinstance(value, bool):
        return value

    # Floats may be nan/inf, which JSON cannot carry
    if isinstance(value, int):
        return value
    if isinstance(value, (float, Decimal)):
        return str(value)

    # Handle strings with truncation
    if isinstance(value, str):
        if len(value) > MAX_STRING_LENGTH:
            return value[:MAX_STRING_LENGTH] + f"... ({len(value)} chars)"
        return value

    if isinstance(value, bytes):
        return f"<bytes: {len(value)} bytes>"

    if isinstance(value, UUID):
        return str(value)

    # datetime is a date subclass
    if isinstance(value, date):
        return value.isoformat()

    if isinstance(value, (list, tuple)):
        items = [sanitize_value(v, depth=depth + 1) for v in value[:MAX_COLLECTION_ITEMS]]
        if len(value) > MAX_COLLECTION_ITEMS:
            items.append(f"... ({len(value)} items)")
        return items

    if isinstance(value, dict):
        result = {}
        for i, (k, v) in enumerate(value.items()):
            if i >= MAX_COLLECTION_ITEMS:
                result["_truncated"] = True
                result["_total"] = len(value)
                break
            result[str(k)] = sanitize_value(v, depth=depth + 1)
        return result

    # Fallback: type name
    return f"<{type(value).__name__}>"


def summarize_arguments(descriptor: "RoutineDescriptor", args: Sequence[Any]) -> list[dict[str, Any]]:
    """Describe each argument with its position, declared type and value."""
    return [
        {
            "position": index + 1,
            "type": descriptor.parameter_types[index],
            "value": sanitize_value(value),
        }
        for index, value in enumerate(args)
    ]
