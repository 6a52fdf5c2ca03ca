"""Plain-text rendering of a trace log."""

from datetime import datetime
from typing import Iterable

from app.services.tracing.collector import TraceEntry

REPORT_TITLE = "Routine Execution Trace Report"
NO_RECORDS_LINE = "No execution records found"


def format_timestamp(value: datetime) -> str:
    """``2026-01-31 09:15:02.000123+00:00``"""
    return value.isoformat(sep=" ", timespec="microseconds")


def format_report(entries: Iterable[TraceEntry]) -> str:
    """Render entries in the order given, numbered from 1."""
    lines = [REPORT_TITLE, "=" * len(REPORT_TITLE), ""]

    count = 0
    for count, entry in enumerate(entries, start=1):
        header = f"Execution Record #{count}:"
        lines.extend([
            header,
            "-" * len(header),
            f"Routine: {entry.routine_name}",
            f"SQL: {entry.statement_text}",
            f"Executed At: {format_timestamp(entry.timestamp)}",
            "",
        ])

    if count == 0:
        lines.append(NO_RECORDS_LINE)
    else:
        lines.append(f"Total execution records: {count}")

    return "\n".join(lines) + "\n"
