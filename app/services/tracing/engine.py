"""InvocationEngine - runs a routine from a call string and reports its statements.

The engine ties the pieces together:

    parse_call -> resolve_routine -> coerce_arguments -> invoke -> format_report

with a TraceCollector installed on the session's connection for the whole
sequence. If the routine ends its transaction and the session begins again on
another pooled connection, the collector follows it there. Hooks, trace log
and active routine are torn down exactly once on every exit path before the
result or the error reaches the caller.

Usage:
    engine = InvocationEngine(get_routine_catalog(), get_type_catalog())
    report = engine.trace_call(db, "demo.add(1, 2)")
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Iterator, Sequence

from sqlalchemy import event
from sqlalchemy.orm import Session

from app.services.tracing.coercion import coerce_arguments
from app.services.tracing.collector import DEFAULT_UNKNOWN_LABEL, Clock, TraceCollector, utc_now
from app.services.tracing.context import active_routine
from app.services.tracing.errors import ArityError, InvocationError, NullResultError, TraceError
from app.services.tracing.parser import parse_call
from app.services.tracing.pipeline import pipeline_for
from app.services.tracing.report import format_report
from app.services.tracing.resolver import resolve_routine
from app.services.tracing.sanitize import summarize_arguments
from app.services.type_catalog import TypeCatalog

if TYPE_CHECKING:
    from app.services.routines import RoutineCatalog, RoutineDescriptor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TraceResult:
    """Outcome of a successful trace."""

    routine: str
    report: str
    statement_count: int
    arguments: list[dict[str, Any]] = field(default_factory=list)


@contextmanager
def following_session(db: Session, collector: TraceCollector) -> Iterator[None]:
    """Attach ``collector`` to every connection ``db`` begins inside the block."""

    def on_begin(session, transaction, connection):
        collector.attach(pipeline_for(connection))

    event.listen(db, "after_begin", on_begin)
    try:
        yield
    finally:
        event.remove(db, "after_begin", on_begin)

class InvocationEngine:
    """Dynamic invocation of catalog routines with statement tracing."""

    def __init__(
        self,
        routines: "RoutineCatalog",
        types: TypeCatalog,
        search_path: Sequence[str] = ("public",),
        unknown_label: str = DEFAULT_UNKNOWN_LABEL,
        clock: Clock = utc_now,
    ):
        self.routines = routines
        self.types = types
        self.search_path = tuple(search_path)
        self.unknown_label = unknown_label
        self.clock = clock

    def trace_call(self, db: Session, call_string: str) -> str:
        """Invoke the routine named in ``call_string`` and return the report text.

        Raises:
            TraceError: a subclass naming the stage that failed.
        """
        return self.trace(db, call_string).report

    def trace(self, db: Session, call_string: str) -> TraceResult:
        """Like ``trace_call`` but also returns the routine and its arguments."""
        logger.info(f"Tracing call {call_string!r}")
        collector = TraceCollector(
            pipeline_for(db.connection()),
            unknown_label=self.unknown_label,
            clock=self.clock,
        )

        try:
            with collector, following_session(db, collector):
                call = parse_call(call_string)
                descriptor = resolve_routine(
                    self.routines, call.name, len(call.arguments), self.search_path
                )

                with active_routine(descriptor.qualified_name):
                    args = coerce_arguments(self.types, descriptor, call.arguments)
                    if len(args) != descriptor.nargs:
                        raise ArityError(got=len(args), expected=descriptor.nargs)

                    result = self._invoke(db, descriptor, args)
                    if result is None:
                        raise NullResultError(f"Routine {descriptor.qualified_name} returned no value")

                    entries = collector.log.entries()
                    traced = TraceResult(
                        routine=descriptor.qualified_name,
                        report=format_report(entries),
                        statement_count=len(entries),
                        arguments=summarize_arguments(descriptor, args),
                    )
        except TraceError as e:
            logger.info(f"Trace of {call_string!r} failed ({e.kind}): {e.message}")
            raise

        logger.info(f"Traced {descriptor.signature}: {traced.statement_count} statement(s)")
        return traced

    def _invoke(self, db: Session, descriptor: "RoutineDescriptor", args: list[Any]) -> Any:
        try:
            return self.routines.invoke(descriptor.id, db, args)
        except Exception as e:
            logger.debug(f"Routine {descriptor.signature} raised {type(e).__name__}: {e}")
            raise InvocationError(f"Routine {descriptor.qualified_name} failed: {e}") from e
