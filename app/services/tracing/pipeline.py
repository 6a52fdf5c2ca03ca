"""Statement execution pipeline with wrappable start and run hooks.

Every statement a connection executes passes through two extension points:
*start* and *run*. Each point has a hook slot. An empty slot means the
standard behaviour runs; an installed hook runs instead and is responsible
for delegating to whatever was in the slot before it (or to the standard
behaviour), which is how hooks chain.

The pipeline is bridged onto SQLAlchemy through the dialect execution events,
so statements issued through a Session or Connection reach the hooks:

    install_pipeline(engine)                # once per engine
    pipeline = pipeline_for(connection)     # per connection, created on demand

Connections without a pipeline execute exactly as SQLAlchemy would on its own.
When a connection goes back to the pool its pipeline notifies release
listeners, so hooks never stay on an idle connection.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable

from sqlalchemy import event
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.ext.asyncio import AsyncEngine

logger = logging.getLogger(__name__)

PIPELINE_INFO_KEY = "routine_tracer.pipeline"


@dataclass
class QueryDesc:
    """A statement on its way through the pipeline."""

    source_text: str | None
    parameters: Any = None
    runner: Callable[[], Any] | None = None
    started_at: datetime | None = None
    executed: bool = False


StartHook = Callable[[QueryDesc], None]
RunHook = Callable[[QueryDesc], None]
ReleaseListener = Callable[["ExecutionPipeline"], None]


class ExecutionPipeline:
    """The start/run hook chain of one connection."""

    def __init__(self):
        self.start_hook: StartHook | None = None
        self.run_hook: RunHook | None = None
        self._release_listeners: list[ReleaseListener] = []

    def standard_start(self, query: QueryDesc) -> None:
        """Default start behaviour: stamp the start time."""
        query.started_at = datetime.now(timezone.utc)

    def standard_run(self, query: QueryDesc) -> None:
        """Default run behaviour: hand the statement to the driver."""
        if query.runner is not None:
            query.runner()
        query.executed = True

    def start(self, query: QueryDesc) -> None:
        if self.start_hook is not None:
            self.start_hook(query)
        else:
            self.standard_start(query)

    def run(self, query: QueryDesc) -> None:
        if self.run_hook is not None:
            self.run_hook(query)
        else:
            self.standard_run(query)

    def execute(self, query: QueryDesc) -> None:
        """Start then run a statement."""
        self.start(query)
        self.run(query)

    def on_release(self, listener: ReleaseListener) -> None:
        """Call ``listener`` when the connection is returned to the pool."""
        self._release_listeners.append(listener)

    def remove_release_listener(self, listener: ReleaseListener) -> None:
        if listener in self._release_listeners:
            self._release_listeners.remove(listener)

    def release(self) -> None:
        """Notify release listeners. Listeners may remove themselves."""
        for listener in list(self._release_listeners):
            listener(self)


def pipeline_for(connection: Connection) -> ExecutionPipeline:
    """Get the pipeline of a connection, creating it on first use.

    The pipeline lives in the DBAPI connection's ``info`` dict, so it
    follows the pooled connection across checkouts the way server-side
    hooks follow a backend process.
    """
    pipeline = connection.info.get(PIPELINE_INFO_KEY)
    if pipeline is None:
        pipeline = ExecutionPipeline()
        connection.info[PIPELINE_INFO_KEY] = pipeline
    return pipeline


def _existing_pipeline(context) -> ExecutionPipeline | None:
    return context.root_connection.info.get(PIPELINE_INFO_KEY)


def _do_execute(cursor, statement, parameters, context) -> bool | None:
    pipeline = _existing_pipeline(context)
    if pipeline is None:
        return None
    pipeline.execute(QueryDesc(
        source_text=statement,
        parameters=parameters,
        runner=lambda: context.dialect.do_execute(cursor, statement, parameters, context),
    ))
    return True


def _do_executemany(cursor, statement, parameters, context) -> bool | None:
    pipeline = _existing_pipeline(context)
    if pipeline is None:
        return None
    pipeline.execute(QueryDesc(
        source_text=statement,
        parameters=parameters,
        runner=lambda: context.dialect.do_executemany(cursor, statement, parameters, context),
    ))
    return True


def _do_execute_no_params(cursor, statement, context) -> bool | None:
    pipeline = _existing_pipeline(context)
    if pipeline is None:
        return None
    pipeline.execute(QueryDesc(
        source_text=statement,
        runner=lambda: context.dialect.do_execute_no_params(cursor, statement, context),
    ))
    return True


def _on_checkin(dbapi_connection, connection_record) -> None:
    pipeline = connection_record.info.get(PIPELINE_INFO_KEY)
    if pipeline is not None:
        pipeline.release()


_LISTENERS = (
    ("do_execute", _do_execute),
    ("do_executemany", _do_executemany),
    ("do_execute_no_params", _do_execute_no_params),
)


def install_pipeline(engine: Engine | AsyncEngine) -> None:
    """Route an engine's cursor executions through connection pipelines.

    Safe to call more than once for the same engine.
    """
    if isinstance(engine, AsyncEngine):
        engine = engine.sync_engine

    for identifier, listener in _LISTENERS:
        if not event.contains(engine, identifier, listener):
            event.listen(engine, identifier, listener)
    if not event.contains(engine, "checkin", _on_checkin):
        event.listen(engine, "checkin", _on_checkin)
    logger.debug(f"Execution pipeline installed on {engine.url.render_as_string(hide_password=True)}")
