"""Trace collection around a single routine invocation.

A TraceCollector is a context manager. On entry it saves the pipeline's
current hooks and installs its own; on exit it puts the saved hooks back on
every pipeline still attached and drains its log, whether or not the block
raised:

    collector = TraceCollector(pipeline_for(connection))
    with collector:
        ... statements started here are recorded ...
        report = format_report(collector.log)
    # hooks restored, log empty

Only statement *starts* are recorded. The run hook delegates without
recording anything, and interceptors never change what the statement does.
"""

import functools
import logging
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Iterator

from app.services.tracing.context import get_active_routine
from app.services.tracing.pipeline import ExecutionPipeline, QueryDesc, RunHook, StartHook

logger = logging.getLogger(__name__)

DEFAULT_UNKNOWN_LABEL = "Unknown"

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class TraceEntry:
    """One statement observed during an invocation."""

    routine_name: str
    statement_text: str
    timestamp: datetime


class TraceLog:
    """Captured entries, most recently captured first.

    Iteration order is newest to oldest: recording S1 then S2 iterates as
    S2, S1.
    """

    def __init__(self):
        self._entries: deque[TraceEntry] = deque()

    def record(self, entry: TraceEntry) -> None:
        self._entries.appendleft(entry)

    def drain(self) -> int:
        """Release every entry. Returns how many were held."""
        count = len(self._entries)
        self._entries.clear()
        return count

    def entries(self) -> tuple[TraceEntry, ...]:
        return tuple(self._entries)

    def __iter__(self) -> Iterator[TraceEntry]:
        return iter(tuple(self._entries))

    def __len__(self) -> int:
        return len(self._entries)


@dataclass
class _Attachment:
    """A pipeline the collector is attached to, with the hooks it replaced."""

    pipeline: ExecutionPipeline
    prev_start: StartHook | None
    prev_run: RunHook | None


class TraceCollector:
    """Installs recording hooks on pipelines for the lifetime of a ``with`` block.

    The collector starts out attached to one pipeline and can be attached to
    more while installed, for example when the traced session moves to another
    connection. A pipeline whose connection goes back to the pool is detached
    at once and gets its previous hooks back.
    """

    def __init__(
        self,
        pipeline: ExecutionPipeline,
        unknown_label: str = DEFAULT_UNKNOWN_LABEL,
        clock: Clock = utc_now,
    ):
        self.pipeline = pipeline
        self.unknown_label = unknown_label
        self.clock = clock
        self.log = TraceLog()
        self._attachments: list[_Attachment] = []
        self._installed = False

    @property
    def installed(self) -> bool:
        return self._installed

    @property
    def attached(self) -> tuple[ExecutionPipeline, ...]:
        return tuple(a.pipeline for a in self._attachments)

    def install(self) -> None:
        """Start a fresh log and chain our hooks in front of the pipeline's."""
        if self._installed:
            raise RuntimeError("Trace collector is already installed")
        self.log.drain()
        self._installed = True
        self.attach(self.pipeline)

    def uninstall(self) -> None:
        """Restore every saved hook and release every entry."""
        if not self._installed:
            return
        for attachment in reversed(list(self._attachments)):
            self.detach(attachment.pipeline)
        self._installed = False
        released = self.log.drain()
        logger.debug(f"Trace collector uninstalled, released {released} entries")

    def attach(self, pipeline: ExecutionPipeline) -> None:
        """Save ``pipeline``'s current hooks and chain ours in front of them.

        Attaching an already attached pipeline does nothing.
        """
        if not self._installed:
            raise RuntimeError("Trace collector is not installed")
        if pipeline in self.attached:
            return

        attachment = _Attachment(pipeline, pipeline.start_hook, pipeline.run_hook)
        pipeline.start_hook = functools.partial(self._on_start, attachment)
        pipeline.run_hook = functools.partial(self._on_run, attachment)
        pipeline.on_release(self.detach)
        self._attachments.append(attachment)

    def detach(self, pipeline: ExecutionPipeline) -> None:
        """Put back the hooks ``pipeline`` had before it was attached."""
        for attachment in self._attachments:
            if attachment.pipeline is pipeline:
                break
        else:
            return

        self._attachments.remove(attachment)
        pipeline.remove_release_listener(self.detach)
        pipeline.start_hook = attachment.prev_start
        pipeline.run_hook = attachment.prev_run

    def __enter__(self) -> "TraceCollector":
        self.install()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.uninstall()

    def _on_start(self, attachment: _Attachment, query: QueryDesc) -> None:
        if query.source_text is not None:
            self.log.record(TraceEntry(
                routine_name=get_active_routine() or self.unknown_label,
                statement_text=query.source_text,
                timestamp=self.clock(),
            ))

        if attachment.prev_start is not None:
            attachment.prev_start(query)
        else:
            attachment.pipeline.standard_start(query)

    def _on_run(self, attachment: _Attachment, query: QueryDesc) -> None:
        if attachment.prev_run is not None:
            attachment.prev_run(query)
        else:
            attachment.pipeline.standard_run(query)

