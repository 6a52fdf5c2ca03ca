"""Active routine context using contextvars.

The start interceptor labels every captured statement with the routine
currently under trace. Keeping that name in a context variable means two
traces running in different threads or greenlets never see each other's
routine.
"""

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator


_active_routine: ContextVar[str | None] = ContextVar('active_routine', default=None)


def get_active_routine() -> str | None:
    """Get the qualified name of the routine under trace, or None."""
    return _active_routine.get()


@contextmanager
def active_routine(name: str) -> Iterator[str]:
    """Mark ``name`` as the routine under trace for the duration of the block.

    The previous value is restored on exit, including when the block raises.
    """
    token = _active_routine.set(name)
    try:
        yield name
    finally:
        _active_routine.reset(token)
