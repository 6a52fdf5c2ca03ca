"""Routine catalog - registry of callable routines keyed by name and arity.

Routines are plain Python callables that receive the database session as
their first argument, followed by their declared parameters:

    from app.services.routines import routine

    @routine("billing.close_invoice", "integer", "boolean")
    def close_invoice(db, invoice_id, notify):
        db.execute(text("UPDATE invoices SET closed = true WHERE id = :id"), {"id": invoice_id})
        return invoice_id

Modules holding routines are imported at startup through
``load_routine_modules`` so their decorators register them.
"""

import importlib
import itertools
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Sequence

from sqlalchemy.orm import Session

from app.services.tracing.errors import ParseError
from app.services.tracing.resolver import split_qualified_name

logger = logging.getLogger(__name__)

DEFAULT_SCHEMA = "public"

RoutineFunc = Callable[..., Any]


@dataclass(frozen=True)
class RoutineDescriptor:
    """A resolved routine: identity, name and ordered parameter types."""

    id: int
    schema: str
    name: str
    parameter_types: tuple[str, ...]
    func: RoutineFunc = field(compare=False, repr=False)

    @property
    def qualified_name(self) -> str:
        return f"{self.schema}.{self.name}"

    @property
    def nargs(self) -> int:
        return len(self.parameter_types)

    @property
    def signature(self) -> str:
        return f"{self.qualified_name}({', '.join(self.parameter_types)})"


class RoutineCatalog:
    """In-process name/arity resolution service and invocation facility."""

    def __init__(self):
        self._routines: dict[int, RoutineDescriptor] = {}
        self._ids = itertools.count(1)

    def register(
        self,
        name: str,
        func: RoutineFunc,
        parameter_types: Sequence[str] = (),
    ) -> RoutineDescriptor:
        """Register ``func`` under ``name`` with the given parameter types.

        Raises:
            ValueError: if the name is malformed or the exact signature
                is already registered.
        """
        try:
            path = split_qualified_name(name)
        except ParseError as e:
            raise ValueError(f"Invalid routine name {name!r}: {e.message}") from e
        if len(path) == 1:
            schema, routine_name = DEFAULT_SCHEMA, path[0]
        elif len(path) == 2:
            schema, routine_name = path
        else:
            raise ValueError(f"Routine name {name!r} has too many dotted parts")

        types = tuple(" ".join(t.split()).lower() for t in parameter_types)
        for existing in self._routines.values():
            if (existing.schema, existing.name, existing.parameter_types) == (schema, routine_name, types):
                raise ValueError(f"Routine {existing.signature} is already registered")

        descriptor = RoutineDescriptor(
            id=next(self._ids),
            schema=schema,
            name=routine_name,
            parameter_types=types,
            func=func,
        )
        self._routines[descriptor.id] = descriptor
        logger.debug(f"Registered routine {descriptor.signature} as {descriptor.id}")
        return descriptor

    def routine(self, name: str, *parameter_types: str) -> Callable[[RoutineFunc], RoutineFunc]:
        """Decorator form of ``register``."""

        def decorator(fn: RoutineFunc) -> RoutineFunc:
            self.register(name, fn, parameter_types)
            return fn

        return decorator

    def lookup(self, schema: str, name: str, nargs: int | None = None) -> list[RoutineDescriptor]:
        """All routines in ``schema`` called ``name``, optionally of a given arity."""
        return [
            d for d in self._routines.values()
            if d.schema == schema and d.name == name and (nargs is None or d.nargs == nargs)
        ]

    def get(self, routine_id: int) -> RoutineDescriptor | None:
        """Get a routine by ID."""
        return self._routines.get(routine_id)

    def invoke(self, routine_id: int, db: Session, args: Sequence[Any]) -> Any:
        """Run a routine with positional, already-typed arguments.

        Returns whatever the routine returns; ``None`` stands for a null
        result. Exceptions raised by the routine propagate unchanged.
        """
        descriptor = self._routines.get(routine_id)
        if descriptor is None:
            raise LookupError(f"Routine {routine_id} does not exist")
        return descriptor.func(db, *args)

    def list_routines(self) -> list[RoutineDescriptor]:
        """All registered routines ordered by qualified name."""
        return sorted(self._routines.values(), key=lambda d: (d.schema, d.name, d.id))

    def __len__(self) -> int:
        return len(self._routines)


# Process-wide catalog used by the API and CLI
_default_catalog = RoutineCatalog()


def get_routine_catalog() -> RoutineCatalog:
    """Get the process-wide routine catalog."""
    return _default_catalog


def routine(name: str, *parameter_types: str) -> Callable[[RoutineFunc], RoutineFunc]:
    """Register the decorated function in the process-wide catalog."""
    return _default_catalog.routine(name, *parameter_types)


def load_routine_modules(modules: Iterable[str]) -> int:
    """Import routine modules so their ``@routine`` decorators run.

    Returns:
        Number of routines in the process-wide catalog afterwards
    """
    for module in modules:
        importlib.import_module(module)
        logger.info(f"Loaded routine module {module}")
    return len(_default_catalog)
