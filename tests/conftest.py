"""Pytest configuration and fixtures."""

from datetime import datetime, timedelta, timezone
from typing import Iterator

import pytest
from sqlalchemy import Engine, create_engine, text
from sqlalchemy.orm import Session

from app.services.routines import RoutineCatalog
from app.services.tracing import InvocationEngine, install_pipeline
from app.services.type_catalog import TypeCatalog, build_type_catalog

FIXED_START = datetime(2026, 1, 31, 9, 15, 0, tzinfo=timezone.utc)


class StepClock:
    """Deterministic clock: every call is one second after the previous one."""

    def __init__(self, start: datetime = FIXED_START):
        self.current = start - timedelta(seconds=1)

    def __call__(self) -> datetime:
        self.current += timedelta(seconds=1)
        return self.current


@pytest.fixture
def clock() -> StepClock:
    return StepClock()


@pytest.fixture
def sync_engine() -> Iterator[Engine]:
    """In-memory SQLite engine with the execution pipeline installed."""
    engine = create_engine("sqlite://")
    install_pipeline(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(sync_engine: Engine) -> Iterator[Session]:
    """Database session, rolled back after each test."""
    with Session(sync_engine) as session:
        yield session
        session.rollback()


@pytest.fixture
def types() -> TypeCatalog:
    return build_type_catalog()


@pytest.fixture
def catalog() -> RoutineCatalog:
    """Catalog with routines covering every tracing outcome."""
    routines = RoutineCatalog()

    @routines.routine("public.single")
    def single(db):
        return db.execute(text("SELECT 1")).scalar_one()

    @routines.routine("app.two_steps")
    def two_steps(db):
        db.execute(text("SELECT 'first'"))
        db.execute(text("SELECT 'second'"))
        return "done"

    @routines.routine("app.pair", "integer", "integer")
    def pair(db, a, b):
        return a + b

    @routines.routine("app.greet", "text")
    def greet(db, name):
        return f"hello {name}"

    @routines.routine("app.outer")
    def outer(db):
        db.execute(text("SELECT 'outer'"))
        return two_steps(db)

    @routines.routine("app.returns_null")
    def returns_null(db):
        db.execute(text("SELECT 1"))
        return None

    @routines.routine("app.explodes")
    def explodes(db):
        db.execute(text("SELECT 1"))
        raise RuntimeError("boom")

    @routines.routine("app.takes_record", "record")
    def takes_record(db, value):
        return value

    @routines.routine("app.takes_mystery", "mystery")
    def takes_mystery(db, value):
        return value

    return routines


@pytest.fixture
def tracer(catalog: RoutineCatalog, types: TypeCatalog, clock: StepClock) -> InvocationEngine:
    return InvocationEngine(catalog, types, search_path=["public", "app"], clock=clock)
