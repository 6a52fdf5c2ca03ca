"""Demonstration routines in the ``demo`` schema.

Loaded by default through ``settings.routine_modules``. They only run
portable SELECTs so they work against any database the app is pointed at.
"""

from sqlalchemy import text
from sqlalchemy.orm import Session

from app.services.routines import routine


@routine("demo.server_time")
def server_time(db: Session):
    """Current database time."""
    return db.execute(text("SELECT CURRENT_TIMESTAMP")).scalar_one()


@routine("demo.echo", "text")
def echo(db: Session, value: str) -> str:
    return db.execute(text("SELECT :value"), {"value": value}).scalar_one()


@routine("demo.add", "integer", "integer")
def add(db: Session, a: int, b: int) -> int:
    return db.execute(text("SELECT :a + :b"), {"a": a, "b": b}).scalar_one()


@routine("demo.fanout", "integer")
def fanout(db: Session, count: int) -> int:
    """Run ``count`` nested echo calls, one statement each."""
    for i in range(count):
        echo(db, f"step {i + 1}")
    return count


@routine("demo.nothing")
def nothing(db: Session) -> None:
    """Runs a statement but returns no value."""
    db.execute(text("SELECT 1"))
    return None


@routine("demo.fail", "text")
def fail(db: Session, message: str):
    db.execute(text("SELECT 1"))
    raise RuntimeError(message)
