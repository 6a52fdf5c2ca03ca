#!/usr/bin/env python3
"""Trace a routine from the command line.

Invokes the routine named in a call expression against the configured
database and prints the trace report. Changes made by the routine are rolled
back unless --commit is given.

Usage:
    python scripts/trace_routine.py "demo.add(1, 2)"
    python scripts/trace_routine.py --module myapp.routines "billing.close_invoice(42, true)"
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.config import get_settings
from app.services.routines import get_routine_catalog, load_routine_modules
from app.services.tracing import InvocationEngine, TraceError, install_pipeline
from app.services.type_catalog import get_type_catalog

settings = get_settings()


async def trace_routine(call: str, database_url: str, modules: list[str], commit: bool) -> int:
    """Run one trace and print the outcome. Returns the exit status."""
    engine = create_async_engine(database_url, echo=False)
    install_pipeline(engine)
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    load_routine_modules(modules)
    tracer = InvocationEngine(
        get_routine_catalog(),
        get_type_catalog(),
        search_path=settings.routine_search_path,
        unknown_label=settings.trace_unknown_label,
    )

    try:
        async with session_factory() as session:
            try:
                report = await session.run_sync(tracer.trace_call, call)
            except TraceError as e:
                await session.rollback()
                print(f"ERROR [{e.kind}]: {e.message}", file=sys.stderr)
                return 1

            if commit:
                await session.commit()
            else:
                await session.rollback()

        print(report, end="")
        return 0
    finally:
        await engine.dispose()


def main() -> int:
    parser = argparse.ArgumentParser(description="Invoke a routine and print its statement trace")
    parser.add_argument("call", help='Call expression, e.g. "demo.add(1, 2)"')
    parser.add_argument(
        "--database-url",
        default=settings.async_database_url,
        help="SQLAlchemy async database URL (default: from settings)",
    )
    parser.add_argument(
        "--module",
        action="append",
        default=[],
        help="Extra routine module to load (repeatable)",
    )
    parser.add_argument("--commit", action="store_true", help="Commit the routine's changes")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log each tracing stage")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    modules = [*settings.routine_modules, *args.module]
    return asyncio.run(trace_routine(args.call, args.database_url, modules, args.commit))


if __name__ == "__main__":
    sys.exit(main())
