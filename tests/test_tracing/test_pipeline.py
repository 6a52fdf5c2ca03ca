"""Tests for the execution pipeline and its SQLAlchemy bridge."""

from sqlalchemy import create_engine, event, text
from sqlalchemy.ext.asyncio import create_async_engine

from app.services.tracing.pipeline import (
    PIPELINE_INFO_KEY,
    _do_execute,
    ExecutionPipeline,
    QueryDesc,
    install_pipeline,
    pipeline_for,
)


class TestExecutionPipeline:
    """Tests for hook dispatch without a database."""

    def test_standard_behaviour_when_slots_empty(self):
        pipeline = ExecutionPipeline()
        ran = []
        query = QueryDesc(source_text="SELECT 1", runner=lambda: ran.append(True))

        pipeline.execute(query)

        assert query.started_at is not None
        assert query.executed is True
        assert ran == [True]

    def test_installed_hook_replaces_standard_behaviour(self):
        """A hook that does not delegate stops the standard step."""
        pipeline = ExecutionPipeline()
        pipeline.run_hook = lambda query: None
        query = QueryDesc(source_text="SELECT 1")

        pipeline.execute(query)

        assert query.started_at is not None
        assert query.executed is False


class TestSqlAlchemyBridge:
    """Tests for install_pipeline and pipeline_for."""

    def test_statements_run_normally_without_pipeline(self, sync_engine):
        with sync_engine.connect() as conn:
            assert PIPELINE_INFO_KEY not in conn.info
            assert conn.execute(text("SELECT 41 + 1")).scalar_one() == 42

    def test_statements_pass_through_connection_hooks(self, sync_engine):
        seen = []
        with sync_engine.connect() as conn:
            pipeline = pipeline_for(conn)

            def start(query):
                seen.append(query.source_text)
                pipeline.standard_start(query)

            pipeline.start_hook = start
            assert conn.execute(text("SELECT 2")).scalar_one() == 2
            pipeline.start_hook = None

        assert seen == ["SELECT 2"]

    def test_pipeline_is_created_once_per_connection(self, sync_engine):
        with sync_engine.connect() as conn:
            assert pipeline_for(conn) is pipeline_for(conn)

    def test_other_connections_have_their_own_pipeline(self, tmp_path):
        engine = create_engine(f"sqlite:///{tmp_path / 'bridge.db'}")
        install_pipeline(engine)
        try:
            with engine.connect() as first, engine.connect() as second:
                assert pipeline_for(first) is not pipeline_for(second)
        finally:
            engine.dispose()

    def test_install_is_idempotent(self, sync_engine):
        install_pipeline(sync_engine)
        install_pipeline(sync_engine)

        seen = []
        with sync_engine.connect() as conn:
            pipeline = pipeline_for(conn)
            pipeline.run_hook = lambda query: (seen.append(query.source_text), pipeline.standard_run(query))
            conn.execute(text("SELECT 1"))
            pipeline.run_hook = None

        assert seen == ["SELECT 1"]

    def test_accepts_async_engine(self):
        engine = create_async_engine("sqlite+aiosqlite://")
        install_pipeline(engine)

        assert event.contains(engine.sync_engine, "do_execute", _do_execute)

    def test_checkin_releases_the_pipeline(self, tmp_path):
        engine = create_engine(f"sqlite:///{tmp_path / 'release.db'}")
        install_pipeline(engine)
        released = []
        try:
            with engine.connect() as conn:
                pipeline = pipeline_for(conn)
                pipeline.on_release(released.append)
                assert released == []
            assert released == [pipeline]

            pipeline.remove_release_listener(released.append)
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            assert released == [pipeline]
        finally:
            engine.dispose()
