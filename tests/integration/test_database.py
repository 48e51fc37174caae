"""Integration tests for engine construction and table creation."""

from sqlalchemy import inspect, text
from sqlalchemy.pool import NullPool

from src.database import init_db, make_engine


class TestSqliteEngine:
    async def test_foreign_keys_enforced_per_connection(self, tmp_path):
        engine = make_engine(f"sqlite+aiosqlite:///{tmp_path / 'progress.db'}")
        try:
            assert isinstance(engine.pool, NullPool)
            async with engine.connect() as conn:
                assert (await conn.execute(text("PRAGMA foreign_keys"))).scalar() == 1
        finally:
            await engine.dispose()

    async def test_init_db_creates_engine_tables(self, tmp_path):
        engine = make_engine(f"sqlite+aiosqlite:///{tmp_path / 'progress.db'}")
        try:
            await init_db(engine)
            async with engine.connect() as conn:
                tables = await conn.run_sync(lambda c: set(inspect(c).get_table_names()))
                edge_columns = await conn.run_sync(
                    lambda c: {col["name"] for col in inspect(c).get_columns("topic_prerequisites")}
                )
        finally:
            await engine.dispose()

        assert {
            "performance_records",
            "learner_skill_tiers",
            "topics",
            "topic_prerequisites",
            "learner_topic_progress",
            "event_logs",
        } <= tables
        assert edge_columns == {"id", "topic_id", "prerequisite_topic_id"}
