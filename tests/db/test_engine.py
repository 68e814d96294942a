"""Tests for engine initialization and the session_scope transaction boundary."""

from datetime import date

import pytest

from cashbook_kernel.db.engine import (
    create_tables,
    get_engine,
    get_session,
    init_engine_from_url,
    reset_engine,
    session_scope,
)
from cashbook_kernel.services.record_store import ALL_ENTRIES, SqlAlchemyRecordStore
from tests.builders import receipt


@pytest.fixture
def memory_engine():
    engine = init_engine_from_url("sqlite:///:memory:")
    create_tables()
    yield engine
    reset_engine()


class TestEngine:
    def test_uninitialized_engine_raises(self):
        reset_engine()
        with pytest.raises(RuntimeError):
            get_engine()
        with pytest.raises(RuntimeError):
            get_session()

    def test_sqlite_engine(self, memory_engine):
        assert get_engine() is memory_engine
        assert memory_engine.dialect.name == "sqlite"


class TestSessionScope:
    def test_commit_on_exit(self, memory_engine, clock):
        with session_scope() as session:
            SqlAlchemyRecordStore(session, clock).insert(receipt(date(2025, 4, 1), 100, "Fees"))

        with session_scope() as session:
            (stored,) = SqlAlchemyRecordStore(session, clock).query(ALL_ENTRIES)
        assert stored.category == "Fees"

    def test_rollback_on_error(self, memory_engine, clock, captured_logs):
        with pytest.raises(RuntimeError, match="abort"):
            with session_scope() as session:
                SqlAlchemyRecordStore(session, clock).insert(receipt(date(2025, 4, 1), 100, "Fees"))
                raise RuntimeError("abort")

        with session_scope() as session:
            assert SqlAlchemyRecordStore(session, clock).query(ALL_ENTRIES) == []
        assert any(r["message"] == "transaction_rolled_back" for r in captured_logs())
