"""
Pytest fixtures for the cash book test suite.

Provides:
- In-memory SQLite sessions (fresh schema per test)
- A fixed clock and the record store / services built on it
- Structured log capture
"""

import json
import logging
from datetime import UTC, datetime
from io import StringIO

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from cashbook_kernel.db.base import Base
from cashbook_kernel.domain.clock import FixedClock
from cashbook_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from cashbook_kernel.services.bulk_import_service import BulkImportService
from cashbook_kernel.services.entry_service import EntryService
from cashbook_kernel.services.record_store import SqlAlchemyRecordStore

import cashbook_kernel.models  # noqa: F401  (registers CashEntryModel on Base.metadata)

START_TIME = datetime(2025, 4, 1, 9, 0, tzinfo=UTC)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture cashbook logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, entry_service):
            entry_service.create_entry(draft)
            logs = captured_logs()
            assert any(r["message"] == "entry_created" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("cashbook")
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture
def engine():
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(START_TIME)


@pytest.fixture
def store(session, clock) -> SqlAlchemyRecordStore:
    return SqlAlchemyRecordStore(session, clock)


@pytest.fixture
def entry_service(store, clock) -> EntryService:
    return EntryService(store, clock)


@pytest.fixture
def bulk_import_service(store) -> BulkImportService:
    return BulkImportService(store)

