"""Database layer: declarative base, engine/session management, column types."""

from cashbook_kernel.db.base import Base, TimestampedBase, UUIDString, ensure_utc
from cashbook_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_engine,
    get_session,
    get_session_factory,
    init_engine_from_settings,
    init_engine_from_url,
    reset_engine,
    session_scope,
)
from cashbook_kernel.db.types import ZERO, format_money, round_money, to_decimal

__all__ = [
    "Base",
    "TimestampedBase",
    "UUIDString",
    "ensure_utc",
    "create_tables",
    "drop_tables",
    "get_engine",
    "get_session",
    "get_session_factory",
    "init_engine_from_settings",
    "init_engine_from_url",
    "reset_engine",
    "session_scope",
    "ZERO",
    "format_money",
    "round_money",
    "to_decimal",
]
