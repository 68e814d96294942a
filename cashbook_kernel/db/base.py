"""
Module: cashbook_kernel.db.base
Responsibility: Declarative base classes for the SQLAlchemy ORM models.
    Provides the UUID primary key convention, the type annotation map for
    consistent column types, and the TimestampedBase mixin.
Architecture position: Kernel > DB.  Lowest-level import target; MUST NOT
    import from models/, services/ or domain/.

Invariants enforced:
    - UUID primary keys, generated by uuid4, stored as String(36).
    - Decimal maps to Numeric(38, 9).  NEVER use float for money.
    - created_at / updated_at are timezone-aware.  SQLite drops the offset on
      read; ``ensure_utc`` restores it.
"""

from datetime import UTC, datetime
from decimal import Decimal
from typing import ClassVar
from uuid import UUID as PyUUID, uuid4

from sqlalchemy import BigInteger, DateTime, Numeric, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator


class UUIDString(TypeDecorator):
    """UUID stored as String(36) for cross-database portability."""

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None:
            return str(value)
        return None

    def process_result_value(self, value, dialect):
        if value is not None:
            return PyUUID(value)
        return None


class Base(DeclarativeBase):
    """Declarative base for all cash book models."""

    type_annotation_map: ClassVar[dict] = {
        Decimal: Numeric(38, 9),
        datetime: DateTime(timezone=True),
        PyUUID: UUIDString(),
        int: BigInteger,
    }

    id: Mapped[PyUUID] = mapped_column(
        UUIDString(),
        primary_key=True,
        default=uuid4,
    )


class TimestampedBase(Base):
    """
    Abstract base with store-assigned creation and modification timestamps.

    The record store sets both columns from its injected clock so that the
    duplicate window and the creation-order tie-break compare against the
    same time source.  The server defaults only cover rows written outside
    the store.
    """

    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )


def ensure_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive timestamps read back from backends without offsets."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


UUID = PyUUID
