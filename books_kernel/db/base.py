"""
Module: books_kernel.db.base
Responsibility: Declarative base for the reference persistence adapter.
    Fixes the column conventions every ORM model shares: UUID keys stored
    as 36-character strings, Decimal amounts as Numeric(38, 9), and an
    audit mixin recording who wrote a row and when.
Architecture position: Kernel > DB.  Lowest import target of the db
    package; module ORM files (books_modules/*/orm.py) build on it.

Invariants enforced:
    - Every row has a uuid4 primary key.
    - No float columns: Decimal maps to Numeric(38, 9).
    - created_by_id is NOT NULL on every tracked table.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import ClassVar
from uuid import UUID, uuid4

from sqlalchemy import BigInteger, Date, DateTime, Numeric, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator


class UUIDString(TypeDecorator):
    """UUID stored as its canonical string so SQLite and PostgreSQL agree."""

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return None if value is None else str(value)

    def process_result_value(self, value, dialect):
        return None if value is None else UUID(value)


class Base(DeclarativeBase):
    type_annotation_map: ClassVar[dict] = {
        Decimal: Numeric(38, 9),
        datetime: DateTime(timezone=True),
        date: Date,
        UUID: UUIDString(),
        int: BigInteger,
    }

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)


class TrackedBase(Base):
    """
    Adds created/updated timestamps and actor ids.

    Timestamps come from the database clock; actor ids from the store that
    writes the row.
    """

    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(), onupdate=func.now(),
    )
    created_by_id: Mapped[UUID]
    updated_by_id: Mapped[UUID | None]
