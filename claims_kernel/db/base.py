"""
Module: claims_kernel.db.base
Responsibility: Declarative base class for the record-store ORM models.
    Provides the UUID surrogate key convention and the type annotation map
    for consistent column types.
Architecture position: Kernel > DB.  ALL model files import from here.
    This module MUST NOT import from models/, services/, or outer layers.

Invariants enforced:
    - UUID surrogate keys: every row gets a uuid4 primary key.  Records are
      addressed by their business keys (IRN, worker id); the surrogate key
      never leaves the record store.
    - Decimal precision: Python Decimal maps to Numeric(38, 9).
      NEVER use float for monetary amounts.
"""

from datetime import datetime
from decimal import Decimal
from typing import ClassVar
from uuid import UUID as PyUUID, uuid4

from sqlalchemy import DateTime, Numeric, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator

SURROGATE_KEY = "id"


class UUIDString(TypeDecorator):
    """
    UUID type stored as String(36) for cross-database portability.

    Guarantees:
        - process_bind_param: UUID -> str on INSERT/UPDATE.
        - process_result_value: str -> UUID on SELECT.
    """

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
    """
    Declarative base for all record-store models.

    Guarantees:
        - id is always a uuid4-generated UUID stored as String(36).
        - Decimal maps to Numeric(38, 9).
        - datetime maps to DateTime(timezone=True).
    """

    type_annotation_map: ClassVar[dict] = {
        Decimal: Numeric(38, 9),
        datetime: DateTime(timezone=True),
        PyUUID: UUIDString(),
    }

    id: Mapped[PyUUID] = mapped_column(
        UUIDString(),
        primary_key=True,
        default=uuid4,
    )
