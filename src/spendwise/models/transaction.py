"""Flat income/expense ledger, independent of categories and expenses."""

from __future__ import annotations

import datetime as dt
from enum import Enum
from typing import ClassVar, Optional

from sqlalchemy import Column, Numeric, Text, func
from sqlalchemy import Enum as SAEnum
from sqlalchemy.types import TypeDecorator
from sqlmodel import Field, SQLModel

from ..constants.categories import LEDGER_CATEGORY_MAX_LENGTH
from .category import utcnow


class TransactionType(str, Enum):
    """Direction of a ledger entry."""

    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


class LedgerAmount(TypeDecorator):
    """DECIMAL(10,2) column read back as a float.

    SQLite keeps whole NUMERIC values as INTEGER, so the raw value is not always a float.
    """

    impl = Numeric(10, 2)
    cache_ok = True

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return float(value)


class Transaction(SQLModel, table=True):
    """A ledger entry with a free-text category."""

    __tablename__: ClassVar[str] = "transactions"

    id: Optional[int] = Field(default=None, primary_key=True)
    date: dt.date = Field(nullable=False, index=True)
    type: TransactionType = Field(
        sa_column=Column(
            SAEnum(TransactionType, name="transaction_type"),
            nullable=False,
            index=True,
        )
    )
    category: str = Field(nullable=False, max_length=LEDGER_CATEGORY_MAX_LENGTH)
    # Stored as DECIMAL(10,2); the legacy ledger API works in floats.
    amount: float = Field(sa_column=Column(LedgerAmount(), nullable=False))
    description: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    created_at: dt.datetime = Field(
        default_factory=utcnow,
        nullable=False,
        sa_column_kwargs={"server_default": func.now()},
    )
