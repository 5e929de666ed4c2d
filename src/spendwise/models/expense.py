"""Categorized expense records."""

from __future__ import annotations

import datetime as dt
from decimal import Decimal
from typing import ClassVar, Optional

from sqlalchemy import Column, ForeignKey, Integer, Text, func
from sqlmodel import Field, SQLModel

from ..constants.categories import EXPENSE_NAME_MAX_LENGTH
from .category import utcnow


class Expense(SQLModel, table=True):
    """A single spend tied to exactly one category."""

    __tablename__: ClassVar[str] = "expenses"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(nullable=False, max_length=EXPENSE_NAME_MAX_LENGTH)
    category_id: int = Field(
        sa_column=Column(
            Integer,
            ForeignKey("categories.id", ondelete="RESTRICT"),
            nullable=False,
            index=True,
        )
    )
    amount: Decimal = Field(max_digits=10, decimal_places=2, nullable=False)
    description: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    date: dt.date = Field(nullable=False, index=True)
    created_at: dt.datetime = Field(
        default_factory=utcnow,
        nullable=False,
        sa_column_kwargs={"server_default": func.now()},
    )
    updated_at: dt.datetime = Field(
        default_factory=utcnow,
        nullable=False,
        sa_column_kwargs={"server_default": func.now(), "onupdate": utcnow},
    )


class ExpenseRead(SQLModel):
    """Expense joined with its category name for display."""

    id: int
    name: str
    category_id: int
    category_name: str
    amount: Decimal
    description: Optional[str] = None
    date: dt.date
