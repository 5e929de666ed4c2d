"""Aggregations over the ledger and the categorized expenses."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Mapping

import matplotlib
from matplotlib.figure import Figure
from sqlalchemy import Numeric, case, func, type_coerce
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import select

from ..infra.database import SessionFactory, storage_error
from ..infra.repositories.transaction import coerce_type
from ..models import Category, Expense, Transaction, TransactionType
from ..validation import require_date_range

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")


def _money(expression):
    """Coerce an aggregate so rows come back as cent-rounded ``Decimal``."""
    return type_coerce(expression, Numeric(14, 2))


@dataclass(frozen=True)
class CategorySummary:
    """Ledger total for one (type, category) pair."""

    type: TransactionType
    category: str
    total: Decimal


class ReportingService:
    """Read-only sums and breakdowns; every call opens its own session."""

    def __init__(self, session_factory: SessionFactory):
        self.session_factory = session_factory

    def total_by_type(self, txn_type: TransactionType | str) -> Decimal:
        """Sum of ledger amounts of ``txn_type``; ``0.00`` when there are none."""
        kind = coerce_type(txn_type)
        statement = select(_money(func.coalesce(func.sum(Transaction.amount), 0))).where(
            Transaction.type == kind
        )
        try:
            with self.session_factory() as session:
                total = session.exec(statement).one()
        except SQLAlchemyError as exc:
            raise storage_error(exc, f"summing {kind.value} transactions") from exc
        return ZERO if total is None else total

    def total_income(self) -> Decimal:
        return self.total_by_type(TransactionType.INCOME)

    def total_expenses(self) -> Decimal:
        return self.total_by_type(TransactionType.EXPENSE)

    def balance(self) -> Decimal:
        return self.total_income() - self.total_expenses()

    def ledger_summary(self) -> dict[str, Decimal]:
        income = self.total_income()
        expenses = self.total_expenses()
        return {"income": income, "expenses": expenses, "balance": income - expenses}

    def category_wise_summary(self) -> list[CategorySummary]:
        """Ledger totals grouped by type and category.

        INCOME rows come first, then EXPENSE; within a type the largest total leads.
        """
        total = _money(func.sum(Transaction.amount)).label("total")
        type_rank = case((Transaction.type == TransactionType.INCOME, 0), else_=1)
        statement = (
            select(Transaction.type, Transaction.category, total)
            .group_by(Transaction.type, Transaction.category)
            .order_by(type_rank, total.desc(), Transaction.category)
        )
        try:
            with self.session_factory() as session:
                rows = session.exec(statement).all()
        except SQLAlchemyError as exc:
            raise storage_error(exc, "summarizing transactions by category") from exc
        return [
            CategorySummary(type=coerce_type(kind), category=category, total=amount or ZERO)
            for kind, category, amount in rows
        ]

    def expenses_by_category(self, start_date: date, end_date: date) -> dict[str, Decimal]:
        """Expense totals per category name within ``[start_date, end_date]``.

        Keys are inserted largest total first.
        """
        start_date, end_date = require_date_range(start_date, end_date)
        if start_date > end_date:
            return {}
        total = _money(func.sum(Expense.amount)).label("total")
        statement = (
            select(Category.name, total)
            .select_from(Expense)
            .join(Category, Expense.category_id == Category.id)
            .where(Expense.date >= start_date)
            .where(Expense.date <= end_date)
            .group_by(Category.name)
            .order_by(total.desc(), Category.name)
        )
        try:
            with self.session_factory() as session:
                rows = session.exec(statement).all()
        except SQLAlchemyError as exc:
            raise storage_error(exc, "summarizing expenses by category") from exc
        return {name: amount or ZERO for name, amount in rows}


def build_spending_chart(totals: Mapping[str, Decimal], *, title: str = "Spending by Category") -> Figure:
    """Donut chart of an ``expenses_by_category`` mapping."""

    items = sorted(
        ((name, float(amount)) for name, amount in totals.items() if amount and amount > 0),
        key=lambda item: item[1],
        reverse=True,
    )
    fig = Figure(figsize=(9, 6))
    ax = fig.subplots()

    if not items:
        ax.text(0.5, 0.5, "No expense data", ha="center", va="center", fontsize=14, color="#666")
        ax.axis("off")
        return fig

    labels = [name for name, _ in items]
    sizes = [value for _, value in items]
    grand_total = sum(sizes)
    cmap = matplotlib.colormaps["tab20c"]
    colors = [cmap(i / max(len(sizes), 1)) for i in range(len(sizes))]

    wedges, _texts, autotexts = ax.pie(
        sizes,
        labels=None,
        autopct=lambda pct: f"{pct:.1f}%" if pct > 4 else "",
        wedgeprops=dict(width=0.45, edgecolor="white", linewidth=1.5),
        startangle=90,
        colors=colors,
        pctdistance=0.78,
    )
    for autotext in autotexts:
        autotext.set_fontsize(9)
        autotext.set_color("white")

    ax.text(0, 0.08, "Total", ha="center", va="center", fontsize=11, color="#666")
    ax.text(0, -0.08, f"{grand_total:,.2f}", ha="center", va="center", fontsize=16, fontweight="bold")
    ax.legend(
        wedges,
        [f"{label}: {size:,.2f} ({size / grand_total:.1%})" for label, size in zip(labels, sizes)],
        title="Categories",
        loc="center left",
        bbox_to_anchor=(1.02, 0.5),
        fontsize=9,
    )
    ax.axis("equal")
    ax.set_title(title, fontsize=14, fontweight="bold")
    return fig


def export_spending_png(totals: Mapping[str, Decimal], *, output_path: Path) -> Path:
    """Render the spending chart to PNG and return the path."""

    fig = build_spending_chart(totals)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(output_path, bbox_inches="tight", dpi=120)
    logger.debug("Spending chart written", extra={"path": str(output_path)})
    return output_path
