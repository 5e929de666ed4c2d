"""CSV export helpers for expenses and ledger entries."""

from __future__ import annotations

import csv
import logging
from datetime import date
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Iterable

from ..models.expense import ExpenseRead
from ..models.transaction import Transaction

logger = logging.getLogger(__name__)

EXPENSE_HEADERS = ["id", "date", "name", "category_id", "category_name", "amount", "description"]
TRANSACTION_HEADERS = ["id", "date", "type", "category", "amount", "description"]


def _serialize_value(value) -> str:
    if value is None:
        return ""
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Decimal):
        return f"{value:.2f}"
    if isinstance(value, float):
        return f"{value:.2f}"
    return str(value)


def _write_rows(output_path: Path, headers: list[str], records: Iterable[object]) -> int:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    count = 0
    with output_path.open("w", newline="", encoding="utf-8") as fh:
        writer = csv.DictWriter(fh, fieldnames=headers, quoting=csv.QUOTE_MINIMAL)
        writer.writeheader()
        for record in records:
            writer.writerow({h: _serialize_value(getattr(record, h, None)) for h in headers})
            count += 1
    return count


def export_expenses_csv(*, expenses: Iterable[ExpenseRead], output_path: Path) -> Path:
    """Write expenses to CSV; columns follow ``EXPENSE_HEADERS``."""

    count = _write_rows(output_path, EXPENSE_HEADERS, expenses)
    logger.info("Expenses exported", extra={"path": str(output_path), "rows": count})
    return output_path


def export_transactions_csv(*, transactions: Iterable[Transaction], output_path: Path) -> Path:
    """Write ledger entries to CSV; columns follow ``TRANSACTION_HEADERS``."""

    count = _write_rows(output_path, TRANSACTION_HEADERS, transactions)
    logger.info("Transactions exported", extra={"path": str(output_path), "rows": count})
    return output_path
