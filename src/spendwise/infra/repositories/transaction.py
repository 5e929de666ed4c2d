"""SQLModel implementation of the flat income/expense ledger."""

from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import select

from ...constants.categories import LEDGER_CATEGORY_MAX_LENGTH
from ...errors import NotFound, ValidationFailure
from ...models.transaction import Transaction, TransactionType
from ...validation import clean_name, require_date, require_date_range, to_ledger_amount
from ..database import SessionFactory, storage_error

logger = logging.getLogger(__name__)


def coerce_type(value: object) -> TransactionType:
    """Accept a ``TransactionType`` or its name, case-insensitively."""
    if isinstance(value, TransactionType):
        return value
    try:
        return TransactionType(str(value).strip().upper())
    except ValueError as exc:
        raise ValidationFailure(f"Unknown transaction type: {value!r}") from exc


class SQLModelTransactionRepository:
    """Ledger entries have no foreign keys and no uniqueness rules."""

    def __init__(self, session_factory: SessionFactory):
        self.session_factory = session_factory

    def get_by_id(self, transaction_id: int) -> Optional[Transaction]:
        try:
            with self.session_factory() as session:
                obj = session.get(Transaction, transaction_id)
                if obj:
                    session.expunge(obj)
                return obj
        except SQLAlchemyError as exc:
            raise storage_error(exc, "loading transaction") from exc

    def get_or_raise(self, transaction_id: int) -> Transaction:
        transaction = self.get_by_id(transaction_id)
        if transaction is None:
            raise NotFound("Transaction", transaction_id)
        return transaction

    def list_all(self) -> list[Transaction]:
        """List all ledger entries, newest first."""
        try:
            with self.session_factory() as session:
                statement = select(Transaction).order_by(
                    Transaction.date.desc(), Transaction.id.desc()  # type: ignore[union-attr]
                )
                rows = list(session.exec(statement).all())
                session.expunge_all()
                return rows
        except SQLAlchemyError:
            logger.error("Failed to list transactions", exc_info=True)
            return []

    def filter_by_date_range(self, start_date: date, end_date: date) -> list[Transaction]:
        """Entries dated within ``[start_date, end_date]``, newest first."""
        start_date, end_date = require_date_range(start_date, end_date)
        if start_date > end_date:
            return []
        try:
            with self.session_factory() as session:
                statement = (
                    select(Transaction)
                    .where(Transaction.date >= start_date)
                    .where(Transaction.date <= end_date)
                    .order_by(Transaction.date.desc(), Transaction.id.desc())  # type: ignore[union-attr]
                )
                rows = list(session.exec(statement).all())
                session.expunge_all()
                return rows
        except SQLAlchemyError:
            logger.error(
                "Failed to list transactions by date range",
                extra={"start": start_date, "end": end_date},
                exc_info=True,
            )
            return []

    def create(self, transaction: Transaction) -> bool:
        """Append a ledger entry; ``transaction.id`` is filled in on success."""
        values = self._validated(transaction)
        try:
            with self.session_factory() as session:
                row = Transaction(**values)
                session.add(row)
                session.commit()
                session.refresh(row)
                transaction.id = row.id
        except SQLAlchemyError as exc:
            raise storage_error(exc, "adding transaction") from exc

        logger.info(
            "Transaction added",
            extra={"transaction_id": transaction.id, "type": values["type"].value},
        )
        return True

    def update(self, transaction: Transaction) -> bool:
        """Overwrite an existing entry. Returns False when its id is unknown."""
        if transaction.id is None:
            raise ValidationFailure("Transaction id is required for update")
        values = self._validated(transaction)
        try:
            with self.session_factory() as session:
                row = session.get(Transaction, transaction.id)
                if row is None:
                    return False
                for key, value in values.items():
                    setattr(row, key, value)
                session.add(row)
                session.commit()
        except SQLAlchemyError as exc:
            raise storage_error(exc, "updating transaction") from exc
        return True

    def delete(self, transaction_id: int) -> bool:
        try:
            with self.session_factory() as session:
                row = session.get(Transaction, transaction_id)
                if row is None:
                    return False
                session.delete(row)
                session.commit()
        except SQLAlchemyError as exc:
            raise storage_error(exc, "deleting transaction") from exc
        logger.info("Transaction deleted", extra={"transaction_id": transaction_id})
        return True

    @staticmethod
    def _validated(transaction: Transaction) -> dict:
        description = transaction.description
        if description is not None and not isinstance(description, str):
            raise ValidationFailure("description must be a string")
        return {
            "date": require_date(transaction.date),
            "type": coerce_type(transaction.type),
            "category": clean_name(
                transaction.category, field="Category", max_length=LEDGER_CATEGORY_MAX_LENGTH
            ),
            "amount": to_ledger_amount(transaction.amount),
            "description": description,
        }
