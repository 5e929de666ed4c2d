"""SQLModel implementation of the expense store."""

from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from ...constants.categories import EXPENSE_NAME_MAX_LENGTH
from ...errors import ForeignKeyViolation, NotFound, ValidationFailure
from ...models.category import Category, utcnow
from ...models.expense import Expense, ExpenseRead
from ...validation import clean_name, require_date, require_date_range, to_money
from ..database import SessionFactory, is_foreign_key_violation, storage_error

logger = logging.getLogger(__name__)


def _joined_select():
    return select(Expense, Category.name).join(Category, Expense.category_id == Category.id)


def _to_read(expense: Expense, category_name: str) -> ExpenseRead:
    return ExpenseRead(
        id=expense.id,
        name=expense.name,
        category_id=expense.category_id,
        category_name=category_name,
        amount=expense.amount,
        description=expense.description,
        date=expense.date,
    )


class SQLModelExpenseRepository:
    """Expense CRUD; reads carry the category name."""

    def __init__(self, session_factory: SessionFactory):
        self.session_factory = session_factory

    def list_all(self) -> list[ExpenseRead]:
        """List every expense, newest first."""
        try:
            with self.session_factory() as session:
                statement = _joined_select().order_by(
                    Expense.date.desc(), Expense.id.desc()  # type: ignore[union-attr]
                )
                return [_to_read(exp, name) for exp, name in session.exec(statement).all()]
        except SQLAlchemyError:
            logger.error("Failed to list expenses", exc_info=True)
            return []

    def filter_by_date_range(self, start_date: date, end_date: date) -> list[ExpenseRead]:
        """Expenses dated within ``[start_date, end_date]``, newest first."""
        start_date, end_date = require_date_range(start_date, end_date)
        if start_date > end_date:
            return []
        try:
            with self.session_factory() as session:
                statement = (
                    _joined_select()
                    .where(Expense.date >= start_date)
                    .where(Expense.date <= end_date)
                    .order_by(Expense.date.desc(), Expense.id.desc())  # type: ignore[union-attr]
                )
                return [_to_read(exp, name) for exp, name in session.exec(statement).all()]
        except SQLAlchemyError:
            logger.error(
                "Failed to list expenses by date range",
                extra={"start": start_date, "end": end_date},
                exc_info=True,
            )
            return []

    def get_by_id(self, expense_id: int) -> Optional[ExpenseRead]:
        try:
            with self.session_factory() as session:
                row = session.exec(_joined_select().where(Expense.id == expense_id)).first()
        except SQLAlchemyError as exc:
            raise storage_error(exc, "loading expense") from exc
        if row is None:
            return None
        expense, category_name = row
        return _to_read(expense, category_name)

    def get_or_raise(self, expense_id: int) -> ExpenseRead:
        expense = self.get_by_id(expense_id)
        if expense is None:
            raise NotFound("Expense", expense_id)
        return expense

    def create(self, expense: Expense) -> ExpenseRead:
        """Persist a new expense; raises ``ForeignKeyViolation`` for unknown categories."""
        values = self._validated(expense)
        try:
            with self.session_factory() as session:
                category = self._require_category(session, values["category_id"])
                row = Expense(**values)
                session.add(row)
                session.commit()
                session.refresh(row)
                created = _to_read(row, category.name)
        except IntegrityError as exc:
            if is_foreign_key_violation(exc):
                raise ForeignKeyViolation(values["category_id"]) from exc
            raise storage_error(exc, "creating expense") from exc
        except SQLAlchemyError as exc:
            raise storage_error(exc, "creating expense") from exc

        expense.id = created.id
        logger.info(
            "Expense created",
            extra={"expense_id": created.id, "category_id": created.category_id},
        )
        return created

    def update(self, expense: Expense) -> bool:
        """Overwrite an existing expense. Returns False when its id is unknown."""
        if expense.id is None:
            raise ValidationFailure("Expense id is required for update")
        values = self._validated(expense)
        try:
            with self.session_factory() as session:
                row = session.get(Expense, expense.id)
                if row is None:
                    return False
                self._require_category(session, values["category_id"])
                for key, value in values.items():
                    setattr(row, key, value)
                row.updated_at = utcnow()
                session.add(row)
                session.commit()
        except IntegrityError as exc:
            if is_foreign_key_violation(exc):
                raise ForeignKeyViolation(values["category_id"]) from exc
            raise storage_error(exc, "updating expense") from exc
        except SQLAlchemyError as exc:
            raise storage_error(exc, "updating expense") from exc

        logger.debug("Expense updated", extra={"expense_id": expense.id})
        return True

    def delete(self, expense_id: int) -> bool:
        try:
            with self.session_factory() as session:
                row = session.get(Expense, expense_id)
                if row is None:
                    return False
                session.delete(row)
                session.commit()
        except SQLAlchemyError as exc:
            raise storage_error(exc, "deleting expense") from exc
        logger.info("Expense deleted", extra={"expense_id": expense_id})
        return True

    @staticmethod
    def _require_category(session: Session, category_id: int) -> Category:
        category = session.get(Category, category_id)
        if category is None:
            raise ForeignKeyViolation(category_id)
        return category

    @staticmethod
    def _validated(expense: Expense) -> dict:
        if not isinstance(expense.category_id, int) or isinstance(expense.category_id, bool):
            raise ValidationFailure("category_id must be an integer")
        description = expense.description
        if description is not None and not isinstance(description, str):
            raise ValidationFailure("description must be a string")
        return {
            "name": clean_name(expense.name, field="Expense name", max_length=EXPENSE_NAME_MAX_LENGTH),
            "category_id": expense.category_id,
            "amount": to_money(expense.amount),
            "description": description,
            "date": require_date(expense.date),
        }
