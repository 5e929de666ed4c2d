"""SQLModel implementation of the category store."""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from ...constants.categories import CATEGORY_NAME_MAX_LENGTH
from ...errors import DuplicateName, NotFound, ReferentialViolation
from ...models.category import Category, utcnow
from ...models.expense import Expense
from ...validation import clean_name
from ..database import SessionFactory, is_foreign_key_violation, is_unique_violation, storage_error

logger = logging.getLogger(__name__)


class SQLModelCategoryRepository:
    """Category CRUD with uniqueness and referential protection."""

    def __init__(self, session_factory: SessionFactory):
        self.session_factory = session_factory

    def list_all(self) -> list[Category]:
        """List all categories ordered by name."""
        try:
            with self.session_factory() as session:
                statement = select(Category).order_by(Category.name)  # type: ignore[arg-type]
                rows = list(session.exec(statement).all())
                session.expunge_all()
                return rows
        except SQLAlchemyError:
            logger.error("Failed to list categories", exc_info=True)
            return []

    def get_by_id(self, category_id: int) -> Optional[Category]:
        try:
            with self.session_factory() as session:
                obj = session.get(Category, category_id)
                if obj:
                    session.expunge(obj)
                return obj
        except SQLAlchemyError as exc:
            raise storage_error(exc, "loading category") from exc

    def get_or_raise(self, category_id: int) -> Category:
        category = self.get_by_id(category_id)
        if category is None:
            raise NotFound("Category", category_id)
        return category

    def get_by_name(self, name: str) -> Optional[Category]:
        try:
            with self.session_factory() as session:
                obj = session.exec(select(Category).where(Category.name == name)).first()
                if obj:
                    session.expunge(obj)
                return obj
        except SQLAlchemyError as exc:
            raise storage_error(exc, "looking up category by name") from exc

    def create(self, name: str) -> Category:
        """Create a category; raises ``DuplicateName`` if the name is taken."""
        cleaned = clean_name(name, field="Category name", max_length=CATEGORY_NAME_MAX_LENGTH)
        try:
            with self.session_factory() as session:
                taken = session.exec(select(Category.id).where(Category.name == cleaned)).first()
                if taken is not None:
                    raise DuplicateName(cleaned)
                category = Category(name=cleaned)
                session.add(category)
                session.commit()
                session.refresh(category)
                session.expunge(category)
        except IntegrityError as exc:
            if is_unique_violation(exc):
                raise DuplicateName(cleaned) from exc
            raise storage_error(exc, "creating category") from exc
        except SQLAlchemyError as exc:
            raise storage_error(exc, "creating category") from exc

        logger.info("Category created", extra={"category_id": category.id, "category_name": cleaned})
        return category

    def update(self, category_id: int, new_name: str) -> bool:
        """Rename a category. Returns False when the id does not exist."""
        cleaned = clean_name(new_name, field="Category name", max_length=CATEGORY_NAME_MAX_LENGTH)
        try:
            with self.session_factory() as session:
                category = session.get(Category, category_id)
                if category is None:
                    return False
                clash = session.exec(
                    select(Category.id).where(Category.name == cleaned, Category.id != category_id)
                ).first()
                if clash is not None:
                    raise DuplicateName(cleaned)
                category.name = cleaned
                category.updated_at = utcnow()
                session.add(category)
                session.commit()
        except IntegrityError as exc:
            if is_unique_violation(exc):
                raise DuplicateName(cleaned) from exc
            raise storage_error(exc, "updating category") from exc
        except SQLAlchemyError as exc:
            raise storage_error(exc, "updating category") from exc
        return True

    def count_expenses(self, category_id: int) -> int:
        """Number of expenses referencing ``category_id``."""
        try:
            with self.session_factory() as session:
                return self._referencing_expenses(session, category_id)
        except SQLAlchemyError as exc:
            raise storage_error(exc, "counting expenses") from exc

    @staticmethod
    def _referencing_expenses(session: Session, category_id: int) -> int:
        return session.exec(
            select(func.count()).select_from(Expense).where(Expense.category_id == category_id)
        ).one()

    def delete(self, category_id: int) -> bool:
        """Delete a category that no expense references.

        The count is a fast path for a friendly error; the ``ON DELETE RESTRICT``
        foreign key still rejects the delete if an expense slips in between.
        """
        try:
            with self.session_factory() as session:
                in_use = self._referencing_expenses(session, category_id)
                if in_use:
                    raise ReferentialViolation(category_id, in_use)
                category = session.get(Category, category_id)
                if category is None:
                    return False
                session.delete(category)
                session.commit()
        except IntegrityError as exc:
            if is_foreign_key_violation(exc):
                raise ReferentialViolation(category_id) from exc
            raise storage_error(exc, "deleting category") from exc
        except SQLAlchemyError as exc:
            raise storage_error(exc, "deleting category") from exc

        logger.info("Category deleted", extra={"category_id": category_id})
        return True
