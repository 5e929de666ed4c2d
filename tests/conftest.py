"""Pytest configuration and shared fixtures for spendwise tests.

Every test gets its own SQLite file with the schema initialized and the default
categories seeded, so nothing touches the real application database.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from spendwise.config import BaseConfig
from spendwise.infra.database import create_db_engine, create_session_factory
from spendwise.infra.repositories import (
    SQLModelCategoryRepository,
    SQLModelExpenseRepository,
    SQLModelTransactionRepository,
)
from spendwise.infra.schema import SchemaManager
from spendwise.models import Expense, Transaction, TransactionType
from spendwise.services.reports import ReportingService

# =============================================================================
# Configuration & Database Fixtures
# =============================================================================


@pytest.fixture
def config(tmp_path, monkeypatch) -> BaseConfig:
    """Configuration pointing at a throwaway data directory."""

    monkeypatch.setenv("SPENDWISE_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.delenv("SPENDWISE_DATABASE_URL", raising=False)
    monkeypatch.delenv("SPENDWISE_RESET_ON_START", raising=False)
    monkeypatch.setenv("SPENDWISE_DEV_MODE", "true")
    return BaseConfig()


@pytest.fixture
def db_engine(config):
    """Engine bound to a fresh SQLite file with the schema initialized.

    Yields:
        Engine: SQLAlchemy engine with foreign keys enforced
    """
    engine = create_db_engine(config)
    SchemaManager(engine).initialize()

    yield engine

    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    """Session factory matching what the stores receive in production."""

    return create_session_factory(db_engine)


@pytest.fixture
def category_repo(session_factory) -> SQLModelCategoryRepository:
    return SQLModelCategoryRepository(session_factory)


@pytest.fixture
def expense_repo(session_factory) -> SQLModelExpenseRepository:
    return SQLModelExpenseRepository(session_factory)


@pytest.fixture
def transaction_repo(session_factory) -> SQLModelTransactionRepository:
    return SQLModelTransactionRepository(session_factory)


@pytest.fixture
def reports(session_factory) -> ReportingService:
    return ReportingService(session_factory)


# =============================================================================
# Test Data Factories
# =============================================================================


@pytest.fixture
def expense_factory(expense_repo, category_repo):
    """Factory persisting expenses through the store.

    Returns:
        Callable: Function that creates an expense and returns its read model
    """

    def _create_expense(
        name: str = "Lunch",
        category: str = "Food & Dining",
        amount: str | Decimal = "12.50",
        spent_on: date = date(2024, 1, 10),
        description: str | None = None,
    ):
        target = category_repo.get_by_name(category)
        assert target is not None, f"category {category!r} should exist"
        return expense_repo.create(
            Expense(
                name=name,
                category_id=target.id,
                amount=Decimal(amount),
                description=description,
                date=spent_on,
            )
        )

    return _create_expense


@pytest.fixture
def transaction_factory(transaction_repo):
    """Factory appending ledger entries.

    Returns:
        Callable: Function that creates a transaction and returns it with its id
    """

    def _create_transaction(
        amount: float,
        txn_type: TransactionType = TransactionType.EXPENSE,
        category: str = "General",
        occurred_on: date = date(2024, 1, 1),
        description: str | None = None,
    ) -> Transaction:
        transaction = Transaction(
            date=occurred_on,
            type=txn_type,
            category=category,
            amount=amount,
            description=description,
        )
        assert transaction_repo.create(transaction) is True
        return transaction

    return _create_transaction


@pytest.fixture
def failing_session_factory():
    """Build session factories whose sessions blow up on entry, simulating an outage."""

    def _build(exc: Exception):
        class _Broken:
            def __enter__(self):
                raise exc

            def __exit__(self, *args):
                return False

        return lambda: _Broken()

    return _build
