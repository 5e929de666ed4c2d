"""Ledger store: free-text categories, type discriminator, ordering."""

from __future__ import annotations

from datetime import date

import pytest
from sqlalchemy.exc import OperationalError

from spendwise.errors import ConnectionFailure, NotFound, ValidationFailure
from spendwise.infra.repositories import SQLModelTransactionRepository
from spendwise.models import Transaction, TransactionType


def test_create_returns_true_and_assigns_id(transaction_repo):
    transaction = Transaction(
        date=date(2024, 1, 1),
        type=TransactionType.INCOME,
        category="Salary",
        amount=1000.0,
        description="January",
    )

    assert transaction_repo.create(transaction) is True
    assert transaction.id is not None

    fetched = transaction_repo.get_by_id(transaction.id)
    assert fetched.type is TransactionType.INCOME
    assert fetched.category == "Salary"
    assert fetched.amount == pytest.approx(1000.0)
    assert isinstance(fetched.amount, float)


def test_category_is_free_text(transaction_factory, category_repo):
    created = transaction_factory(42.0, category="Not a real category")
    assert created.id is not None
    assert category_repo.get_by_name("Not a real category") is None


def test_type_accepts_names(transaction_repo):
    transaction = Transaction(date=date(2024, 1, 1), type="expense", category="Rent", amount=900.0)
    assert transaction_repo.create(transaction) is True
    assert transaction_repo.get_by_id(transaction.id).type is TransactionType.EXPENSE


def test_invalid_type_rejected(transaction_repo):
    transaction = Transaction(date=date(2024, 1, 1), type="TRANSFER", category="X", amount=1.0)
    with pytest.raises(ValidationFailure):
        transaction_repo.create(transaction)
    assert transaction_repo.list_all() == []


@pytest.mark.parametrize("amount", [float("nan"), float("inf"), float("-inf"), "12", 1e9, -1e9])
def test_invalid_amounts_rejected(transaction_repo, amount):
    transaction = Transaction(
        date=date(2024, 1, 1), type=TransactionType.EXPENSE, category="X", amount=amount
    )
    with pytest.raises(ValidationFailure):
        transaction_repo.create(transaction)


def test_duplicates_are_allowed(transaction_factory, transaction_repo):
    transaction_factory(10.0, category="Coffee")
    transaction_factory(10.0, category="Coffee")
    assert len(transaction_repo.list_all()) == 2


def test_list_orders_by_date_desc(transaction_factory, transaction_repo):
    transaction_factory(1.0, occurred_on=date(2024, 1, 3))
    transaction_factory(2.0, occurred_on=date(2024, 1, 9))
    transaction_factory(3.0, occurred_on=date(2024, 1, 1))

    assert [t.date for t in transaction_repo.list_all()] == [
        date(2024, 1, 9),
        date(2024, 1, 3),
        date(2024, 1, 1),
    ]


def test_date_range_is_inclusive(transaction_factory, transaction_repo):
    for day in (1, 10, 20, 21):
        transaction_factory(float(day), occurred_on=date(2024, 5, day))

    rows = transaction_repo.filter_by_date_range(date(2024, 5, 10), date(2024, 5, 20))

    assert [t.date.day for t in rows] == [20, 10]


def test_update_and_delete(transaction_factory, transaction_repo):
    created = transaction_factory(20.0, category="Books")

    created.amount = 25.5
    created.category = "Education"
    assert transaction_repo.update(created) is True
    fetched = transaction_repo.get_by_id(created.id)
    assert fetched.amount == pytest.approx(25.5)
    assert fetched.category == "Education"

    assert transaction_repo.delete(created.id) is True
    assert transaction_repo.get_by_id(created.id) is None
    assert transaction_repo.delete(created.id) is False
    with pytest.raises(NotFound):
        transaction_repo.get_or_raise(created.id)


def test_update_missing_returns_false(transaction_repo):
    ghost = Transaction(id=999, date=date(2024, 1, 1), type=TransactionType.INCOME, category="X", amount=1.0)
    assert transaction_repo.update(ghost) is False


def test_whole_amounts_read_back_as_float(transaction_factory, transaction_repo):
    created = transaction_factory(1000.0, TransactionType.INCOME, category="Salary")

    fetched = transaction_repo.get_by_id(created.id)
    listed = transaction_repo.list_all()[0]

    assert isinstance(fetched.amount, float)
    assert isinstance(listed.amount, float)
    assert listed.amount == 1000.0


def test_negative_amounts_are_accepted(transaction_factory, transaction_repo):
    created = transaction_factory(-5.0, category="Refund")

    assert transaction_repo.get_by_id(created.id).amount == pytest.approx(-5.0)


def test_same_day_entries_newest_id_first(transaction_factory, transaction_repo):
    first = transaction_factory(1.0, occurred_on=date(2024, 3, 5))
    second = transaction_factory(2.0, occurred_on=date(2024, 3, 5))
    third = transaction_factory(3.0, occurred_on=date(2024, 3, 5))
    expected = [third.id, second.id, first.id]

    assert [t.id for t in transaction_repo.list_all()] == expected
    rows = transaction_repo.filter_by_date_range(date(2024, 3, 5), date(2024, 3, 5))
    assert [t.id for t in rows] == expected


def test_inverted_range_matches_nothing(transaction_factory, transaction_repo):
    transaction_factory(1.0, occurred_on=date(2024, 2, 1))
    transaction_factory(2.0, occurred_on=date(2024, 2, 2))

    assert transaction_repo.filter_by_date_range(date(2024, 2, 2), date(2024, 2, 1)) == []


def test_storage_errors(failing_session_factory):
    repo = SQLModelTransactionRepository(
        failing_session_factory(OperationalError("SELECT", {}, Exception("disk I/O error")))
    )
    assert repo.list_all() == []
    assert repo.filter_by_date_range(date(2024, 1, 1), date(2024, 1, 31)) == []
    with pytest.raises(ConnectionFailure):
        repo.get_by_id(1)
