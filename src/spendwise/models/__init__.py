"""SQLModel table exports."""

from .category import Category
from .expense import Expense, ExpenseRead
from .transaction import Transaction, TransactionType

__all__ = [
    "Category",
    "Expense",
    "ExpenseRead",
    "Transaction",
    "TransactionType",
]
