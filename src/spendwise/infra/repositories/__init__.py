"""Concrete repository implementations using SQLModel."""

from .category import SQLModelCategoryRepository
from .expense import SQLModelExpenseRepository
from .transaction import SQLModelTransactionRepository

__all__ = [
    "SQLModelCategoryRepository",
    "SQLModelExpenseRepository",
    "SQLModelTransactionRepository",
]
