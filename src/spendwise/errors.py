"""Typed failures raised by the spendwise persistence and reporting layer."""

from __future__ import annotations


class SpendwiseError(Exception):
    """Base class for every failure surfaced to callers."""


class StorageError(SpendwiseError):
    """Unexpected database failure while writing or aggregating."""


class ConnectionFailure(StorageError):
    """The underlying store could not be reached."""


class InitializationFailure(SpendwiseError):
    """Schema creation or default data seeding failed; startup must abort."""


class ValidationFailure(SpendwiseError, ValueError):
    """Caller supplied malformed data."""


class DuplicateName(SpendwiseError):
    """A category with the same name already exists."""

    def __init__(self, name: str):
        super().__init__(f"Category '{name}' already exists")
        self.name = name


class ForeignKeyViolation(SpendwiseError):
    """An expense references a category that does not exist."""

    def __init__(self, category_id: int | None):
        super().__init__(f"Category id {category_id} does not exist")
        self.category_id = category_id


class ReferentialViolation(SpendwiseError):
    """A category cannot be deleted while expenses still reference it."""

    def __init__(self, category_id: int, expense_count: int | None = None):
        if expense_count:
            message = (
                f"Cannot delete category {category_id}: "
                f"{expense_count} expense(s) are associated with it"
            )
        else:
            message = f"Cannot delete category {category_id}: expenses are associated with it"
        super().__init__(message)
        self.category_id = category_id
        self.expense_count = expense_count


class NotFound(SpendwiseError, LookupError):
    """Lookup by id found no row."""

    def __init__(self, entity: str, entity_id: int | None):
        super().__init__(f"{entity} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


__all__ = [
    "ConnectionFailure",
    "DuplicateName",
    "ForeignKeyViolation",
    "InitializationFailure",
    "NotFound",
    "ReferentialViolation",
    "SpendwiseError",
    "StorageError",
    "ValidationFailure",
]
