"""
Default expense categories and ledger transaction types.

The category list is seeded into the ``categories`` table on startup; the ledger
types mirror the ``transactions.type`` column values.
"""

DEFAULT_CATEGORIES = [
    "Food & Dining",
    "Shopping",
    "Transportation",
    "Bills & Utilities",
    "Housing",
    "Entertainment",
    "Healthcare",
    "Education",
    "Gifts & Donations",
    "Travel",
    "Personal Care",
    "Pets",
    "Other",
]

# Column widths from the schema contract
CATEGORY_NAME_MAX_LENGTH = 50
EXPENSE_NAME_MAX_LENGTH = 100
LEDGER_CATEGORY_MAX_LENGTH = 50

TRANSACTION_TYPES = ["INCOME", "EXPENSE"]
