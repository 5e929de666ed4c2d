"""Guards that reject malformed values before they reach the database."""

from __future__ import annotations

import math
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from .errors import ValidationFailure

CENTS = Decimal("0.01")
# DECIMAL(10,2) upper bound
MAX_AMOUNT = Decimal("99999999.99")


def clean_name(value: object, *, field: str, max_length: int) -> str:
    """Return a stripped, non-empty name no longer than ``max_length``."""

    if not isinstance(value, str):
        raise ValidationFailure(f"{field} must be a string")
    cleaned = value.strip()
    if not cleaned:
        raise ValidationFailure(f"{field} cannot be empty")
    if len(cleaned) > max_length:
        raise ValidationFailure(f"{field} must be at most {max_length} characters")
    return cleaned


def to_money(value: object, *, field: str = "amount", allow_zero: bool = False) -> Decimal:
    """Convert ``value`` to a positive Decimal rounded to cents.

    Floats go through ``str`` so ``12.5`` becomes ``Decimal("12.50")`` rather than
    its binary expansion.
    """

    if isinstance(value, bool) or value is None:
        raise ValidationFailure(f"{field} is required")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise ValidationFailure(f"{field} must be a number") from exc
    if not amount.is_finite():
        raise ValidationFailure(f"{field} must be a finite number")
    amount = amount.quantize(CENTS, rounding=ROUND_HALF_UP)
    if amount < 0 or (amount == 0 and not allow_zero):
        raise ValidationFailure(f"{field} must be greater than zero")
    if amount > MAX_AMOUNT:
        raise ValidationFailure(f"{field} exceeds {MAX_AMOUNT}")
    return amount


def to_ledger_amount(value: object) -> float:
    """Validate a ledger amount; any finite float that fits DECIMAL(10,2) is accepted."""

    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        raise ValidationFailure("amount must be a number")
    number = float(value)
    if math.isnan(number) or math.isinf(number):
        raise ValidationFailure("amount must be a finite number")
    if abs(number) > float(MAX_AMOUNT):
        raise ValidationFailure(f"amount exceeds {MAX_AMOUNT}")
    return number


def require_date(value: object, *, field: str = "date") -> date:
    if isinstance(value, datetime):
        return value.date()
    if not isinstance(value, date):
        raise ValidationFailure(f"{field} must be a date")
    return value


def require_date_range(start: object, end: object) -> tuple[date, date]:
    """Validate an inclusive ``(start, end)`` pair.

    An inverted pair is allowed; it simply matches no rows.
    """

    return require_date(start, field="start"), require_date(end, field="end")
