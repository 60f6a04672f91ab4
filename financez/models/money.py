"""
Money handling.

Every monetary value in FinanceZ is a Decimal quantized to cents.
The backend stores plain numeric columns, so values are converted at
the edges: incoming numbers go through to_money(), outgoing ones
through to_wire(). Sums and percentages are computed on Decimals and
rounded with round_cents().
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Annotated, Any, Optional

from pydantic import BeforeValidator

CENT = Decimal("0.01")
ZERO = Decimal("0.00")

# One quadrillion; sums of many such amounts still fit the default context
MAX_AMOUNT = Decimal("1e15")


def to_money(value: Any) -> Decimal:
    """
    Convert a backend or user value to a cent-quantized Decimal.

    Floats are converted through their shortest repr so 0.1 becomes
    Decimal("0.10") rather than its binary expansion.

    Raises:
        ValueError: If the value is not a finite number or is out of range
    """
    if value is None:
        raise ValueError("Amount is required")
    if isinstance(value, bool):
        raise ValueError("Amount must be a number")
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float, str)):
        try:
            amount = Decimal(str(value).strip())
        except InvalidOperation:
            raise ValueError(f"Not a valid amount: {value!r}")
    else:
        raise ValueError(f"Not a valid amount: {value!r}")

    if not amount.is_finite():
        raise ValueError(f"Amount must be finite: {value!r}")
    if abs(amount) >= MAX_AMOUNT:
        raise ValueError(f"Amount is out of range: {value!r}")

    try:
        return round_cents(amount)
    except InvalidOperation:
        raise ValueError(f"Not a valid amount: {value!r}")


def round_cents(amount: Decimal) -> Decimal:
    """Quantize a computed Decimal (a sum or a product) to cents."""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def parse_amount(text: Optional[str]) -> Optional[Decimal]:
    """
    Parse user-typed text into an amount.

    Accepts an optional currency symbol and thousands separators.
    Returns None if the text is not a number.
    """
    if text is None:
        return None
    cleaned = str(text).strip().replace(",", "").lstrip("$").strip()
    if not cleaned:
        return None
    try:
        return to_money(cleaned)
    except ValueError:
        return None


def to_minor_units(amount: Decimal) -> int:
    """Convert an amount to integer cents."""
    return int(to_money(amount) * 100)


def from_minor_units(cents: int) -> Decimal:
    """Convert integer cents back to an amount."""
    return (Decimal(cents) / 100).quantize(CENT)


def to_wire(amount: Decimal) -> float:
    """Convert an amount to a JSON number for the backend."""
    return float(to_money(amount))


def _coerce_money(value: Any) -> Decimal:
    return to_money(value)


def _coerce_optional_money(value: Any) -> Optional[Decimal]:
    if value is None or value == "":
        return None
    return to_money(value)


# Field types for models
Money = Annotated[Decimal, BeforeValidator(_coerce_money)]
OptionalMoney = Annotated[Optional[Decimal], BeforeValidator(_coerce_optional_money)]
