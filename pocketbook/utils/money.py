from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_decimal(value: Any) -> Decimal:
    """Coerce a stored or aggregated number into a cent-quantized Decimal."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            amount = Decimal(str(value))
        except (InvalidOperation, ValueError) as exc:
            raise ValueError(f"Invalid amount '{value}'.") from exc
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def percentage_of(amount: Decimal, percentage: Decimal) -> Decimal:
    return (amount * percentage / Decimal("100")).quantize(CENT, rounding=ROUND_HALF_UP)


def share_of(part: Decimal, total: Decimal) -> Decimal:
    """Return ``part`` as a percentage of ``total`` with two decimals."""
    if total <= 0:
        return ZERO
    return (part / total * Decimal("100")).quantize(CENT, rounding=ROUND_HALF_UP)
