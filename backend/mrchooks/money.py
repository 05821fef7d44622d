# Overview: Conversion between API currency units (pesos) and stored integer cents.

from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Optional


def parse_money(value: Any) -> int:
    """
    Parse an amount in currency units into integer cents (half-up).

    Accepts ints, floats and numeric strings ("49.99", "₱1,250.00").
    Raises ValueError for anything else, including booleans and NaN.
    """
    if value is None or isinstance(value, bool):
        raise ValueError("amount must be a number")

    if isinstance(value, int):
        return value * 100

    if isinstance(value, float):
        amount = Decimal(repr(value))
    elif isinstance(value, (str, Decimal)):
        text = str(value).strip().replace("₱", "").replace(",", "")
        if not text:
            raise ValueError("amount must be a number")
        try:
            amount = Decimal(text)
        except InvalidOperation:
            raise ValueError("amount must be a number")
    else:
        raise ValueError("amount must be a number")

    if not amount.is_finite():
        raise ValueError("amount must be a finite number")

    try:
        cents = (amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    except InvalidOperation:
        # More digits than the decimal context can hold
        raise ValueError("amount is out of range")
    return int(cents)


def from_cents(cents: Optional[int]) -> Optional[float]:
    if cents is None:
        return None
    return cents / 100
