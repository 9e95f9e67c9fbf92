from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

from .exceptions import ValidationError

Amount = Union[Decimal, int, str, float]

CENT = Decimal("0.01")
ZERO = Decimal("0.00")
CURRENCY_SYMBOL = "₦"


def to_decimal(value: Amount) -> Decimal:
    """Convert an input amount to Decimal without going through binary floats."""

    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise ValidationError(f"Invalid amount: {value!r}")
    try:
        return Decimal(str(value).strip())
    except InvalidOperation as exc:
        raise ValidationError(f"Invalid amount: {value!r}") from exc


def quantize_money(value: Amount) -> Decimal:
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def format_currency(value: Amount | None, symbol: str = CURRENCY_SYMBOL) -> str:
    if value is None:
        return "—"
    amount = quantize_money(value)
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.2f}"


def format_amount(value: Amount) -> str:
    """Plain 2-decimal rendering used in bank upload files."""

    return f"{quantize_money(value):.2f}"
