"""Dollar amounts as stored in records: ``"$10"``, ``"$10.50"``."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation

_CENT = Decimal("0.01")


def parse_amount(value: str | None) -> Decimal:
    """Parse ``"$12.50"`` into a Decimal. Empty values count as zero."""
    text = (value or "").strip().replace("$", "")
    if not text:
        return Decimal("0")
    try:
        amount = Decimal(text)
    except InvalidOperation:
        raise ValueError(f"Invalid amount: {value!r}") from None
    if not amount.is_finite():
        raise ValueError(f"Invalid amount: {value!r}")
    return amount


def format_amount(amount: Decimal) -> str:
    if amount == amount.to_integral_value():
        return f"${int(amount)}"
    return f"${amount.quantize(_CENT)}"


def to_cents(amount: Decimal) -> int:
    return int((amount * 100).to_integral_value())
