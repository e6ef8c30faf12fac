"""Fixed-point money arithmetic.

All monetary figures are Decimals scaled to 2 places. Every multiplication
by a rate is rounded half-up immediately; totals are plain sums of already
rounded figures.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

CENTS = Decimal("0.01")
ZERO = Decimal("0.00")


def round_to_cents(amount: Decimal) -> Decimal:
    """Round amount to 2 decimal places, ties away from zero."""
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def to_money(value: Decimal | int | str | None) -> Decimal:
    """Coerce an optional input to a 2-place Decimal (None -> 0.00)."""
    if value is None:
        return ZERO
    return round_to_cents(Decimal(value))


def apply_rate(amount: Decimal, rate: Decimal) -> Decimal:
    """Multiply by a rate and round to cents in one step."""
    return round_to_cents(amount * rate)


def money_sum(*amounts: Decimal) -> Decimal:
    """Sum figures that are already rounded to cents."""
    return round_to_cents(sum(amounts, ZERO))
