"""Decimal money utilities.

All balances, prices and costs are Decimal with scale 2. No float anywhere.
Rounding is HALF_UP and happens once, at the end of a computation.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def quantize_money(value: Decimal) -> Decimal:
    """Round to 2 decimals, half-up: Decimal('1.005') -> Decimal('1.01')."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def to_money(value: Decimal | int | str) -> Decimal:
    """Coerce an int/str/Decimal into a scale-2 Decimal.

    Raises ValueError for anything that is not a finite number.
    """
    try:
        dec = value if isinstance(value, Decimal) else Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"Not a monetary amount: {value!r}") from None
    if not dec.is_finite():
        raise ValueError(f"Not a monetary amount: {value!r}")
    return quantize_money(dec)


def money_to_display(amount: Decimal) -> str:
    """Format for humans: Decimal('1500') -> '1,500.00', Decimal('-12.5') -> '-12.50'."""
    amount = quantize_money(amount)
    if amount < 0:
        return f"-{-amount:,.2f}"
    return f"{amount:,.2f}"
