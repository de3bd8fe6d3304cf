"""
Rounding and currency formatting helpers.

All dollar figures leaving a public function are rounded to cents with
round_cents(). Percentages and marginal rates are never pre-rounded.
"""

from decimal import Decimal, ROUND_HALF_UP


CENTS = Decimal("0.01")
RATE_PLACES = Decimal("0.0001")


def round_cents(amount: float) -> float:
    """Round a dollar amount to cents, half away from zero."""
    value = Decimal(str(amount)).quantize(CENTS, rounding=ROUND_HALF_UP)
    # Normalise -0.0 so equal inputs always produce equal outputs
    return float(value) + 0.0


def round_rate(rate: float) -> float:
    """Round a ratio (e.g. an effective tax rate) to 4 decimal places."""
    return float(Decimal(str(rate)).quantize(RATE_PLACES, rounding=ROUND_HALF_UP)) + 0.0


def format_dollars(amount: float, decimals: int = 0) -> str:
    """
    Format a number as AUD currency.

    Args:
        amount: Dollar amount
        decimals: Number of decimal places to show (default whole dollars)

    Returns:
        String like "$2,520" or "-$1,352.50"
    """
    quantum = Decimal(1).scaleb(-decimals)
    value = Decimal(str(amount)).quantize(quantum, rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.{decimals}f}"


def format_dollars_and_cents(amount: float) -> str:
    """Format a number as AUD currency showing cents (hourly fees, offsets)."""
    return format_dollars(amount, decimals=2)
