"""Half-up rounding used for every presented average, percentage and score."""

from decimal import Decimal, ROUND_HALF_UP
from typing import Optional


def round_half_up(value: Optional[float], digits: int = 0) -> Optional[float]:
    """
    Round like a human would (2.5 -> 3, 4.45 -> 4.5), not like banker's round().

    Args:
        value: Number to round (None passes through)
        digits: Decimal places to keep

    Returns:
        Rounded float, or None
    """
    if value is None:
        return None
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def round_to_int(value: float) -> int:
    """Half-up rounding to an integer."""
    return int(round_half_up(value, 0))
