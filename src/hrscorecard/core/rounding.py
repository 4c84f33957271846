"""Half-up rounding shared by aggregation, ranking and grading."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal


def round_half_up(value: float, digits: int = 0) -> float:
    """Round ``value`` half away from zero on its shortest decimal repr.

    The builtin ``round`` rounds half to even, so 78.5 would become 78.
    """
    quantum = Decimal(1).scaleb(-digits)
    rounded = Decimal(repr(float(value))).quantize(quantum, rounding=ROUND_HALF_UP)
    return float(rounded)


def round_to_int(value: float) -> int:
    return int(round_half_up(value))
