"""Rounding shared by the curve engine and the results calculator."""

import math


def round_half_away(value: float) -> int:
    """Round to the nearest integer, halves away from zero.

    Python's ``round`` uses banker's rounding (``round(2.5) == 2``), which
    would shift cube heights and percentages by one at every .5 boundary.
    """
    return int(math.copysign(math.floor(abs(value) + 0.5), value))
