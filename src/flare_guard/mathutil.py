"""Redondeo y divisiones protegidas compartidos por los cálculos."""

from __future__ import annotations

import math


def round_half_up(value: float, digits: int = 0) -> float:
    """Round halves away from zero for positives (2.5 -> 3, not 2).

    Args:
        value: Number to round.
        digits: Decimal places to keep.

    Returns:
        Rounded value as float.
    """
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def safe_percent(part: float, total: float) -> int:
    """Integer percentage of part/total; 0 when total is 0."""
    if not total:
        return 0
    return int(round_half_up(part / total * 100))


def safe_mean(total: float, count: int, digits: int = 1) -> float:
    """Mean rounded to ``digits``; 0.0 when count is 0."""
    if not count:
        return 0.0
    return round_half_up(total / count, digits)
