"""
Scoring Utilities
assessment_scoring/scoring/utils.py

Provides precision-safe percentage math and lenient integer parsing for
scoring calculations.
"""

import re
from decimal import Decimal, ROUND_FLOOR
from typing import Any, Optional

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_int(value: Any, default: Optional[int] = None) -> Optional[int]:
    """
    Parse the leading integer of a value.

    Ints pass through, floats are truncated toward zero and strings are read
    up to the first non-digit ("7", " 7", "7.9", "7abc" -> 7). Booleans,
    None and anything without a leading integer return ``default``.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            return default
        return int(value)
    if isinstance(value, str):
        match = _LEADING_INT.match(value)
        return int(match.group(1)) if match else default
    return default


def percentage(points: int, possible: int) -> Optional[int]:
    """
    Calculate a whole-number percentage with zero-division protection.

    Formula: floor(points / possible × 100 + 0.5), i.e. halves round up
    toward +∞ (67.5 -> 68, -2.5 -> -2). Returns None when possible <= 0.
    """
    if possible <= 0:
        return None
    raw = Decimal(points) * Decimal(100) / Decimal(possible)
    return int((raw + Decimal("0.5")).to_integral_value(rounding=ROUND_FLOOR))
