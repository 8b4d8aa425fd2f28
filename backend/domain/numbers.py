"""Small numeric helpers shared by the benefit calculations."""

from __future__ import annotations

import math
from typing import Optional


def finite(value: Optional[float], default: float = 0.0) -> float:
    """Return ``value`` as a float, or ``default`` when missing or not finite."""
    if value is None:
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return number if math.isfinite(number) else default


def non_negative(value: Optional[float]) -> float:
    return max(0.0, finite(value))


def round_chf(value: float) -> int:
    """Round half up to whole francs (``round`` would use banker's rounding)."""
    return int(math.floor(finite(value) + 0.5))


def clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


def pct(amount: float, percent: float) -> float:
    return amount * percent / 100
