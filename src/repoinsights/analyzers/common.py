"""Numeric helpers shared by the signal extractors and the scorer."""

import math


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for non-negatives.

    Python's ``round`` uses banker's rounding (``round(12.5) == 12``), which
    would shift scores that land exactly on a half point.
    """
    return math.floor(value + 0.5)


def percentage(part: float, whole: float) -> float:
    """``part / whole`` as a two-decimal percentage, 0.0 when ``whole`` is 0."""
    if whole <= 0:
        return 0.0
    return round(part / whole * 100, 2)


def safe_average(values: list[float]) -> float | None:
    """Two-decimal mean, or None for an empty list."""
    if not values:
        return None
    return round(sum(values) / len(values), 2)


def clamp(value: int, max_score: int) -> int:
    return max(0, min(max_score, value))
