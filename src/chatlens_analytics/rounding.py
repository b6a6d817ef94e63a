"""Rounding helpers that match the dashboard front end's arithmetic."""

from __future__ import annotations

import math


def round_half_up(value: float, digits: int = 1) -> float:
    """Round like JavaScript's ``Math.round(x * 10**d) / 10**d``.

    Halves always round towards positive infinity: ``2.25`` becomes ``2.3``
    and ``-2.25`` becomes ``-2.2``.
    """
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def percentage(part: int, total: int) -> float:
    """``part`` as a percentage of ``total`` to one decimal; 0 when total is 0."""
    if not total:
        return 0.0
    return round_half_up(part / total * 100)
