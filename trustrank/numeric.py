from __future__ import annotations

import math


def round_half_up(value: float, digits: int = 0) -> float:
    """Round like ``Math.round(value * 10**digits) / 10**digits``.

    Python's ``round`` uses banker's rounding, which would turn 82.5 into 82.
    """
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def percent(value: float) -> int:
    """Convert a [0, 1] similarity into a whole percentage."""
    return int(round_half_up(value * 100))
