"""Display formatting for weather metrics.

Every helper renders "—" for values that are not finite numbers so a
missing metric never breaks the rest of the display.
"""

import math
from typing import Any, Optional

PLACEHOLDER = "—"


def _finite(value: Any) -> Optional[float]:
    # Strings and bools are rejected even when they look numeric
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value) if math.isfinite(value) else None


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves toward +infinity."""
    return math.floor(value + 0.5)


def format_temp(temp: Any) -> str:
    """Format a Fahrenheit temperature, e.g. 75.6 -> "76°F"."""
    num = _finite(temp)
    return PLACEHOLDER if num is None else f"{round_half_up(num)}°F"


def format_wind(wind: Any) -> str:
    """Format a wind speed in mph, e.g. 12.4 -> "12 mph"."""
    num = _finite(wind)
    return PLACEHOLDER if num is None else f"{round_half_up(num)} mph"


def format_pop(pop: Any) -> str:
    """Format a precipitation probability, e.g. 39.5 -> "40%"."""
    num = _finite(pop)
    return PLACEHOLDER if num is None else f"{round_half_up(num)}%"


def format_mm(value: Any) -> str:
    """Format a depth in mm with one decimal, e.g. 1.26 -> "1.3 mm"."""
    num = _finite(value)
    return PLACEHOLDER if num is None else f"{num:.1f} mm"
