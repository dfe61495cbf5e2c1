"""Battery percent clamping and the five-step battery indicator level."""

from __future__ import annotations

from enum import StrEnum
from typing import Any


class BatteryLevel(StrEnum):
    EMPTY = "empty"
    QUARTER = "quarter"
    HALF = "half"
    THREE_QUARTERS = "three-quarters"
    FULL = "full"


# Lower bound (inclusive) of each level, highest first.
_LEVEL_THRESHOLDS: tuple[tuple[float, BatteryLevel], ...] = (
    (80, BatteryLevel.FULL),
    (60, BatteryLevel.THREE_QUARTERS),
    (40, BatteryLevel.HALF),
    (20, BatteryLevel.QUARTER),
)

# Cell count drawn inside the battery glyph for each level.
BATTERY_FILL_CELLS: dict[BatteryLevel, int] = {
    BatteryLevel.EMPTY: 0,
    BatteryLevel.QUARTER: 1,
    BatteryLevel.HALF: 2,
    BatteryLevel.THREE_QUARTERS: 3,
    BatteryLevel.FULL: 4,
}


def clamp_battery_percent(value: Any) -> float | None:
    """Clamp a reported percent into [0, 100]; non-numeric values mean unknown."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if value != value:  # NaN
        return None
    return max(0, min(100, value))


def battery_level_from_percent(percent: float | None) -> BatteryLevel:
    if percent is None:
        return BatteryLevel.EMPTY
    for threshold, level in _LEVEL_THRESHOLDS:
        if percent >= threshold:
            return level
    return BatteryLevel.EMPTY


def format_battery_percent(percent: float | None) -> str | None:
    """Return the numeric label, or ``None`` when the percent is unknown."""
    if percent is None:
        return None
    if float(percent).is_integer():
        return f"{int(percent)}%"
    return f"{percent:g}%"
