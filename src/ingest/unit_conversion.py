"""Sensor unit conversions.

Pure functions converting raw sensor values into imperial units.
Rain values are rounded to 32-bit float precision like the stored fields.
"""

from __future__ import annotations

import numpy as np

from core.constants import FAHRENHEIT_OFFSET, FAHRENHEIT_SCALE, INCHES_PER_MILLIMETER


def celsius_to_fahrenheit(celsius: float) -> int:
    """Convert Celsius to whole Fahrenheit degrees.

    The fractional part is truncated toward zero, not rounded.

    Args:
        celsius: Temperature in degrees Celsius.

    Returns:
        Truncated temperature in degrees Fahrenheit.
    """
    return int(celsius * FAHRENHEIT_SCALE + FAHRENHEIT_OFFSET)


def mm_to_inches(millimeters: float) -> float:
    """Convert millimeters (or mm/hour) to inches (or inches/hour).

    Args:
        millimeters: Length or rate in millimeters.

    Returns:
        Converted value at 32-bit float precision.
    """
    return to_float32(millimeters * INCHES_PER_MILLIMETER)


def to_float32(value: float) -> float:
    """Round a value to the shortest decimal that survives float32 storage."""
    return float(str(np.float32(value)))
