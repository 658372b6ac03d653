"""
Axis decomposition for an omnidirectional (swerve) chassis.

This module splits a single scalar drive command into X and Y axis commands
whose ratio matches a target displacement, so the chassis travels along a
straight line toward the target.
"""

from typing import NamedTuple, Tuple


class AxisRatios(NamedTuple):
    """Per-axis output multipliers, each in [-1, 1]."""

    x: float
    y: float


def sign(value: float) -> float:
    """Return -1.0, 0.0 or 1.0 according to the sign of value."""
    return 0.0 if value == 0 else value / abs(value)


def decompose(distance_x: float, distance_y: float) -> AxisRatios:
    """
    Compute axis multipliers from a target displacement.

    The dominant axis gets a multiplier of ±1 and the other axis is scaled by
    the ratio of the two distances:
        |dx| > |dy|:  m_x = sign(dx),          m_y = |dy|/|dx| * sign(dy)
        otherwise:    m_x = |dx|/|dy| * sign(dx), m_y = sign(dy)

    Multiplying a scalar output by (m_x, m_y) therefore yields a command vector
    pointing along (dx, dy) with the dominant axis at full magnitude.

    Args:
        distance_x: Target displacement along X (meters). + is forward.
        distance_y: Target displacement along Y (meters). + is left.

    Returns:
        AxisRatios(x, y). (0.0, 0.0) when both distances are zero.

    Example:
        >>> decompose(3.0, 1.5)
        AxisRatios(x=1.0, y=0.5)
    """
    abs_x = abs(distance_x)
    abs_y = abs(distance_y)

    if abs_x == 0 and abs_y == 0:
        return AxisRatios(0.0, 0.0)

    if abs_x > abs_y:
        return AxisRatios(sign(distance_x), (abs_y / abs_x) * sign(distance_y))

    return AxisRatios((abs_x / abs_y) * sign(distance_x), sign(distance_y))


def apply_ratios(output: float, ratios: AxisRatios) -> Tuple[float, float]:
    """Scale a scalar output into (x, y) axis commands."""
    return output * ratios.x, output * ratios.y
