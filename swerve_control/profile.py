"""Trapezoidal motion profile for straight-line displacement.

This module defines the time-optimal trapezoidal (or triangular, when the goal
is too short to reach cruise speed) profile that the feedback controller
tracks. The profile always starts at rest at position 0 and ends at rest at
the goal.
"""

import math
from dataclasses import dataclass
from typing import Dict

import numpy as np
import numpy.typing as npt

from .config import MAX_WHEEL_ACCEL, MAX_WHEEL_SPEED
from .errors import ConfigurationError


@dataclass(frozen=True)
class MotionConstraints:
    """Velocity and acceleration limits of the profile.

    Attributes:
        max_velocity: Cruise velocity (m/s), strictly positive.
        max_acceleration: Ramp acceleration (m/s²), strictly positive.
    """

    max_velocity: float = MAX_WHEEL_SPEED
    max_acceleration: float = MAX_WHEEL_ACCEL

    def __post_init__(self) -> None:
        for name in ("max_velocity", "max_acceleration"):
            value = getattr(self, name)
            if not math.isfinite(value) or value <= 0:
                raise ConfigurationError(f"{name} must be a positive finite number, got {value}")


@dataclass(frozen=True)
class ProfileState:
    """Position and velocity setpoint at one instant of the profile."""

    position: float = 0.0
    velocity: float = 0.0


class TrapezoidProfile:
    """Rest-to-rest trapezoidal profile from 0 to a goal distance.

    The profile is a pure function of elapsed time: ``calculate(t)`` holds no
    internal counters, so a controller can evaluate it at any tick rate
    without drift.

    Attributes:
        constraints: Velocity and acceleration limits.
        goal: Goal distance (meters, >= 0).
        peak_velocity: Highest velocity reached (m/s). Equals the velocity
            limit for trapezoids, lower for triangular profiles.
    """

    def __init__(self, constraints: MotionConstraints, goal: float):
        """Initialize the profile.

        Args:
            constraints: Velocity and acceleration limits.
            goal: Goal distance (meters). Must be finite and non-negative.

        Raises:
            ConfigurationError: If the goal is negative or non-finite.
        """
        if not math.isfinite(goal) or goal < 0:
            raise ConfigurationError(f"Profile goal must be a non-negative finite distance, got {goal}")

        self.constraints = constraints
        self.goal = goal

        accel = constraints.max_acceleration
        v_max = constraints.max_velocity

        # Distance covered while ramping up to full speed
        t_ramp = v_max / accel
        d_ramp = 0.5 * accel * t_ramp**2

        if 2.0 * d_ramp > goal:
            # Triangular: peak before reaching the velocity limit
            t_ramp = math.sqrt(goal / accel)
            self.peak_velocity = accel * t_ramp
            t_cruise = 0.0
        else:
            self.peak_velocity = v_max
            t_cruise = (goal - 2.0 * d_ramp) / v_max

        self._t_accel = t_ramp
        self._t_cruise = t_cruise
        self._d_accel = 0.5 * accel * t_ramp**2

    @property
    def accel_time(self) -> float:
        """Duration of the acceleration phase (seconds)."""
        return self._t_accel

    @property
    def cruise_time(self) -> float:
        """Duration of the constant-velocity phase (seconds)."""
        return self._t_cruise

    def total_time(self) -> float:
        """Time at which the profile reaches the goal at rest (seconds)."""
        return 2.0 * self._t_accel + self._t_cruise

    def is_finished(self, t: float) -> bool:
        return t >= self.total_time()

    def calculate(self, t: float) -> ProfileState:
        """Compute the setpoint at elapsed time t.

        Args:
            t: Elapsed time since the start of the profile (seconds).
                Negative times are treated as 0.

        Returns:
            ProfileState with position in [0, goal] and non-negative velocity.
        """
        accel = self.constraints.max_acceleration
        t_end_accel = self._t_accel
        t_end_cruise = self._t_accel + self._t_cruise
        t_total = self.total_time()

        if t <= 0.0:
            return ProfileState(0.0, 0.0)

        if t < t_end_accel:
            position = 0.5 * accel * t**2
            velocity = accel * t
        elif t < t_end_cruise:
            position = self._d_accel + self.peak_velocity * (t - t_end_accel)
            velocity = self.peak_velocity
        elif t < t_total:
            # Mirror of the acceleration phase, measured back from the end
            remaining = t_total - t
            position = self.goal - 0.5 * accel * remaining**2
            velocity = accel * remaining
        else:
            return ProfileState(self.goal, 0.0)

        return ProfileState(min(position, self.goal), max(velocity, 0.0))


def sample_profile(
    constraints: MotionConstraints, goal: float, dt: float = 0.02
) -> Dict[str, npt.NDArray[np.float64]]:
    """Sample a complete profile for visualization.

    Args:
        constraints: Velocity and acceleration limits.
        goal: Goal distance (meters).
        dt: Time step in seconds (default: 0.02)

    Returns:
        Dictionary containing:
            't': Time array in seconds
            'position': Position setpoint array in meters
            'velocity': Velocity setpoint array in m/s
    """
    if dt <= 0:
        raise ValueError(f"dt must be positive, got {dt}")

    profile = TrapezoidProfile(constraints, goal)
    t_array = np.arange(0.0, profile.total_time() + dt, dt)
    position = np.zeros_like(t_array)
    velocity = np.zeros_like(t_array)

    for i, t in enumerate(t_array):
        state = profile.calculate(float(t))
        position[i] = state.position
        velocity[i] = state.velocity

    return {
        "t": t_array,
        "position": position,
        "velocity": velocity,
    }
