"""Profiled feedback controller for distance tracking.

This module provides a PID controller that tracks the setpoint of a
trapezoidal motion profile, using the measured traveled distance to correct
for tracking errors, wheel slip, and disturbances.
"""

import math
from dataclasses import dataclass
from typing import Dict, Optional

from .config import (
    DRIVE_INTEGRAL_LIMIT,
    DRIVE_KD,
    DRIVE_KF,
    DRIVE_KI,
    DRIVE_KP,
    DRIVE_OUTPUT_LIMIT,
    DRIVE_TOLERANCE,
    DRIVE_USE_FEEDFORWARD,
)
from .errors import ConfigurationError
from .profile import MotionConstraints, ProfileState, TrapezoidProfile


@dataclass(frozen=True)
class FeedbackGains:
    """Tuning constants for the profiled feedback controller.

    Attributes:
        k_p: Proportional gain on position error.
        k_i: Integral gain on accumulated position error.
        k_d: Derivative gain on position error.
        tolerance: Acceptance band (meters) for the goal predicates.
        k_f: Feed-forward gain on the profile velocity setpoint.
        use_feedforward: If True, add k_f * velocity setpoint to the output.
        integral_limit: Anti-windup clamp on the accumulated integral.
        output_limit: Clamp on the final output magnitude.
    """

    k_p: float = DRIVE_KP
    k_i: float = DRIVE_KI
    k_d: float = DRIVE_KD
    tolerance: float = DRIVE_TOLERANCE
    k_f: float = DRIVE_KF
    use_feedforward: bool = DRIVE_USE_FEEDFORWARD
    integral_limit: float = DRIVE_INTEGRAL_LIMIT
    output_limit: float = DRIVE_OUTPUT_LIMIT

    def __post_init__(self) -> None:
        if not math.isfinite(self.tolerance) or self.tolerance <= 0:
            raise ConfigurationError(f"tolerance must be positive, got {self.tolerance}")
        if self.integral_limit < 0 or self.output_limit <= 0:
            raise ConfigurationError("integral_limit must be >= 0 and output_limit > 0")


class ProfiledFeedbackController:
    """PID controller tracking a trapezoidal profile setpoint.

    Each tick queries the profile at the elapsed time, compares the position
    setpoint to the measured distance and applies PID feedback, plus an
    optional velocity feed-forward.

    Control law:
        output = k_p * e + k_i * integral(e) + k_d * de/dt [+ k_f * v_setpoint]

    where e = position_setpoint - measured_position. The output is clamped to
    ±output_limit.

    Attributes:
        gains: Tuning constants.
        profile: Motion profile being tracked.
        integral: Accumulated error (clamped to ±integral_limit).
        prev_error: Error from the previous tick, None before the first tick.
    """

    def __init__(
        self,
        goal: float,
        constraints: Optional[MotionConstraints] = None,
        gains: Optional[FeedbackGains] = None,
    ):
        """Initialize the feedback controller.

        Args:
            goal: Goal distance for the profile (meters, >= 0).
            constraints: Profile limits. Default: MotionConstraints().
            gains: Tuning constants. Default: FeedbackGains().
        """
        self.gains = gains if gains is not None else FeedbackGains()
        self.constraints = constraints if constraints is not None else MotionConstraints()
        self.profile = TrapezoidProfile(self.constraints, goal)

        # Integral and derivative state
        self.integral: float = 0.0
        self.prev_error: Optional[float] = None
        self.prev_time: Optional[float] = None

        # Latest tick values
        self.setpoint: ProfileState = ProfileState()
        self.measurement: float = 0.0
        self.error: float = 0.0
        self.derivative: float = 0.0
        self.output: float = 0.0

    @property
    def goal(self) -> float:
        return self.profile.goal

    def tick(self, measured_position: float, elapsed_time: float) -> float:
        """Compute the control output for one tick.

        Args:
            measured_position: Measured distance traveled (meters).
            elapsed_time: Time since the start of the episode (seconds).

        Returns:
            Scalar control output in [-output_limit, output_limit].
        """
        gains = self.gains
        self.setpoint = self.profile.calculate(elapsed_time)
        self.measurement = measured_position

        error = self.setpoint.position - measured_position

        # Time step since last tick; zero on the first tick
        dt = 0.0 if self.prev_time is None else elapsed_time - self.prev_time

        # Compute derivative of error (rate of change)
        if self.prev_error is not None and dt > 0:
            self.derivative = (error - self.prev_error) / dt
        else:
            self.derivative = 0.0

        # Accumulate integral of error with anti-windup
        if dt > 0:
            self.integral += error * dt
            self.integral = max(-gains.integral_limit, min(gains.integral_limit, self.integral))

        self.prev_error = error
        self.prev_time = elapsed_time
        self.error = error

        output = gains.k_p * error + gains.k_i * self.integral + gains.k_d * self.derivative
        if gains.use_feedforward:
            output += gains.k_f * self.setpoint.velocity

        self.output = max(-gains.output_limit, min(gains.output_limit, output))
        return self.output

    def at_goal(self) -> bool:
        """Advisory goal predicate: |error| <= tolerance.

        Depends on the profile having advanced, so it is not used to decide
        termination.
        """
        return abs(self.error) <= self.gains.tolerance

    def reset(self) -> None:
        """Reset integral and derivative states.

        Call this at the start of every episode so windup does not carry over.
        """
        self.integral = 0.0
        self.prev_error = None
        self.prev_time = None
        self.setpoint = ProfileState()
        self.measurement = 0.0
        self.error = 0.0
        self.derivative = 0.0
        self.output = 0.0

    def get_diagnostics(self) -> Dict[str, float]:
        """Get diagnostic information for logging and debugging.

        Returns:
            Dictionary containing the latest tick values.
        """
        return {
            "goal": self.goal,
            "sp_position": self.setpoint.position,
            "sp_velocity": self.setpoint.velocity,
            "measured": self.measurement,
            "error": self.error,
            "integral": self.integral,
            "derivative": self.derivative,
            "output": self.output,
        }
