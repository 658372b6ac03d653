"""Configuration parameters for the swerve displacement controller.

This module centralizes all configuration parameters including:
- Motion profile constraints
- Feedback controller gains and tolerance
- Scheduler timing
- Tracking divergence diagnostics
- Simulation and visualization settings

All parameters are documented with their purpose, valid ranges, and tuning rationale.
Constructors default to these values; nothing reads them at tick time.
"""

import math

# ============================================================================
# Motion Profile Constraints
# ============================================================================

MAX_WHEEL_SPEED = 3.0
"""Maximum profiled wheel speed (m/s).

Cruise velocity of the trapezoidal profile.

Tuning rationale:
- Estimate only; characterize the drivetrain for a measured value
- Kept below free speed so the feedback terms have headroom
"""

MAX_WHEEL_ACCEL = 2.0
"""Maximum profiled wheel acceleration (m/s²).

Slope of the ramp-up and ramp-down phases of the profile.

Tuning rationale:
- Estimate only; characterize the drivetrain for a measured value
- Gentle enough to avoid wheel slip, which corrupts the distance reading
"""


# ============================================================================
# Feedback Controller Parameters (Profiled PID)
# ============================================================================

DRIVE_KP = 1.2
"""Proportional gain on position error (1/m, range: [0, 5]).

Output units are normalized drive command per meter of error.
"""

DRIVE_KI = 0.15
"""Integral gain on accumulated position error (1/(m·s), range: [0, 1]).

Removes the steady-state shortfall caused by friction near the goal.
"""

DRIVE_KD = 0.0
"""Derivative gain on position error (s/m, range: [0, 0.5]).

Disabled: the distance reading is noisy and the derivative amplifies it.
"""

DRIVE_KF = 1.0
"""Feed-forward gain applied to the profile velocity setpoint (s/m).

Only used when DRIVE_USE_FEEDFORWARD is True.
"""

DRIVE_USE_FEEDFORWARD = False
"""Add the profile velocity setpoint to the feedback output.

Off by default: the output is pure error correction, matching the behaviour
the default gains were tuned against.
"""

DRIVE_TOLERANCE = 0.10
"""Acceptance band around the target distance (meters, > 0).

The episode ends once |target - measured| <= DRIVE_TOLERANCE.
"""

DRIVE_INTEGRAL_LIMIT = 1.0
"""Anti-windup clamp for the accumulated integral (m·s).

Clamps integral accumulation to ±DRIVE_INTEGRAL_LIMIT.

Tuning rationale:
- With KI=0.15 the integral term contributes at most 0.15 of full output
- Enough to close a steady-state gap without overshooting the goal
"""

DRIVE_OUTPUT_LIMIT = 1.0
"""Clamp on the scalar controller output (normalized drive command).

Applied before axis decomposition so the dominant axis never exceeds full scale.
"""


# ============================================================================
# Scheduler Parameters
# ============================================================================

TICK_PERIOD = 0.02
"""Scheduler period (seconds). 50 Hz control loop."""


# ============================================================================
# Tracking Divergence Diagnostics
# ============================================================================

TRACKING_ERROR_WARN_PCT = 5.0
"""Final tracking error (percent of target) above which teardown warns."""

DIVERGENCE_TIME_FACTOR = 2.0
"""Elapsed time, as a multiple of profile duration, after which the episode is
reported as diverged. The episode keeps running; only the scheduler can end it."""


# ============================================================================
# Simulation Parameters
# ============================================================================

SIM_MAX_SPEED = 4.0
"""Chassis speed at full normalized command (m/s)."""

SIM_TIME_CONSTANT = 0.1
"""First-order response time constant of the simulated drive (seconds)."""

SIM_DISTANCE_NOISE_STD = 0.0
"""Standard deviation of gaussian noise on the simulated distance reading (m)."""

SIM_YAW_DRIFT_RATE = math.radians(0.5)
"""Simulated gyro drift (rad/s) while the chassis is moving."""


# ============================================================================
# Visualization Colors
# ============================================================================

PLOT_ORANGE = "#f74823"
"""Primary color - measured distance, actual trajectory."""

PLOT_BLUE = "#2374f7"
"""Secondary color - profile setpoint, reference values."""

PLOT_TAUPE = "#686a5f"
"""Neutral color for guides, grids, and tolerance bands."""

# Terminal color codes (ANSI escape sequences)
TERM_BLUE = "\033[38;2;35;116;247m"
"""Terminal color code for blue (RGB: 35, 116, 247)."""

TERM_RESET = "\033[0m"
"""Terminal color reset code."""


# ============================================================================
# Output Configuration
# ============================================================================

RESULTS_DIR = "results"
"""Base directory for per-episode data logging."""
