"""Displacement controller: drive a swerve chassis to a 2D displacement.

This module ties the control pipeline together for one episode:
- Lifecycle setup (brake mode, sensor resets, field-oriented frame)
- Per-tick profiled feedback on the measured traveled distance
- Axis decomposition of the scalar output into X/Y drive commands
- Termination on the live distance reading
- Lifecycle teardown (stop, frame restore, summary)

The external scheduler calls setup(), then tick() and is_finished() once per
period, then teardown() exactly once.
"""

import logging
import math
import time
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional

from .config import DIVERGENCE_TIME_FACTOR, TRACKING_ERROR_WARN_PCT
from .errors import ConfigurationError, EpisodeStateError
from .feedback import FeedbackGains, ProfiledFeedbackController
from .interfaces import DistanceSensor, Drivetrain, HeadingSensor
from .model import AxisRatios, apply_ratios, decompose
from .options import EpisodeOptions
from .profile import MotionConstraints


class EpisodeState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    ENDED = "ended"


@dataclass
class ControlState:
    """Mutable per-episode state, created at setup and owned by the controller."""

    start_time: float = 0.0
    iterations: int = 0
    elapsed_time: float = 0.0
    setpoint: float = 0.0
    measurement: float = 0.0
    last_error: float = 0.0
    axis_x: float = 0.0
    axis_y: float = 0.0
    yaw: float = 0.0


@dataclass(frozen=True)
class EpisodeSummary:
    """Final diagnostics returned by teardown."""

    target: float
    actual: float
    error_pct: float
    iterations: int
    elapsed_time: float
    interrupted: bool
    diverged: bool
    yaw: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class DisplacementController:
    """Drives the chassis in a straight line to (distance_x, distance_y).

    A trapezoidal profile on the straight-line distance is tracked by a PID
    loop closed on the drivetrain's traveled distance. The scalar output is
    split between the X and Y axes using ratios fixed at construction, so the
    chassis holds the direction of the target throughout the episode.

    Termination is decided from the live distance reading, independently of
    the feedback controller's own goal predicate.

    Attributes:
        drivetrain: Drive actuator.
        distance_sensor: Traveled-distance source (defaults to the drivetrain).
        heading_sensor: Yaw source (defaults to the drivetrain).
        distance_x: Target displacement along X (meters). + is forward.
        distance_y: Target displacement along Y (meters). + is left.
        distance: Straight-line target distance (meters).
        ratios: Per-axis output multipliers.
        options: Stop/brake/field-oriented options.
        feedback: Profiled PID controller.
        control: Per-episode mutable state, None until setup.
    """

    def __init__(
        self,
        drivetrain: Drivetrain,
        distance_x: float,
        distance_y: float,
        options: Optional[EpisodeOptions] = None,
        gains: Optional[FeedbackGains] = None,
        constraints: Optional[MotionConstraints] = None,
        distance_sensor: Optional[DistanceSensor] = None,
        heading_sensor: Optional[HeadingSensor] = None,
        clock: Callable[[], float] = time.monotonic,
        divergence_time_factor: float = DIVERGENCE_TIME_FACTOR,
    ) -> None:
        """Initialize the controller.

        Args:
            drivetrain: Drive actuator.
            distance_x: Distance to drive along X (meters). + is forward.
            distance_y: Distance to drive along Y (meters). + is left.
            options: Episode options. Default: EpisodeOptions().
            gains: Feedback tuning. Default: FeedbackGains().
            constraints: Profile limits. Default: MotionConstraints().
            distance_sensor: Distance source. Default: the drivetrain.
            heading_sensor: Yaw source. Default: the drivetrain.
            clock: Monotonic time source in seconds.
            divergence_time_factor: Multiple of the profile duration after
                which the episode is reported as diverged.

        Raises:
            ConfigurationError: If the target is zero or not finite.
        """
        if not (math.isfinite(distance_x) and math.isfinite(distance_y)):
            raise ConfigurationError(
                f"Target distances must be finite, got ({distance_x}, {distance_y})"
            )

        distance = math.hypot(distance_x, distance_y)
        if distance == 0:
            raise ConfigurationError("Target displacement is zero; nothing to drive")

        self.drivetrain = drivetrain
        self.distance_sensor = distance_sensor if distance_sensor is not None else drivetrain
        self.heading_sensor = heading_sensor if heading_sensor is not None else drivetrain
        self.options = options if options is not None else EpisodeOptions()
        self.clock = clock
        self.divergence_time_factor = divergence_time_factor

        self.distance_x = distance_x
        self.distance_y = distance_y
        self.distance = distance
        self.ratios: AxisRatios = decompose(distance_x, distance_y)

        self.feedback = ProfiledFeedbackController(distance, constraints, gains)

        self.state = EpisodeState.IDLE
        self.control: Optional[ControlState] = None
        self.summary: Optional[EpisodeSummary] = None
        self.diverged = False
        self._toggled_field_frame = False

        logging.info(
            f"distanceX={distance_x:.3f}m  distanceY={distance_y:.3f}m  distance={distance:.3f}m  "
            f"angle={math.atan2(distance_y, distance_x):.3f}r  {self.options}"
        )
        logging.info(f"kP={self.gains.k_p:.6f}  kI={self.gains.k_i:.6f}  kD={self.gains.k_d:.6f}")

    @classmethod
    def cartes(
        cls,
        drivetrain: Drivetrain,
        distance_x: float,
        distance_y: float,
        options: Optional[EpisodeOptions] = None,
        **kwargs: Any,
    ) -> "DisplacementController":
        """Create a controller from Cartesian X/Y distances (meters)."""
        return cls(drivetrain, distance_x, distance_y, options, **kwargs)

    @classmethod
    def polar(
        cls,
        drivetrain: Drivetrain,
        distance: float,
        heading: float,
        options: Optional[EpisodeOptions] = None,
        **kwargs: Any,
    ) -> "DisplacementController":
        """Create a controller from a distance (meters) and heading (degrees, + is left)."""
        heading_rad = math.radians(heading)
        return cls(
            drivetrain,
            distance * math.cos(heading_rad),
            distance * math.sin(heading_rad),
            options,
            **kwargs,
        )

    @property
    def gains(self) -> FeedbackGains:
        return self.feedback.gains

    @property
    def tolerance(self) -> float:
        return self.feedback.gains.tolerance

    def _require(self, state: EpisodeState, hook: str) -> None:
        if self.state is not state:
            raise EpisodeStateError(f"{hook}() called while {self.state.value}, expected {state.value}")

    def setup(self) -> None:
        """Prepare the drivetrain and sensors for a new episode.

        Order matters: the distance counter is reset before any tick reads it,
        and the yaw is reset after the reference frame is settled. If the yaw
        reset fails, a frame change made here is undone before the error
        propagates.
        """
        self._require(EpisodeState.IDLE, "setup")

        logging.info(
            f"distanceX={self.distance_x:.3f}m  distanceY={self.distance_y:.3f}m  "
            f"distance={self.distance:.3f}m  {self.options}"
        )

        self.control = ControlState(start_time=self.clock())
        self.feedback.reset()
        self.diverged = False

        self.drivetrain.set_brake_mode(self.options.brake_on_stop)

        self.distance_sensor.reset_distance_traveled()

        if self.options.use_field_frame and not self.drivetrain.get_field_oriented():
            self.drivetrain.toggle_field_oriented()
            self._toggled_field_frame = True

        try:
            self.heading_sensor.reset_yaw()
        except Exception:
            # No teardown follows a failed setup
            logging.error("Setup failed after changing the reference frame; restoring it")
            self._restore_field_frame()
            raise

        self.state = EpisodeState.RUNNING

    def _restore_field_frame(self) -> None:
        if self._toggled_field_frame and self.drivetrain.get_field_oriented():
            self.drivetrain.toggle_field_oriented()
        self._toggled_field_frame = False

    def tick(self) -> None:
        """Run one control period: measure, compute, decompose, drive."""
        self._require(EpisodeState.RUNNING, "tick")
        control = self.control

        elapsed = self.clock() - control.start_time
        measured = abs(self.distance_sensor.get_distance_traveled())

        output = self.feedback.tick(measured, elapsed)
        axis_x, axis_y = apply_ratios(output, self.ratios)

        # Rotation is not profiled
        self.drivetrain.drive(axis_x, axis_y, 0.0)

        control.iterations += 1
        control.elapsed_time = elapsed
        control.setpoint = self.feedback.setpoint.position
        control.measurement = measured
        control.last_error = self.feedback.error
        control.axis_x = axis_x
        control.axis_y = axis_y
        control.yaw = self.heading_sensor.get_yaw()

        logging.debug(
            f"tg={self.distance:.3f}  dist={measured:.3f}  sp={control.setpoint:.3f}  "
            f"err={control.last_error:.3f}  out={output:.3f}  yaw={control.yaw:.2f}  "
            f"iteration={control.iterations}"
        )

        self._check_divergence(measured, elapsed)

    def _check_divergence(self, measured: float, elapsed: float) -> None:
        if self.diverged:
            return

        overshoot = measured > self.distance + self.tolerance
        overdue = elapsed > self.divergence_time_factor * self.feedback.profile.total_time()

        if overshoot or overdue:
            self.diverged = True
            reason = "overshot target" if overshoot else "profile time exceeded"
            logging.warning(
                f"Tracking divergence ({reason}): target={self.distance:.3f}  "
                f"measured={measured:.3f}  elapsed={elapsed:.3f}s"
            )

    def is_finished(self) -> bool:
        """True when the live distance reading is within tolerance of the target.

        Evaluated against the sensor, never against the feedback controller's
        internal profile state.
        """
        measured = abs(self.distance_sensor.get_distance_traveled())
        return abs(abs(self.distance) - measured) <= self.tolerance

    def teardown(self, interrupted: bool = False) -> EpisodeSummary:
        """End the episode: stop if requested, report, restore the frame.

        Runs once; later calls return the first summary. The reference frame
        is restored even if stopping or reporting raises.

        Args:
            interrupted: True if the scheduler cancelled the episode.

        Returns:
            EpisodeSummary with the final tracking error.
        """
        if self.state is EpisodeState.ENDED:
            logging.debug("teardown() already ran for this episode")
            return self.summary
        self._require(EpisodeState.RUNNING, "teardown")

        logging.info(f"interrupted={interrupted}")

        try:
            if self.options.stop_on_end:
                self.drivetrain.stop()

            actual = abs(self.distance_sensor.get_distance_traveled())
            target = abs(self.distance)
            error_pct = (actual - target) / target * 100.0
            yaw = self.heading_sensor.get_yaw()
            elapsed = self.clock() - self.control.start_time

            logging.info(
                f"end: target={target:.3f}  actual={actual:.3f}  error={error_pct:.2f} pct  yaw={yaw:.2f}"
            )
            if abs(error_pct) > TRACKING_ERROR_WARN_PCT:
                logging.warning(
                    f"Final tracking error {error_pct:.2f}% exceeds {TRACKING_ERROR_WARN_PCT:.1f}%"
                )

            self.summary = EpisodeSummary(
                target=target,
                actual=actual,
                error_pct=error_pct,
                iterations=self.control.iterations,
                elapsed_time=elapsed,
                interrupted=interrupted,
                diverged=self.diverged,
                yaw=yaw,
            )
        finally:
            self._restore_field_frame()
            self.state = EpisodeState.ENDED

        logging.info(
            f"iterations={self.summary.iterations}  elapsed time={self.summary.elapsed_time:.3f}s"
        )
        return self.summary

    def get_diagnostics(self) -> Dict[str, float]:
        """Get diagnostic information for the latest tick.

        Returns:
            Feedback diagnostics plus tolerance, axis outputs, yaw, elapsed time and
            iteration count.
        """
        diagnostics = self.feedback.get_diagnostics()
        control = self.control if self.control is not None else ControlState()
        diagnostics.update(
            {
                "elapsed_time": control.elapsed_time,
                "tolerance": self.tolerance,
                "iteration": control.iterations,
                "axis_x": control.axis_x,
                "axis_y": control.axis_y,
                "yaw": control.yaw,
            }
        )
        return diagnostics
