"""Simulated swerve drivetrain for offline episodes and tests.

The simulation implements the Drivetrain, DistanceSensor and HeadingSensor
contracts in one object. Each drive() call applies the command for one
scheduler period:
- Normalized (throttle, strafe) commands scale to SIM_MAX_SPEED
- First-order velocity response with time constant SIM_TIME_CONSTANT
- Robot-relative commands are rotated by the current yaw into the field frame
- Cumulative path length is reported as the traveled distance
"""

import math
from typing import Any, List, Optional, Tuple

import numpy as np

from .config import (
    SIM_DISTANCE_NOISE_STD,
    SIM_MAX_SPEED,
    SIM_TIME_CONSTANT,
    SIM_YAW_DRIFT_RATE,
    TICK_PERIOD,
)
from .errors import SensorFault


class SimulatedSwerveDrive:
    """Kinematic swerve chassis with odometry and a drifting gyro.

    Attributes:
        time: Simulated time (seconds).
        x, y: Field position (meters).
        vx, vy: Field velocity (m/s).
        yaw: Heading (degrees, + is counter-clockwise).
        distance: Cumulative path length since the last reset (meters).
        field_oriented: Whether drive commands are field-relative.
        brake_mode: Whether stopped motors hold position.
        calls: Every collaborator call as (name, args), in order.
        fault: When True, sensor reads raise SensorFault.
    """

    def __init__(
        self,
        dt: float = TICK_PERIOD,
        max_speed: float = SIM_MAX_SPEED,
        time_constant: float = SIM_TIME_CONSTANT,
        noise_std: float = SIM_DISTANCE_NOISE_STD,
        yaw_drift_rate: float = SIM_YAW_DRIFT_RATE,
        field_oriented: bool = False,
        initial_distance: float = 0.0,
        seed: Optional[int] = None,
    ) -> None:
        """Initialize the simulated drive.

        Args:
            dt: Duration each drive() command is applied for (seconds).
            max_speed: Chassis speed at full command (m/s).
            time_constant: Velocity response time constant (seconds).
            noise_std: Gaussian noise on distance readings (meters).
            yaw_drift_rate: Gyro drift while moving (rad/s).
            field_oriented: Initial reference frame.
            initial_distance: Stale odometry value present before any reset.
            seed: Random seed for reproducible noise.
        """
        self.dt = dt
        self.max_speed = max_speed
        self.time_constant = time_constant
        self.noise_std = noise_std
        self.yaw_drift_rate = yaw_drift_rate
        self.rng = np.random.default_rng(seed)

        self.time: float = 0.0
        self.x: float = 0.0
        self.y: float = 0.0
        self.vx: float = 0.0
        self.vy: float = 0.0
        self.yaw: float = 0.0
        self.distance: float = initial_distance

        self.field_oriented = field_oriented
        self.brake_mode = False
        self.fault = False
        self.calls: List[Tuple[str, Tuple[Any, ...]]] = []

    def _record(self, name: str, *args: Any) -> None:
        self.calls.append((name, args))

    def call_names(self) -> List[str]:
        return [name for name, _ in self.calls]

    def clock(self) -> float:
        """Simulated time in seconds; advances by dt on every drive() call."""
        return self.time

    # ------------------------------------------------------------------
    # Drivetrain
    # ------------------------------------------------------------------

    def drive(self, throttle: float, strafe: float, rotation: float) -> None:
        self._record("drive", throttle, strafe, rotation)

        # Command in the commanded frame, then rotate into the field frame
        cmd_x = max(-1.0, min(1.0, throttle)) * self.max_speed
        cmd_y = max(-1.0, min(1.0, strafe)) * self.max_speed
        if not self.field_oriented:
            theta = math.radians(self.yaw)
            cmd_x, cmd_y = (
                cmd_x * math.cos(theta) - cmd_y * math.sin(theta),
                cmd_x * math.sin(theta) + cmd_y * math.cos(theta),
            )

        self._advance(cmd_x, cmd_y)

    def _advance(self, cmd_vx: float, cmd_vy: float) -> None:
        self.time += self.dt
        alpha = self.dt / (self.time_constant + self.dt)
        self.vx += (cmd_vx - self.vx) * alpha
        self.vy += (cmd_vy - self.vy) * alpha

        dx = self.vx * self.dt
        dy = self.vy * self.dt
        self.x += dx
        self.y += dy

        step = math.hypot(dx, dy)
        self.distance += step
        if step > 0:
            self.yaw += math.degrees(self.yaw_drift_rate * self.dt)

    def set_brake_mode(self, on: bool) -> None:
        self._record("set_brake_mode", on)
        self.brake_mode = on

    def stop(self) -> None:
        self._record("stop")
        if self.brake_mode:
            self.vx = 0.0
            self.vy = 0.0

    def get_field_oriented(self) -> bool:
        return self.field_oriented

    def toggle_field_oriented(self) -> None:
        self._record("toggle_field_oriented")
        self.field_oriented = not self.field_oriented

    # ------------------------------------------------------------------
    # Sensors
    # ------------------------------------------------------------------

    def get_distance_traveled(self) -> float:
        if self.fault:
            raise SensorFault("Simulated odometry fault")
        if self.noise_std > 0:
            return self.distance + float(self.rng.normal(0.0, self.noise_std))
        return self.distance

    def reset_distance_traveled(self) -> None:
        self._record("reset_distance_traveled")
        self.distance = 0.0

    def get_yaw(self) -> float:
        if self.fault:
            raise SensorFault("Simulated gyro fault")
        return self.yaw

    def reset_yaw(self) -> None:
        self._record("reset_yaw")
        self.yaw = 0.0
