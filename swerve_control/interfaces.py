"""Collaborator contracts consumed by the displacement controller.

The controller never owns hardware. It talks to whatever the surrounding
system supplies through these three protocols; one object may implement all
of them, as a typical swerve drive subsystem does.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class Drivetrain(Protocol):
    """Applies normalized per-axis drive commands to the motors."""

    def drive(self, throttle: float, strafe: float, rotation: float) -> None:
        """Drive with X (throttle), Y (strafe) and rotation in [-1, 1]."""
        ...

    def set_brake_mode(self, on: bool) -> None:
        ...

    def stop(self) -> None:
        ...

    def get_field_oriented(self) -> bool:
        ...

    def toggle_field_oriented(self) -> None:
        ...


@runtime_checkable
class DistanceSensor(Protocol):
    """Cumulative odometry distance since the last reset (meters)."""

    def get_distance_traveled(self) -> float:
        ...

    def reset_distance_traveled(self) -> None:
        ...


@runtime_checkable
class HeadingSensor(Protocol):
    """Chassis yaw. Units and sign convention belong to the implementer."""

    def get_yaw(self) -> float:
        ...

    def reset_yaw(self) -> None:
        ...
