"""
Per-episode options for the displacement controller.

This module defines the three caller-chosen switches (stop motors, brake mode,
field-oriented driving) and their command-line flags.
"""

from dataclasses import dataclass
from enum import Enum
import argparse
import sys


class StopMotors(Enum):
    """Whether to stop the drivetrain when the episode ends."""

    DONT_STOP = "dontStop"
    STOP = "stop"


class Brakes(Enum):
    """Motor idle mode set at episode start. Only meaningful when stopping."""

    OFF = "off"
    ON = "on"


class FieldOriented(Enum):
    """Interpret drive commands relative to the field instead of the chassis."""

    OFF = "off"
    ON = "on"


@dataclass(frozen=True)
class EpisodeOptions:
    """Lifecycle configuration for one episode."""

    stop: StopMotors = StopMotors.STOP
    brakes: Brakes = Brakes.ON
    field_oriented: FieldOriented = FieldOriented.OFF

    @property
    def stop_on_end(self) -> bool:
        return self.stop is StopMotors.STOP

    @property
    def brake_on_stop(self) -> bool:
        return self.brakes is Brakes.ON

    @property
    def use_field_frame(self) -> bool:
        return self.field_oriented is FieldOriented.ON

    def __str__(self):
        """Human-readable description of the options."""
        return f"stop={self.stop.value}  brakes={self.brakes.value}  fieldOriented={self.field_oriented.value}"

    def to_dict(self):
        """Convert to dictionary for logging."""
        return {
            'stop': self.stop.value,
            'brakes': self.brakes.value,
            'field_oriented': self.field_oriented.value,
        }


def parse_episode_flags(args=None):
    """
    Parse command-line flags into EpisodeOptions.

    Args:
        args: List of command-line arguments (default: sys.argv[1:])

    Returns:
        tuple: (EpisodeOptions, remaining_args)
            - EpisodeOptions with appropriate settings
            - List of remaining arguments not consumed
    """
    parser = argparse.ArgumentParser(add_help=False)

    parser.add_argument('--dont-stop', action='store_true',
                        help='Leave the motors running when the episode ends')
    parser.add_argument('--brakes-off', action='store_true',
                        help='Coast instead of braking when stopped')
    parser.add_argument('--field-oriented', action='store_true',
                        help='Drive relative to the field for this episode')

    # Parse known args, keep the rest
    if args is None:
        args = sys.argv[1:]

    known_args, remaining_args = parser.parse_known_args(args)

    options = EpisodeOptions(
        stop=StopMotors.DONT_STOP if known_args.dont_stop else StopMotors.STOP,
        brakes=Brakes.OFF if known_args.brakes_off else Brakes.ON,
        field_oriented=FieldOriented.ON if known_args.field_oriented else FieldOriented.OFF,
    )

    return options, remaining_args
