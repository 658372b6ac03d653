"""Swerve Control - Profiled Displacement Driving for Omnidirectional Chassis

Drives a swerve-style chassis in a straight line to a target 2D displacement
using a trapezoidal motion profile tracked by PID feedback on the measured
traveled distance.

## Architecture Overview

The control pipeline has four layers, run once per scheduler tick:

### Layer 1: Motion Profile (profile.py)
Time-optimal trapezoidal profile from rest at 0 to rest at the goal distance.
- Pure function of elapsed time (no drift at variable tick rates)
- Output: position and velocity setpoints

### Layer 2: Feedback Control (feedback.py)
PID on position error between the profile setpoint and measured distance.
- Anti-windup: clamped integral, reset every episode
- Optional velocity feed-forward
- Output: scalar drive command in [-1, 1]

### Layer 3: Axis Decomposition (model.py)
Splits the scalar command into X/Y axis commands along the target direction.
- Ratios fixed once at construction
- Dominant axis at full scale

### Layer 4: Episode Orchestration (controller.py)
Setup, tick, termination and teardown for one episode.
- Termination from the live distance reading, not the PID goal predicate
- Teardown restores the field-oriented frame on every exit path

## Modules

- `config.py` - Centralized configuration parameters with documentation
- `profile.py` - Trapezoidal motion profile
- `feedback.py` - Profiled PID controller
- `model.py` - Axis decomposition
- `controller.py` - Displacement controller (episode lifecycle)
- `options.py` - Stop/brake/field-oriented episode options
- `interfaces.py` - Drivetrain and sensor contracts
- `errors.py` - Exception types
- `runner.py` - Fixed-period scheduler and logging setup
- `sim.py` - Simulated swerve drive
- `data_collector.py` - CSV logging per tick
- `visualization.py`, `plot_results.py` - Post-run plots

## Quick Start

```python
import asyncio
from swerve_control import DisplacementController, SimulatedSwerveDrive
from swerve_control.runner import run_episode

drive = SimulatedSwerveDrive()
controller = DisplacementController.cartes(drive, 3.0, 3.0)
summary = asyncio.run(run_episode(controller))
```

Or use the command-line interface:
```bash
python -m swerve_control --x 3.0 --y 3.0 --field-oriented
```
"""

__version__ = "0.1.0"

# Export key classes for convenience
from .controller import DisplacementController, EpisodeSummary
from .errors import ConfigurationError, EpisodeStateError, SensorFault
from .feedback import FeedbackGains, ProfiledFeedbackController
from .model import decompose
from .options import Brakes, EpisodeOptions, FieldOriented, StopMotors
from .profile import MotionConstraints, TrapezoidProfile
from .sim import SimulatedSwerveDrive

__all__ = [
    "DisplacementController",
    "EpisodeSummary",
    "ConfigurationError",
    "EpisodeStateError",
    "SensorFault",
    "FeedbackGains",
    "ProfiledFeedbackController",
    "decompose",
    "Brakes",
    "EpisodeOptions",
    "FieldOriented",
    "StopMotors",
    "MotionConstraints",
    "TrapezoidProfile",
    "SimulatedSwerveDrive",
]
