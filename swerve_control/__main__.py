"""
Main entry point when running the swerve_control module with python -m.

Runs one displacement episode against the simulated swerve drive.
"""

import argparse
import asyncio
import logging
import sys

from .config import SIM_DISTANCE_NOISE_STD, TERM_BLUE, TERM_RESET, TICK_PERIOD
from .controller import DisplacementController
from .data_collector import DataCollector
from .errors import ConfigurationError
from .feedback import FeedbackGains
from .options import parse_episode_flags
from .runner import run_episode, setup_logging
from .sim import SimulatedSwerveDrive


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Drive a simulated swerve chassis to a target displacement"
    )
    target = parser.add_mutually_exclusive_group()
    target.add_argument("--x", type=float, default=None, help="Distance along X in meters (+ forward)")
    target.add_argument("--distance", type=float, default=None, help="Straight-line distance in meters")
    parser.add_argument("--y", type=float, default=0.0, help="Distance along Y in meters (+ left)")
    parser.add_argument("--heading", type=float, default=0.0, help="Heading in degrees (+ left), with --distance")
    parser.add_argument("--feedforward", action="store_true", help="Add the profile velocity to the output")
    parser.add_argument("--noise", type=float, default=SIM_DISTANCE_NOISE_STD, help="Distance noise std (m)")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for sensor noise")
    parser.add_argument("--period", type=float, default=TICK_PERIOD, help="Tick period in seconds")
    parser.add_argument("--timeout", type=float, default=None, help="Interrupt after this many seconds")
    parser.add_argument("--output-dir", type=str, default=".", help="Base directory for results/")
    parser.add_argument("--no-record", action="store_true", help="Do not write CSV data")
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable verbose logging with timestamps"
    )
    return parser


async def main(args: argparse.Namespace, options) -> None:
    drive = SimulatedSwerveDrive(dt=args.period, noise_std=args.noise, seed=args.seed)
    gains = FeedbackGains(use_feedforward=args.feedforward)

    # Profile time follows the simulation, not the wall clock
    if args.distance is not None:
        controller = DisplacementController.polar(
            drive, args.distance, args.heading, options, gains=gains, clock=drive.clock
        )
    else:
        x = args.x if args.x is not None else 0.0
        controller = DisplacementController.cartes(
            drive, x, args.y, options, gains=gains, clock=drive.clock
        )

    if args.no_record:
        summary = await run_episode(controller, period=args.period, timeout=args.timeout)
    else:
        with DataCollector(output_dir=args.output_dir) as collector:
            summary = await run_episode(
                controller, period=args.period, data_collector=collector, timeout=args.timeout
            )

    logging.info(
        f"{TERM_BLUE}\033[1m→ target={summary.target:.3f}m  actual={summary.actual:.3f}m  "
        f"error={summary.error_pct:.2f}%  position=({drive.x:.3f}, {drive.y:.3f}){TERM_RESET}"
    )


if __name__ == "__main__":
    options, remaining_args = parse_episode_flags()
    args = build_parser().parse_args(remaining_args)

    setup_logging(args.verbose)

    try:
        asyncio.run(main(args, options))
    except ConfigurationError as e:
        logging.error(f"Invalid target: {e}")
        sys.exit(2)
    except KeyboardInterrupt:
        logging.info("\nExiting...")
        sys.exit(0)
