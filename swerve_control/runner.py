#!/usr/bin/env python3
"""
Fixed-period scheduler for displacement episodes.

This module runs a DisplacementController the way a command scheduler does:
setup once, then tick and check termination every period until the episode
finishes or is interrupted, then teardown exactly once. Teardown runs on every
exit path, including exceptions raised by collaborators.
"""

import asyncio
import logging
import signal
import time
from typing import Any, Optional

from .config import TERM_BLUE, TERM_RESET, TICK_PERIOD
from .controller import DisplacementController, EpisodeSummary
from .data_collector import DataCollector


class CustomFormatter(logging.Formatter):
    """Custom logging formatter that removes timestamps from INFO messages.

    This formatter provides clean console output by showing INFO messages without
    timestamps while preserving full context for WARNING, ERROR, and DEBUG messages.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record based on its level.

        Args:
            record: The log record to format.

        Returns:
            Formatted log message string.
        """
        if record.levelno == logging.INFO:
            return record.getMessage()
        else:
            return f"{self.formatTime(record, self.datefmt)} - {record.levelname} - {record.getMessage()}"


def setup_logging(verbose: bool = False) -> None:
    """Configure logging based on verbosity level.

    Args:
        verbose: If True, show all levels with timestamps. If False, show INFO
                 without timestamps and WARNING/ERROR with timestamps.
    """
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    else:
        handler = logging.StreamHandler()
        formatter = CustomFormatter(datefmt="%Y-%m-%d %H:%M:%S")
        handler.setFormatter(formatter)
        logger = logging.getLogger()
        logger.setLevel(logging.INFO)
        logger.addHandler(handler)


class EpisodeRunner:
    """Drives one controller episode on a fixed period.

    Attributes:
        controller: The episode being run.
        period: Tick period (seconds).
        data_collector: Optional per-tick CSV logger.
        timeout: Optional wall-clock limit (seconds). The controller has no
            timeout of its own; exceeding this interrupts the episode.
        should_stop: Flag requesting interruption at the next tick boundary.
    """

    def __init__(
        self,
        controller: DisplacementController,
        period: float = TICK_PERIOD,
        data_collector: Optional[DataCollector] = None,
        timeout: Optional[float] = None,
    ) -> None:
        """Initialize the runner.

        Args:
            controller: Controller in the idle state.
            period: Tick period in seconds (default: TICK_PERIOD). 0 runs
                ticks back to back, yielding to the event loop between them.
            data_collector: Optional DataCollector, already set up.
            timeout: Optional limit on episode duration (seconds).

        Raises:
            ValueError: If period or timeout is negative.
        """
        if period < 0:
            raise ValueError(f"Tick period must be non-negative, got {period}")
        if timeout is not None and timeout < 0:
            raise ValueError(f"Timeout must be non-negative, got {timeout}")

        self.controller = controller
        self.period = period
        self.data_collector = data_collector
        self.timeout = timeout
        self.should_stop: bool = False
        self.ticks: int = 0

    def stop(self) -> None:
        """Signal the runner to interrupt the episode."""
        self.should_stop = True

    async def run(self) -> EpisodeSummary:
        """Run the episode to completion or interruption.

        Returns:
            EpisodeSummary from the controller's teardown.

        Raises:
            Any exception raised by a tick, after teardown has run.
        """
        controller = self.controller
        interrupted = False
        summary: Optional[EpisodeSummary] = None

        controller.setup()
        start = time.monotonic()
        logging.info(f"{TERM_BLUE}✓ Running displacement episode{TERM_RESET}")

        try:
            while True:
                if self.should_stop:
                    interrupted = True
                    break

                controller.tick()
                self.ticks += 1

                if self.data_collector is not None:
                    self.data_collector.log_tick(time.time(), controller.get_diagnostics())

                if controller.is_finished():
                    break

                if self.timeout is not None and time.monotonic() - start > self.timeout:
                    logging.warning(f"Episode timed out after {self.timeout:.1f}s")
                    interrupted = True
                    break

                await asyncio.sleep(self.period)
        except BaseException:
            interrupted = True
            raise
        finally:
            summary = controller.teardown(interrupted)
            if self.data_collector is not None and summary is not None:
                self.data_collector.log_summary(summary.to_dict())

        return summary


async def run_episode(
    controller: DisplacementController,
    period: float = TICK_PERIOD,
    data_collector: Optional[DataCollector] = None,
    timeout: Optional[float] = None,
    handle_signals: bool = True,
) -> EpisodeSummary:
    """Run one episode with SIGINT/SIGTERM mapped to interruption.

    Args:
        controller: Controller in the idle state.
        period: Tick period (seconds).
        data_collector: Optional DataCollector, already set up.
        timeout: Optional limit on episode duration (seconds).
        handle_signals: Install signal handlers on the running loop.

    Returns:
        EpisodeSummary from teardown.
    """
    runner = EpisodeRunner(controller, period=period, data_collector=data_collector, timeout=timeout)

    if handle_signals:
        loop = asyncio.get_running_loop()

        def signal_handler(*_: Any) -> None:
            """Handle shutdown signals (SIGINT, SIGTERM)."""
            logging.info("\nShutdown signal received...")
            runner.stop()

        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, signal_handler)

        try:
            return await runner.run()
        finally:
            for sig in (signal.SIGINT, signal.SIGTERM):
                loop.remove_signal_handler(sig)

    return await runner.run()
