"""Data collection and CSV logging for displacement episodes.

This module provides CSV data logging for:
- Per-tick controller diagnostics (profile setpoint, measurement, PID terms)
- Per-axis drive commands and yaw
- Final episode summary (target, actual, error percentage)
"""

import csv
import os
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, TextIO

from .config import RESULTS_DIR, TERM_BLUE, TERM_RESET

TICK_COLUMNS = [
    "timestamp",
    "iteration",
    "elapsed_time",
    "goal",
    "tolerance",
    "sp_position",
    "sp_velocity",
    "measured",
    "error",
    "integral",
    "derivative",
    "output",
    "axis_x",
    "axis_y",
    "yaw",
]
"""Column order of tick_data.csv."""


class DataCollector:
    """Manages CSV file creation and logging for one episode.

    Attributes:
        run_dir: Directory path for this run's output files.
        tick_csv_file: File handle for the per-tick CSV.
        tick_output_path: Path of tick_data.csv.
        summary_output_path: Path of summary.txt.
    """

    def __init__(self, output_dir: str = ".", run_dir: Optional[str] = None) -> None:
        """Initialize the data collector.

        Args:
            output_dir: Base directory for output files (default: current directory).
            run_dir: Optional specific run directory. If None, creates timestamped
                directory. Can also be set via RUN_DIR environment variable.

        Raises:
            ValueError: If output_dir is not a valid directory.
        """
        output_path = Path(output_dir)
        if output_path.exists() and not output_path.is_dir():
            raise ValueError(f"Output path exists but is not a directory: {output_dir}")

        self.tick_csv_file: Optional[TextIO] = None
        self.tick_csv_writer: Any = None

        # Determine run directory
        if run_dir:
            self.run_dir: Path = Path(run_dir)
        elif env_run_dir := os.environ.get("RUN_DIR"):
            self.run_dir = Path(env_run_dir)
        else:
            # Create timestamped directory: results/run_YYYYMMDD_HHMMSS/
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            self.run_dir = output_path / RESULTS_DIR / f"run_{timestamp}"

        self.run_dir.mkdir(parents=True, exist_ok=True)

        self.tick_output_path: Path = self.run_dir / "tick_data.csv"
        self.summary_output_path: Path = self.run_dir / "summary.txt"

    def setup(self) -> None:
        """Open tick_data.csv and write the header row.

        Must be called before writing data.
        """
        self.tick_csv_file = open(self.tick_output_path, "w", newline="")
        self.tick_csv_writer = csv.writer(self.tick_csv_file)
        self.tick_csv_writer.writerow(TICK_COLUMNS)
        self.tick_csv_file.flush()

        print(f"{TERM_BLUE}✓ Initialized data collection to {self.run_dir}/{TERM_RESET}")

    def log_tick(self, timestamp: float, diagnostics: Dict[str, float]) -> None:
        """Log one tick of controller diagnostics to CSV.

        Args:
            timestamp: Current time (seconds).
            diagnostics: Dictionary from DisplacementController.get_diagnostics().
        """
        self.tick_csv_writer.writerow(
            [timestamp] + [diagnostics[column] for column in TICK_COLUMNS[1:]]
        )
        if self.tick_csv_file:
            self.tick_csv_file.flush()

    def log_summary(self, summary: Dict[str, Any]) -> None:
        """Write the episode summary as key=value lines.

        Args:
            summary: Dictionary from EpisodeSummary.to_dict().
        """
        with open(self.summary_output_path, "w") as f:
            for key, value in summary.items():
                f.write(f"{key}={value}\n")
        print(f"{TERM_BLUE}✓ Saved episode summary to {self.summary_output_path.name}{TERM_RESET}")

    def cleanup(self) -> None:
        """Close the CSV file and log the output location."""
        if self.tick_csv_file:
            self.tick_csv_file.close()
            self.tick_csv_file = None

        print(f"{TERM_BLUE}✓ Saved episode data to {self.run_dir}/{TERM_RESET}")

    def __enter__(self) -> "DataCollector":
        """Context manager entry point.

        Returns:
            Self reference for use in with statement.
        """
        self.setup()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Context manager exit point - ensures cleanup is called."""
        self.cleanup()
