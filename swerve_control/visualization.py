"""
Visualization utilities for displacement episodes.

This module loads tick_data.csv written by the DataCollector and plots:
- Profile setpoint vs measured distance, with the tolerance band
- Position error and PID output over time
- Per-axis drive commands
"""

import csv
from pathlib import Path
from typing import Dict, List, Optional

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.axes import Axes
from matplotlib.figure import Figure

from .config import DRIVE_TOLERANCE, PLOT_BLUE, PLOT_ORANGE, PLOT_TAUPE


def load_csv_to_dict(csv_path: Path) -> Dict[str, np.ndarray]:
    """Load CSV file into dictionary of numpy arrays.

    Automatically converts numeric values to floats. Non-numeric values
    become NaN.

    Args:
        csv_path: Path to CSV file.

    Returns:
        Dictionary mapping column names to numpy arrays.

    Raises:
        FileNotFoundError: If the CSV file does not exist.
    """
    if not csv_path.exists():
        raise FileNotFoundError(f"CSV file not found: {csv_path}")

    with open(csv_path, newline="") as f:
        reader = csv.DictReader(f)
        data: Dict[str, List[float]] = {key: [] for key in (reader.fieldnames or [])}
        for row in reader:
            for key, value in row.items():
                try:
                    data[key].append(float(value))
                except (ValueError, TypeError):
                    data[key].append(np.nan)

    return {key: np.array(values) for key, values in data.items()}


def style_axis(ax: Axes, title: str = "", xlabel: str = "", ylabel: str = "") -> None:
    """Apply consistent labels and grid to a matplotlib axis."""
    if title:
        ax.set_title(title, fontweight="bold")
    if xlabel:
        ax.set_xlabel(xlabel)
    if ylabel:
        ax.set_ylabel(ylabel)
    ax.grid(True, alpha=0.3, linestyle="--", linewidth=0.5)


def plot_distance_tracking(
    data: Dict[str, np.ndarray],
    tolerance: Optional[float] = None,
    save_path: Optional[Path] = None,
) -> Figure:
    """Plot setpoint vs measured distance, and error/output over time.

    Args:
        data: Columns from tick_data.csv.
        tolerance: Acceptance band drawn around the goal (meters). Default:
            the tolerance recorded with the run, or DRIVE_TOLERANCE for data
            without a tolerance column.
        save_path: Optional path to save the figure.

    Returns:
        Matplotlib figure object.
    """
    fig, (ax1, ax2) = plt.subplots(2, 1, figsize=(12, 8), sharex=True)

    t = data["elapsed_time"]
    goal = float(data["goal"][0]) if len(data["goal"]) else 0.0
    if tolerance is None:
        recorded = data.get("tolerance")
        tolerance = float(recorded[0]) if recorded is not None and len(recorded) else DRIVE_TOLERANCE

    ax1.plot(t, data["sp_position"], label="Profile setpoint", color=PLOT_BLUE, linewidth=2)
    ax1.plot(t, data["measured"], label="Measured", color=PLOT_ORANGE, alpha=0.8)
    ax1.axhspan(goal - tolerance, goal + tolerance, color=PLOT_TAUPE, alpha=0.2, label="Tolerance")
    style_axis(ax1, title="Distance Tracking", ylabel="Distance (m)")
    ax1.legend(loc="best")

    ax2.plot(t, data["error"], label="Error", color=PLOT_ORANGE)
    ax2.plot(t, data["output"], label="Output", color=PLOT_BLUE)
    ax2.axhline(0.0, color=PLOT_TAUPE, linewidth=0.8)
    style_axis(ax2, title="Error and Controller Output", xlabel="Time (s)", ylabel="m / normalized")
    ax2.legend(loc="best")

    plt.tight_layout()

    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches="tight")

    return fig


def plot_axis_outputs(data: Dict[str, np.ndarray], save_path: Optional[Path] = None) -> Figure:
    """Plot per-axis drive commands over time.

    Args:
        data: Columns from tick_data.csv.
        save_path: Optional path to save the figure.

    Returns:
        Matplotlib figure object.
    """
    fig, ax = plt.subplots(figsize=(12, 5))

    t = data["elapsed_time"]
    ax.plot(t, data["axis_x"], label="X (throttle)", color=PLOT_ORANGE)
    ax.plot(t, data["axis_y"], label="Y (strafe)", color=PLOT_BLUE)
    style_axis(ax, title="Axis Commands", xlabel="Time (s)", ylabel="Command (normalized)")
    ax.legend(loc="best")

    plt.tight_layout()

    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches="tight")

    return fig


def plot_run_summary(run_dir: Path, save_plots: bool = False, show_plots: bool = True) -> None:
    """Generate summary plots for a complete episode.

    Args:
        run_dir: Directory containing tick_data.csv.
        save_plots: If True, save plots to run directory.
        show_plots: If True, display plots interactively.

    Raises:
        FileNotFoundError: If tick_data.csv is not found.
    """
    data = load_csv_to_dict(run_dir / "tick_data.csv")

    tracking_path = run_dir / "distance_tracking.png" if save_plots else None
    axis_path = run_dir / "axis_outputs.png" if save_plots else None

    plot_distance_tracking(data, save_path=tracking_path)
    plot_axis_outputs(data, save_path=axis_path)

    if show_plots:
        plt.show()
    else:
        plt.close("all")
