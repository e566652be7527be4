"""Static plots of a simulation run: trajectory map and control history."""

import matplotlib.pyplot as plt
import numpy as np
from pathlib import Path
from typing import Optional
from loguru import logger

from ..simulation.main_loop import RunResults


class ResultsPlotter:
    """Static plots of the ground truth of a simulation run."""

    def __init__(self, results: RunResults):
        if results.steps == 0:
            raise ValueError("Results contain no steps")
        self.results = results

    def generate(self, output_path: Optional[str] = None, show: bool = False):
        """Create the trajectory map and the control history.

        Args:
            output_path: Path to save the image (not saved if None)
            show: Display the figure interactively

        Returns:
            The matplotlib figure (closed unless shown)
        """
        fig, (ax_map, ax_ctrl) = plt.subplots(
            1, 2, figsize=(16, 7), gridspec_kw={'width_ratios': [3, 2]}
        )

        self._plot_map(ax_map)
        self._plot_controls(ax_ctrl)

        fig.suptitle("Simulation Ground Truth", fontsize=14)
        fig.tight_layout()

        if output_path is not None:
            output_path = Path(output_path)
            output_path.parent.mkdir(parents=True, exist_ok=True)
            fig.savefig(output_path, dpi=100)
            logger.info(f"Results plot saved to {output_path}")

        if show:
            plt.show()
        else:
            plt.close(fig)
        return fig

    def _plot_map(self, ax):
        r = self.results
        if r.landmarks is not None and len(r.landmarks) > 0:
            ax.plot(r.landmarks[:, 0], r.landmarks[:, 1], 'k+', markersize=8, label='Landmarks', zorder=1)
        if r.waypoints is not None and len(r.waypoints) > 0:
            ax.plot(r.waypoints[:, 0], r.waypoints[:, 1], 'ms--', alpha=0.5, label='Waypoints', zorder=1)

        ax.plot(r.poses[:, 0], r.poses[:, 1], 'b-', linewidth=2, label='Vehicle', zorder=2)
        ax.plot(r.poses[0, 0], r.poses[0, 1], 'go', label='Start', zorder=3)
        ax.plot(r.poses[-1, 0], r.poses[-1, 1], 'ro', label='End', zorder=3)

        ax.set_title("Trajectory Map")
        ax.set_xlabel("x [m]")
        ax.set_ylabel("y [m]")
        ax.set_aspect('equal')
        ax.grid(True)
        ax.legend(loc='best', fontsize=9)

    def _plot_controls(self, ax):
        r = self.results
        ax.plot(r.times, r.controls[:, 0], color='blue', label='Speed [m/s]')
        ax.set_xlabel("Time [s]")
        ax.set_ylabel("Speed", color='blue')
        ax2 = ax.twinx()
        ax2.plot(r.times, np.degrees(r.controls[:, 1]), color='green', linestyle='--', label='Steer [deg/s]')
        ax2.set_ylabel("Steer", color='green')
        ax.set_title("Control Inputs")
        ax.grid(True, alpha=0.3)


def plot_results(results: RunResults, output_path: Optional[str] = None, show: bool = False):
    """Convenience function."""
    return ResultsPlotter(results).generate(output_path, show)
