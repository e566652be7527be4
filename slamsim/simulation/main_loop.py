"""Main loop driving a simulator and an event consumer."""

from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Protocol, Sequence
import numpy as np
import yaml
from loguru import logger

from ..core.data_structures import Event, EventType
from .simulator import Simulator


class EventConsumer(Protocol):
    """Anything that processes the event stream, typically an estimator."""

    def process_events(self, events: Sequence[Event]) -> None:
        ...


@dataclass
class RunResults:
    """Ground-truth record of a simulation run.

    Attributes:
        times: Simulation time after each step [n_steps]
        poses: True pose after each step [n_steps, 3]
        controls: True control after each step [n_steps, 2]
        event_counts: Number of events emitted per event type name
        steps: Number of steps executed
        finished: Whether the vehicle completed all waypoints
        landmarks: Landmark positions [n_landmarks, 3]
        waypoints: Waypoints [n_waypoints, 2]
    """
    times: np.ndarray
    poses: np.ndarray
    controls: np.ndarray
    event_counts: Dict[str, int] = field(default_factory=dict)
    steps: int = 0
    finished: bool = False
    landmarks: Optional[np.ndarray] = None
    waypoints: Optional[np.ndarray] = None

    @property
    def final_pose(self) -> np.ndarray:
        """Last recorded pose [x, y, heading]."""
        if len(self.poses) == 0:
            raise ValueError("No steps recorded")
        return self.poses[-1]


def run_simulation(
    simulator: Simulator,
    consumer: Optional[EventConsumer] = None,
    max_steps: Optional[int] = None
) -> RunResults:
    """Run a simulator until it finishes, feeding each batch to the consumer.

    Args:
        simulator: Simulator to drive; started if not already running
        consumer: Receiver of the event batches
        max_steps: Stop after this many steps even if not finished

    Returns:
        Recorded ground truth of the run
    """
    if not simulator.keep_running():
        simulator.start()

    times: List[float] = []
    poses: List[np.ndarray] = []
    controls: List[np.ndarray] = []
    counts: Counter = Counter()

    logger.info(
        "Running simulation"
        + (f" for at most {max_steps} steps" if max_steps is not None else "")
    )

    while simulator.keep_running():
        if max_steps is not None and len(times) >= max_steps:
            logger.warning(f"Maximum number of steps ({max_steps}) reached before the last waypoint")
            break

        events = simulator.step()
        counts.update(event.kind.name for event in events)
        if consumer is not None:
            consumer.process_events(events)

        truth = simulator.get_ground_truth()
        times.append(truth.current_time)
        poses.append(truth.pose.to_array())
        controls.append(truth.control.to_array())

        if len(times) % 100 == 0:
            logger.info(
                f"Step {len(times)}, t={truth.current_time:.1f}s, "
                f"pose=({truth.pose.x:.1f}, {truth.pose.y:.1f}), "
                f"waypoint={simulator.waypoint_index}"
            )

    full = simulator.get_ground_truth(include_full_state=True)
    results = RunResults(
        times=np.array(times),
        poses=np.array(poses).reshape(-1, 3),
        controls=np.array(controls).reshape(-1, 2),
        event_counts={kind.name: counts.get(kind.name, 0) for kind in EventType},
        steps=len(times),
        finished=not simulator.keep_running(),
        landmarks=full.landmarks,
        waypoints=full.waypoints,
    )
    logger.info(f"Simulation complete: {results.steps} steps, finished={results.finished}")
    return results


def save_results(results: RunResults, output_path: str) -> Path:
    """Save run results to a directory.

    Writes ``trajectory.npz`` with the ground-truth arrays and
    ``summary.yaml`` with the event counts and final pose.

    Args:
        results: Results to save
        output_path: Output directory

    Returns:
        Path to the output directory
    """
    output_dir = Path(output_path)
    output_dir.mkdir(parents=True, exist_ok=True)

    trajectory_file = output_dir / "trajectory.npz"
    np.savez(
        trajectory_file,
        times=results.times,
        poses=results.poses,
        controls=results.controls,
        landmarks=results.landmarks if results.landmarks is not None else np.empty((0, 3)),
        waypoints=results.waypoints if results.waypoints is not None else np.empty((0, 2)),
    )

    summary = {
        'steps': int(results.steps),
        'finished': bool(results.finished),
        'total_time': float(results.times[-1]) if results.steps else 0.0,
        'event_counts': {k: int(v) for k, v in results.event_counts.items()},
        'final_pose': results.poses[-1].tolist() if results.steps else None,
    }
    summary_file = output_dir / "summary.yaml"
    with open(summary_file, 'w') as f:
        yaml.safe_dump(summary, f, default_flow_style=False, indent=2)

    logger.info(f"Saved results to {output_dir}")
    return output_dir
