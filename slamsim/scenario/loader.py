"""Scenario loading from plain-text numeric tables.

A scenario is a directory holding three whitespace-delimited files, one
sample per row:

- ``x0.txt``: initial pose ``x y heading`` (one row)
- ``lm.txt``: landmark positions ``x y z`` (N rows)
- ``wp.txt``: waypoints ``x y`` (M rows)
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Union
import numpy as np
from loguru import logger

from ..core.data_structures import Pose
from ..core.errors import ScenarioNotFoundError, MalformedScenarioError

INITIAL_POSE_FILE = 'x0.txt'
LANDMARKS_FILE = 'lm.txt'
WAYPOINTS_FILE = 'wp.txt'

# Scenarios shipped with the package
BUNDLED_SCENARIO_DIR = Path(__file__).resolve().parent.parent / 'scenarios'


@dataclass(frozen=True, eq=False)
class Scenario:
    """Static description of a simulation run.

    Attributes:
        initial_pose: Pose of the vehicle at time zero
        landmarks: Landmark positions [n_landmarks, 3]
        waypoints: Waypoints to visit in order [n_waypoints, 2]
        name: Identifier the scenario was loaded from
    """
    initial_pose: Pose
    landmarks: np.ndarray
    waypoints: np.ndarray
    name: str = ''

    def __post_init__(self):
        landmarks = np.array(self.landmarks, dtype=float)
        if landmarks.size == 0:
            landmarks = landmarks.reshape(0, 3)
        waypoints = np.array(self.waypoints, dtype=float)
        if landmarks.ndim != 2 or landmarks.shape[1] != 3:
            raise MalformedScenarioError(f"Landmarks must be (n, 3), got shape {landmarks.shape}")
        if waypoints.ndim != 2 or waypoints.shape[1] != 2:
            raise MalformedScenarioError(f"Waypoints must be (n, 2), got shape {waypoints.shape}")
        if waypoints.shape[0] == 0:
            raise MalformedScenarioError("Scenario must contain at least one waypoint")
        landmarks.setflags(write=False)
        waypoints.setflags(write=False)
        object.__setattr__(self, 'landmarks', landmarks)
        object.__setattr__(self, 'waypoints', waypoints)

    @property
    def n_landmarks(self) -> int:
        """Number of landmarks."""
        return self.landmarks.shape[0]

    @property
    def n_waypoints(self) -> int:
        """Number of waypoints."""
        return self.waypoints.shape[0]


def _read_table(path: Path, n_cols: int, allow_empty: bool = False) -> np.ndarray:
    """Read a numeric table with a fixed number of columns."""
    if not path.is_file():
        raise ScenarioNotFoundError(f"Scenario file not found: {path}")

    try:
        text = path.read_text(encoding='utf-8')
    except UnicodeDecodeError as e:
        raise MalformedScenarioError(f"{path} is not a text file: {e}") from e

    if not text.strip():
        if allow_empty:
            return np.empty((0, n_cols))
        raise MalformedScenarioError(f"{path} contains no data")

    try:
        table = np.loadtxt(text.splitlines(), dtype=float, ndmin=2)
    except ValueError as e:
        raise MalformedScenarioError(f"Failed to parse {path}: {e}") from e

    if table.size == 0:
        if allow_empty:
            return np.empty((0, n_cols))
        raise MalformedScenarioError(f"{path} contains no data")
    if table.shape[1] != n_cols:
        raise MalformedScenarioError(
            f"{path} must have {n_cols} columns, got {table.shape[1]}"
        )
    if not np.all(np.isfinite(table)):
        raise MalformedScenarioError(f"{path} contains non-finite values")
    return table


def resolve_scenario_dir(
    scenario: Union[str, Path],
    search_paths: Optional[Iterable[Union[str, Path]]] = None
) -> Path:
    """Resolve a scenario identifier to its directory.

    Args:
        scenario: Directory path or scenario name
        search_paths: Directories searched for a scenario name. Defaults to
            the bundled scenarios and the current working directory.

    Returns:
        Path to the scenario directory

    Raises:
        ScenarioNotFoundError: If no directory matches
    """
    candidate = Path(scenario)
    if candidate.is_dir():
        return candidate

    if search_paths is None:
        search_paths = [BUNDLED_SCENARIO_DIR, Path.cwd()]

    tried: List[str] = [str(candidate)]
    for base in search_paths:
        path = Path(base) / candidate
        if path.is_dir():
            return path
        tried.append(str(path))

    raise ScenarioNotFoundError(
        f"Scenario '{scenario}' not found (tried: {', '.join(tried)})"
    )


def load_scenario(
    scenario: Union[str, Path],
    search_paths: Optional[Iterable[Union[str, Path]]] = None
) -> Scenario:
    """Load a scenario from disk.

    Args:
        scenario: Directory path or scenario name
        search_paths: Directories searched for a scenario name

    Returns:
        Loaded scenario

    Raises:
        ScenarioNotFoundError: If the scenario or one of its files is missing
        MalformedScenarioError: If a file is unparsable or has the wrong shape
    """
    directory = resolve_scenario_dir(scenario, search_paths)

    x0 = _read_table(directory / INITIAL_POSE_FILE, 3)
    if x0.shape[0] != 1:
        raise MalformedScenarioError(
            f"{directory / INITIAL_POSE_FILE} must contain exactly one pose, got {x0.shape[0]}"
        )
    landmarks = _read_table(directory / LANDMARKS_FILE, 3, allow_empty=True)
    waypoints = _read_table(directory / WAYPOINTS_FILE, 2)

    result = Scenario(
        initial_pose=Pose.from_array(x0[0]),
        landmarks=landmarks,
        waypoints=waypoints,
        name=str(scenario),
    )
    logger.info(
        f"Scenario '{scenario}' loaded from {directory}: "
        f"{result.n_landmarks} landmarks, {result.n_waypoints} waypoints"
    )
    return result


def save_scenario(scenario: Scenario, directory: Union[str, Path]) -> Path:
    """Write a scenario in the on-disk format read by :func:`load_scenario`.

    Args:
        scenario: Scenario to save
        directory: Target directory (created if needed)

    Returns:
        Path to the directory
    """
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)

    np.savetxt(directory / INITIAL_POSE_FILE, scenario.initial_pose.to_array()[None, :])
    np.savetxt(directory / LANDMARKS_FILE, scenario.landmarks)
    np.savetxt(directory / WAYPOINTS_FILE, scenario.waypoints)

    logger.debug(f"Scenario saved to {directory}")
    return directory
