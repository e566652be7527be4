"""Core data structures for the vehicle event simulator.

This module defines the state, control, event and ground-truth types shared
by every component of the simulator.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Optional, Tuple
import numpy as np

from .angles import normalize_angle


class SimulatorStatus(Enum):
    """Lifecycle states of the simulator."""
    NOT_STARTED = auto()
    RUNNING = auto()
    FINISHED = auto()


class EventType(Enum):
    """Kinds of events handed to an estimator."""
    INITIAL_CONDITION = auto()
    VEHICLE_ODOMETRY = auto()
    GPS_OBSERVATION = auto()
    LASER_OBSERVATION = auto()


@dataclass(frozen=True)
class Pose:
    """Planar pose of the vehicle.

    Attributes:
        x: X coordinate in global frame [m]
        y: Y coordinate in global frame [m]
        heading: Orientation [rad], normalized to (-pi, pi]
    """
    x: float
    y: float
    heading: float

    def __post_init__(self):
        object.__setattr__(self, 'x', float(self.x))
        object.__setattr__(self, 'y', float(self.y))
        object.__setattr__(self, 'heading', normalize_angle(float(self.heading)))

    @property
    def position(self) -> np.ndarray:
        """Position [x, y]."""
        return np.array([self.x, self.y])

    def to_array(self) -> np.ndarray:
        """Convert to numpy array [x, y, heading]."""
        return np.array([self.x, self.y, self.heading])

    @classmethod
    def from_array(cls, arr: np.ndarray) -> 'Pose':
        """Create from numpy array [x, y, heading]."""
        return cls(x=arr[0], y=arr[1], heading=arr[2])


@dataclass(frozen=True)
class ControlInput:
    """Commanded control of the vehicle.

    Attributes:
        speed: Forward speed [m/s]
        steer: Steer value, applied directly as the turn rate [rad/s]
    """
    speed: float = 0.0
    steer: float = 0.0

    def to_array(self) -> np.ndarray:
        """Convert to numpy array [speed, steer]."""
        return np.array([self.speed, self.steer])

    @classmethod
    def from_array(cls, arr: np.ndarray) -> 'ControlInput':
        """Create from numpy array [speed, steer]."""
        return cls(speed=float(arr[0]), steer=float(arr[1]))


def _frozen_copy(arr) -> np.ndarray:
    out = np.array(arr, dtype=float)
    out.setflags(write=False)
    return out


@dataclass(frozen=True, eq=False)
class Event:
    """A single timestamped measurement or state announcement.

    Events form a tagged union discriminated by ``kind``; consumers dispatch
    on it. Every event fully describes one measurement and holds no
    references to other events.

    Attributes:
        kind: Event type
        timestamp: Simulation time the event refers to [s]
        data: Payload. Pose for INITIAL_CONDITION, [speed, turn rate] for
            VEHICLE_ODOMETRY, [x, y] for GPS_OBSERVATION and a 3xK array of
            (range, azimuth, elevation) columns for LASER_OBSERVATION
        covariance: Measurement covariance associated with the payload
        landmark_ids: Indices of the observed landmarks (laser only)
    """
    kind: EventType
    timestamp: float
    data: np.ndarray
    covariance: np.ndarray
    landmark_ids: Optional[Tuple[int, ...]] = None

    def __post_init__(self):
        object.__setattr__(self, 'timestamp', float(self.timestamp))
        object.__setattr__(self, 'data', _frozen_copy(self.data))
        object.__setattr__(self, 'covariance', _frozen_copy(self.covariance))
        if self.landmark_ids is not None:
            object.__setattr__(
                self, 'landmark_ids', tuple(int(i) for i in self.landmark_ids)
            )
            if self.data.ndim != 2 or self.data.shape[1] != len(self.landmark_ids):
                raise ValueError(
                    f"Laser data shape {self.data.shape} does not match "
                    f"{len(self.landmark_ids)} landmark ids"
                )

    def __eq__(self, other) -> bool:
        if not isinstance(other, Event):
            return NotImplemented
        return (
            self.kind == other.kind
            and self.timestamp == other.timestamp
            and self.landmark_ids == other.landmark_ids
            and np.array_equal(self.data, other.data)
            and np.array_equal(self.covariance, other.covariance)
        )

    __hash__ = None


@dataclass
class GroundTruthState:
    """Noise-free simulator state, for evaluation only.

    Attributes:
        current_time: Simulation time [s]
        pose: True vehicle pose
        control: True control input
        landmarks: Landmark positions [n_landmarks, 3] (full state only)
        waypoints: Waypoints [n_waypoints, 2] (full state only)
    """
    current_time: float
    pose: Pose
    control: ControlInput
    landmarks: Optional[np.ndarray] = None
    waypoints: Optional[np.ndarray] = None
