"""Range/azimuth/elevation landmark sensor."""

from typing import Optional
import numpy as np
from loguru import logger

from ..core.angles import normalize_angle
from ..core.data_structures import Event, EventType, Pose
from ..core.noise import NoiseModel
from .base import PeriodicSampler

RANGE, AZIMUTH, ELEVATION = 0, 1, 2


class LaserSampler(PeriodicSampler):
    """Detects landmarks within range and measures them in the vehicle frame.

    Each channel gets independent noise scaled by the square root of its
    diagonal covariance entry. Detected landmarks are reported together with
    their true indices, so data association is known to the consumer.

    Args:
        noise: Noise model over [range, azimuth, elevation]
        period: Time between scans [s]
        detection_range: Maximum range of a detection [m]
        enabled: Whether the sensor produces measurements at all
    """

    def __init__(
        self,
        noise: NoiseModel,
        period: float,
        detection_range: float,
        enabled: bool = True
    ):
        super().__init__(noise, period, enabled)
        self.detection_range = float(detection_range)

    def visible_landmarks(self, pose: Pose, landmarks: np.ndarray) -> np.ndarray:
        """Indices of the landmarks within detection range of the pose."""
        if len(landmarks) == 0:
            return np.empty(0, dtype=int)
        offsets = landmarks - np.array([pose.x, pose.y, 0.0])
        ranges = np.linalg.norm(offsets, axis=1)
        return np.flatnonzero(ranges <= self.detection_range)

    def sample(self, time: float, pose: Pose, landmarks: np.ndarray) -> Optional[Event]:
        """Produce a laser observation if a scan is due.

        Args:
            time: Current simulation time [s]
            pose: True vehicle pose
            landmarks: Landmark positions [n_landmarks, 3]

        Returns:
            Laser observation event with a 3xK measurement array, or None if
            disabled, not yet due or nothing is in range
        """
        if not self._consume_due(time):
            return None

        ids = self.visible_landmarks(pose, landmarks)
        if ids.size == 0:
            logger.debug(f"Laser scan at t={time:.2f}s: no landmarks in range")
            return None

        # The vehicle sits at z = 0
        offsets = landmarks[ids] - np.array([pose.x, pose.y, 0.0])
        planar = np.hypot(offsets[:, 0], offsets[:, 1])
        n = ids.size

        r = np.linalg.norm(offsets, axis=1) + self.noise.sample_channel(RANGE, n)
        az = normalize_angle(
            np.arctan2(offsets[:, 1], offsets[:, 0]) - pose.heading
            + self.noise.sample_channel(AZIMUTH, n)
        )
        el = np.arctan2(offsets[:, 2], planar) + self.noise.sample_channel(ELEVATION, n)

        logger.debug(f"Laser scan at t={time:.2f}s: {n} landmarks detected")
        return Event(
            kind=EventType.LASER_OBSERVATION,
            timestamp=time,
            data=np.vstack([r, np.atleast_1d(az), el]),
            covariance=self.covariance,
            landmark_ids=ids.tolist(),
        )
