"""GPS position sensor."""

from typing import Optional
from loguru import logger

from ..core.data_structures import Event, EventType, Pose
from .base import PeriodicSampler


class GPSSampler(PeriodicSampler):
    """Noisy 2D position fixes at a fixed period."""

    def sample(self, time: float, pose: Pose) -> Optional[Event]:
        """Produce a GPS observation if one is due.

        Args:
            time: Current simulation time [s]
            pose: True vehicle pose

        Returns:
            GPS observation event, or None if disabled or not yet due
        """
        if not self._consume_due(time):
            return None

        measurement = pose.position + self.noise.sample()
        logger.debug(f"GPS fix at t={time:.2f}s: ({measurement[0]:.2f}, {measurement[1]:.2f})")
        return Event(
            kind=EventType.GPS_OBSERVATION,
            timestamp=time,
            data=measurement,
            covariance=self.covariance,
        )
