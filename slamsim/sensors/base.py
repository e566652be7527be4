"""Time gating shared by the periodic sensors."""

from ..core.noise import NoiseModel


class PeriodicSampler:
    """Base class for sensors sampled on a fixed period.

    Args:
        noise: Noise model of the sensor channel
        period: Time between measurements [s]
        enabled: Whether the sensor produces measurements at all
    """

    def __init__(self, noise: NoiseModel, period: float, enabled: bool = True):
        if period <= 0:
            raise ValueError(f"period must be positive, got {period}")
        self.noise = noise
        self.period = float(period)
        self.enabled = enabled
        self.next_due = 0.0

    @property
    def covariance(self):
        """Measurement covariance."""
        return self.noise.covariance

    def reset(self, time: float = 0.0):
        """Schedule the next measurement at ``time``."""
        self.next_due = float(time)

    def _consume_due(self, time: float) -> bool:
        """Check the schedule and advance it when a measurement is due."""
        if not self.enabled or time < self.next_due:
            return False
        self.next_due += self.period
        return True
