"""Angle utilities."""

import numpy as np
from typing import Union


def normalize_angle(angle: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
    """Normalize angle to the (-pi, pi] range.

    Args:
        angle: Input angle in radians (scalar or array)

    Returns:
        Normalized angle in (-pi, pi]
    """
    two_pi = 2.0 * np.pi

    # Emulate math.remainder(x, y) = x - n*y where n is nearest integer
    n = np.round(np.asarray(angle, dtype=float) / two_pi)
    a = angle - n * two_pi

    # -pi maps onto +pi so the interval is half-open at the bottom
    a = np.where(a <= -np.pi, a + two_pi, a)
    a = np.where(a > np.pi, a - two_pi, a)

    if np.ndim(a) == 0:
        return float(a)
    return a
