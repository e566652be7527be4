"""Waypoint-following controller.

The controller steers the vehicle towards the current waypoint. Speed is
proportional to the remaining distance and steer tracks the bearing error;
both changes are rate limited and the results are clamped to the configured
bounds.
"""

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING
import numpy as np
from loguru import logger

from ..core.angles import normalize_angle
from ..core.data_structures import Pose, ControlInput

if TYPE_CHECKING:
    from ..config import SimulatorParameters

# Distance below which a waypoint counts as reached [m]
ARRIVAL_THRESHOLD = 1.0

# Commanded speed per metre of remaining distance [1/s]
SPEED_GAIN = 0.1


@dataclass(frozen=True)
class ControlLimits:
    """Rate and magnitude limits of the controller.

    Attributes:
        max_acceleration: Maximum change of speed per second [m/s²]
        min_speed: Minimum speed [m/s]
        max_speed: Maximum speed [m/s]
        max_steer_rate: Maximum change of steer per second
        max_steer: Maximum absolute steer
    """
    max_acceleration: float
    min_speed: float
    max_speed: float
    max_steer_rate: float
    max_steer: float

    @classmethod
    def from_parameters(cls, params: 'SimulatorParameters') -> 'ControlLimits':
        """Extract the limits from simulator parameters."""
        return cls(
            max_acceleration=params.max_acceleration,
            min_speed=params.min_speed,
            max_speed=params.max_speed,
            max_steer_rate=params.max_steer_rate,
            max_steer=params.max_steer,
        )


@dataclass(frozen=True)
class ControllerOutput:
    """Result of one controller update."""
    control: ControlInput
    waypoint_index: int
    still_running: bool


def _clamp(value: float, lower: float, upper: float) -> float:
    return min(upper, max(lower, value))


class WaypointController:
    """Computes the next control input from the pose and the waypoint list.

    Args:
        limits: Rate and magnitude limits
        dt: Controller time step [s]
    """

    def __init__(self, limits: ControlLimits, dt: float):
        self.limits = limits
        self.dt = dt

    def compute_control(
        self,
        pose: Pose,
        control: ControlInput,
        waypoints: np.ndarray,
        waypoint_index: int
    ) -> ControllerOutput:
        """Update the control towards the current waypoint.

        When the vehicle is within ``ARRIVAL_THRESHOLD`` of the target the
        index advances. Passing the last waypoint ends the run and leaves
        the control unchanged.

        Note:
            After switching waypoints the offset is taken as
            ``position - waypoint`` instead of ``waypoint - position``, so
            for that one step the bearing error is computed against the
            reversed direction. This is inherited behaviour of the control
            law and is kept as is.

        Args:
            pose: Current vehicle pose
            control: Control applied during the last step
            waypoints: Waypoints [n_waypoints, 2]
            waypoint_index: Index of the current target

        Returns:
            Updated control, waypoint index and running flag
        """
        n_waypoints = len(waypoints)
        if waypoint_index >= n_waypoints:
            return ControllerOutput(control, n_waypoints, False)

        position = pose.position
        delta = waypoints[waypoint_index] - position
        distance = float(np.hypot(delta[0], delta[1]))

        if distance < ARRIVAL_THRESHOLD:
            waypoint_index += 1
            if waypoint_index >= n_waypoints:
                logger.debug(f"Final waypoint reached at ({pose.x:.2f}, {pose.y:.2f})")
                return ControllerOutput(control, n_waypoints, False)

            logger.debug(f"Switching to waypoint {waypoint_index}: {waypoints[waypoint_index]}")
            delta = position - waypoints[waypoint_index]
            distance = float(np.hypot(delta[0], delta[1]))

        # Speed: clamp the acceleration, then the speed range
        diff_speed = SPEED_GAIN * distance - control.speed
        max_diff_speed = self.limits.max_acceleration * self.dt
        diff_speed = _clamp(diff_speed, -max_diff_speed, max_diff_speed)
        speed = _clamp(control.speed + diff_speed, self.limits.min_speed, self.limits.max_speed)

        # Steer: clamp the rate of change, then the steer range
        diff_steer = normalize_angle(
            math.atan2(delta[1], delta[0]) - pose.heading - control.steer
        )
        max_diff_steer = self.limits.max_steer_rate * self.dt
        diff_steer = _clamp(diff_steer, -max_diff_steer, max_diff_steer)
        steer = _clamp(control.steer + diff_steer, -self.limits.max_steer, self.limits.max_steer)

        return ControllerOutput(ControlInput(speed=speed, steer=steer), waypoint_index, True)
