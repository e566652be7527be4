"""Vehicle control module."""

from .waypoint_controller import (
    WaypointController,
    ControlLimits,
    ControllerOutput,
    ARRIVAL_THRESHOLD,
)

__all__ = [
    'WaypointController',
    'ControlLimits',
    'ControllerOutput',
    'ARRIVAL_THRESHOLD',
]
