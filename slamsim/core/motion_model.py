"""Kinematic vehicle motion model."""

import math

from .data_structures import Pose, ControlInput


def predict(pose: Pose, control: ControlInput, dt: float) -> Pose:
    """Advance the pose over one time step.

    Speed and turn rate are held constant over the interval and the
    translation is taken along the heading at the middle of the interval
    (midpoint rule). The steer value of the control is applied directly as
    the turn rate.

    Args:
        pose: Current pose
        control: Control input [speed, turn rate]
        dt: Time step [s]

    Returns:
        Pose at the end of the interval, heading normalized
    """
    v_dt = control.speed * dt
    w_dt = control.steer * dt
    mid_heading = pose.heading + 0.5 * w_dt

    return Pose(
        x=pose.x + v_dt * math.cos(mid_heading),
        y=pose.y + v_dt * math.sin(mid_heading),
        heading=pose.heading + w_dt,
    )
