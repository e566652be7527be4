"""Event-generating vehicle simulator.

The simulator advances a kinematic vehicle along a list of waypoints and
turns what it senses into a time-ordered stream of events for an estimator.
Each call to :meth:`Simulator.step` runs one discrete step:

1. advance the clock and predict the pose with the current control
2. sample the GPS and the laser if they are due
3. compute the control for the next step
4. report the new control as a noisy odometry measurement

The very first step is preceded by the initial condition (and an empty
odometry event when odometry is enabled) so that estimators are initialised
before any real measurement arrives.
"""

from dataclasses import replace
from pathlib import Path
from typing import List, Optional, Union
import numpy as np
from loguru import logger

from ..config import SimulatorParameters, validate_config
from ..control.waypoint_controller import WaypointController, ControlLimits
from ..core.data_structures import (
    Pose,
    ControlInput,
    Event,
    EventType,
    GroundTruthState,
    SimulatorStatus,
)
from ..core.errors import InvalidStateError
from ..core.motion_model import predict
from ..core.noise import NoiseModel
from ..scenario.loader import Scenario, load_scenario
from ..sensors.gps import GPSSampler
from ..sensors.laser import LaserSampler


class Simulator:
    """Single-vehicle simulator producing odometry, GPS and laser events.

    All state lives on the instance and randomness comes from one injected
    generator, so several simulators can run side by side in one process.

    Args:
        parameters: Simulator parameters (validated on construction, copied
            when ``seed`` or ``noise_scale`` overrides them)
        scenario: Scenario object, or a name/directory loaded on start.
            Defaults to ``parameters.scenario``.
        rng: Random generator used for all noise
        seed: Seed for a new generator if ``rng`` is not given. Defaults to
            ``parameters.seed``.
        noise_scale: Multiplier on all noise. Defaults to
            ``parameters.noise_scale``; 0 gives noise-free measurements.
    """

    def __init__(
        self,
        parameters: SimulatorParameters,
        scenario: Optional[Union[Scenario, str, Path]] = None,
        rng: Optional[np.random.Generator] = None,
        seed: Optional[int] = None,
        noise_scale: Optional[float] = None
    ):
        # Overrides are validated together with the rest of the parameters
        overrides = {}
        if seed is not None:
            overrides['seed'] = seed
        if noise_scale is not None:
            overrides['noise_scale'] = noise_scale
        if overrides:
            parameters = replace(parameters, **overrides)
        validate_config(parameters)
        self.parameters = parameters
        self._scenario_source = scenario if scenario is not None else parameters.scenario

        if rng is None:
            rng = np.random.default_rng(parameters.seed)
        self.rng = rng
        self.noise_scale = parameters.noise_scale

        # Noise models validate the covariances
        self.odometry_noise = NoiseModel(parameters.R_odometry, self.noise_scale, rng)
        self.gps = GPSSampler(
            NoiseModel(parameters.R_gps, self.noise_scale, rng),
            period=parameters.gps_measurement_period,
            enabled=parameters.enable_gps,
        )
        self.laser = LaserSampler(
            NoiseModel(parameters.R_laser, self.noise_scale, rng),
            period=parameters.laser_measurement_period,
            detection_range=parameters.laser_detection_range,
            enabled=parameters.enable_laser,
        )
        self.controller = WaypointController(
            ControlLimits.from_parameters(parameters), parameters.dt
        )

        self.scenario: Optional[Scenario] = None
        self._status = SimulatorStatus.NOT_STARTED
        self._time = 0.0
        self._step_number = 0
        self._pose: Optional[Pose] = None
        self._control = ControlInput()
        self._waypoint_index = 0
        self._most_recent_events: List[Event] = []

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self):
        """Reset the simulation to time zero and enter the RUNNING state."""
        if isinstance(self._scenario_source, Scenario):
            self.scenario = self._scenario_source
        else:
            self.scenario = load_scenario(self._scenario_source)

        self._time = 0.0
        self._step_number = 0
        self._pose = self.scenario.initial_pose
        self._control = ControlInput()
        self._waypoint_index = 0
        self._most_recent_events = []

        # Both sensors fire on the first step
        self.gps.reset(self._time)
        self.laser.reset(self._time)

        self._status = SimulatorStatus.RUNNING
        logger.info(
            f"Simulation started: {self.scenario.n_waypoints} waypoints, "
            f"{self.scenario.n_landmarks} landmarks, dt={self.parameters.dt}"
        )

    def keep_running(self) -> bool:
        """Whether the simulation is still running."""
        return self._status == SimulatorStatus.RUNNING

    def step(self) -> List[Event]:
        """Advance the simulation by one time step.

        Returns:
            Events produced during this step, in emission order

        Raises:
            InvalidStateError: If the simulator is not running
        """
        if self._status != SimulatorStatus.RUNNING:
            raise InvalidStateError(f"step() called while simulator is {self._status.name}")

        params = self.parameters
        events: List[Event] = []

        if self._step_number == 0:
            # Announce the odometry format before the first real measurement
            if params.enable_odometry:
                events.append(Event(
                    kind=EventType.VEHICLE_ODOMETRY,
                    timestamp=self._time,
                    data=self._control.to_array(),
                    covariance=self.odometry_noise.covariance,
                ))
            events.append(Event(
                kind=EventType.INITIAL_CONDITION,
                timestamp=self._time,
                data=self._pose.to_array(),
                covariance=np.zeros((3, 3)),
            ))

        self._step_number += 1
        self._time = self._step_number * params.dt

        self._pose = predict(self._pose, self._control, params.dt)

        gps_event = self.gps.sample(self._time, self._pose)
        if gps_event is not None:
            events.append(gps_event)

        laser_event = self.laser.sample(self._time, self._pose, self.scenario.landmarks)
        if laser_event is not None:
            events.append(laser_event)

        output = self.controller.compute_control(
            self._pose, self._control, self.scenario.waypoints, self._waypoint_index
        )
        self._waypoint_index = output.waypoint_index
        self._control = output.control

        if not output.still_running:
            self._status = SimulatorStatus.FINISHED
            self._most_recent_events = events
            logger.info(
                f"Simulation finished at t={self._time:.2f}s after {self._step_number} steps"
            )
            return list(events)

        if params.enable_odometry:
            measurement = self._control.to_array() + self.odometry_noise.sample()
            events.append(Event(
                kind=EventType.VEHICLE_ODOMETRY,
                timestamp=self._time,
                data=measurement,
                covariance=self.odometry_noise.covariance,
            ))

        self._most_recent_events = events
        return list(events)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_ground_truth(self, include_full_state: bool = False) -> GroundTruthState:
        """Snapshot of the true state; not available to a real estimator.

        Args:
            include_full_state: Also return landmarks and waypoints

        Returns:
            Ground-truth snapshot (copies, safe to modify)
        """
        if self._status == SimulatorStatus.NOT_STARTED:
            raise InvalidStateError("Ground truth requested before start()")

        state = GroundTruthState(
            current_time=self._time,
            pose=self._pose,
            control=self._control,
        )
        if include_full_state:
            state.landmarks = np.array(self.scenario.landmarks)
            state.waypoints = np.array(self.scenario.waypoints)
        return state

    @property
    def status(self) -> SimulatorStatus:
        """Current lifecycle state."""
        return self._status

    @property
    def time(self) -> float:
        """Current simulation time [s]."""
        return self._time

    @property
    def step_number(self) -> int:
        """Number of completed steps."""
        return self._step_number

    @property
    def waypoint_index(self) -> int:
        """Index of the current target waypoint (waypoint count once finished)."""
        return self._waypoint_index

    @property
    def most_recent_events(self) -> List[Event]:
        """Events produced by the last step."""
        return list(self._most_recent_events)
