"""Ground vehicle simulator emitting odometry, GPS and laser events."""

from .config import SimulatorParameters, load_config
from .core import Event, EventType, GroundTruthState, Pose, ControlInput
from .scenario import Scenario, load_scenario
from .simulation import Simulator, run_simulation

__version__ = "0.1.0"

__all__ = [
    'SimulatorParameters',
    'load_config',
    'Event',
    'EventType',
    'GroundTruthState',
    'Pose',
    'ControlInput',
    'Scenario',
    'load_scenario',
    'Simulator',
    'run_simulation',
]
