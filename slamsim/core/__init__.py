"""Core module for fundamental data structures and utilities."""

from .data_structures import (
    Pose,
    ControlInput,
    Event,
    EventType,
    GroundTruthState,
    SimulatorStatus,
)
from .angles import normalize_angle
from .noise import NoiseModel, covariance_sqrt
from .motion_model import predict
from .errors import (
    SimulatorError,
    ScenarioNotFoundError,
    MalformedScenarioError,
    InvalidCovarianceError,
    InvalidConfigurationError,
    InvalidStateError,
)

__all__ = [
    'Pose',
    'ControlInput',
    'Event',
    'EventType',
    'GroundTruthState',
    'SimulatorStatus',
    'normalize_angle',
    'NoiseModel',
    'covariance_sqrt',
    'predict',
    'SimulatorError',
    'ScenarioNotFoundError',
    'MalformedScenarioError',
    'InvalidCovarianceError',
    'InvalidConfigurationError',
    'InvalidStateError',
]
