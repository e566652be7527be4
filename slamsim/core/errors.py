"""Exception types raised by the simulator and its collaborators."""


class SimulatorError(Exception):
    """Base class for all simulator errors."""
    pass


class ScenarioNotFoundError(SimulatorError, FileNotFoundError):
    """Raised when a scenario identifier resolves to no data."""
    pass


class MalformedScenarioError(SimulatorError, ValueError):
    """Raised when a scenario file cannot be parsed or has the wrong shape."""
    pass


class InvalidCovarianceError(SimulatorError, ValueError):
    """Raised when a covariance matrix is not symmetric positive semi-definite."""
    pass


class InvalidConfigurationError(SimulatorError, ValueError):
    """Raised when configuration validation fails."""
    pass


class InvalidStateError(SimulatorError, RuntimeError):
    """Raised when the simulator is driven outside of its RUNNING state."""
    pass


__all__ = [
    "SimulatorError",
    "ScenarioNotFoundError",
    "MalformedScenarioError",
    "InvalidCovarianceError",
    "InvalidConfigurationError",
    "InvalidStateError",
]
