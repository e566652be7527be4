"""Configuration management module."""

import math
import numbers
import yaml
import numpy as np
from pathlib import Path
from typing import Any, Dict, Optional, List
from dataclasses import dataclass, field, fields
from loguru import logger

from ..core.errors import InvalidConfigurationError


@dataclass
class SimulatorParameters:
    """Parameters of the vehicle event simulator.

    Attributes:
        # Time parameters
        dt: Time step [s]

        # Sensors
        enable_gps: Emit GPS observation events
        enable_laser: Emit laser observation events
        enable_odometry: Emit vehicle odometry events
        gps_measurement_period: Time between GPS fixes [s]
        laser_measurement_period: Time between laser scans [s]
        laser_detection_range: Maximum landmark detection range [m]

        # Noise covariances
        R_odometry: Odometry covariance (2x2) over [speed, turn rate]
        R_gps: GPS covariance (2x2) over [x, y]
        R_laser: Laser covariance (3x3) over [range, azimuth, elevation]
        noise_scale: Multiplier on all noise, 0 disables noise
        seed: Seed of the random generator (None for entropy)

        # Controller limits
        max_acceleration: Maximum change of speed per second [m/s²]
        min_speed: Minimum commanded speed [m/s]
        max_speed: Maximum commanded speed [m/s]
        max_steer_rate: Maximum change of steer per second [rad/s²]
        max_steer: Maximum absolute steer [rad/s]

        # Scenario and output
        scenario: Scenario name or directory
        output_path: Output directory for results
    """
    # Time parameters
    dt: float = 0.1

    # Sensors
    enable_gps: bool = True
    enable_laser: bool = True
    enable_odometry: bool = True
    gps_measurement_period: float = 1.0
    laser_measurement_period: float = 0.5
    laser_detection_range: float = 20.0

    # Noise covariances
    R_odometry: list = field(default_factory=lambda: [
        [0.1 ** 2, 0.0],
        [0.0, math.radians(0.5) ** 2],
    ])
    R_gps: list = field(default_factory=lambda: [
        [1.0, 0.0],
        [0.0, 1.0],
    ])
    R_laser: list = field(default_factory=lambda: [
        [0.1 ** 2, 0.0, 0.0],
        [0.0, math.radians(0.5) ** 2, 0.0],
        [0.0, 0.0, math.radians(0.5) ** 2],
    ])
    noise_scale: float = 1.0
    seed: Optional[int] = None

    # Controller limits
    max_acceleration: float = 1.0
    min_speed: float = 0.5
    max_speed: float = 5.0
    max_steer_rate: float = math.radians(20.0)
    max_steer: float = math.radians(45.0)

    # Scenario
    scenario: str = 'default'

    # Output
    output_path: str = 'output'

    # Internal: loaded from
    config_path: Optional[str] = None


# Legacy camelCase option names
PARAMETER_ALIASES: Dict[str, str] = {
    'DT': 'dt',
    'enableGPS': 'enable_gps',
    'enableLaser': 'enable_laser',
    'enableOdometry': 'enable_odometry',
    'gpsMeasurementPeriod': 'gps_measurement_period',
    'laserMeasurementPeriod': 'laser_measurement_period',
    'laserDetectionRange': 'laser_detection_range',
    'ROdometry': 'R_odometry',
    'RGPS': 'R_gps',
    'RLaser': 'R_laser',
    'maxAcceleration': 'max_acceleration',
    'minSpeed': 'min_speed',
    'maxSpeed': 'max_speed',
    'maxDiffDeltaRate': 'max_steer_rate',
    'maxDelta': 'max_steer',
    'scenarioDirectory': 'scenario',
    'noiseScale': 'noise_scale',
}


def _check_matrix(name: str, value: Any, size: int, errors: List[str]) -> None:
    try:
        arr = np.asarray(value, dtype=float)
    except (TypeError, ValueError):
        errors.append(f"{name} must be a numeric {size}x{size} matrix")
        return
    if arr.shape != (size, size):
        errors.append(f"{name} must be {size}x{size}, got shape {arr.shape}")
    elif not np.all(np.isfinite(arr)):
        errors.append(f"{name} must contain only finite values")


_NUMERIC_FIELDS = (
    'dt',
    'gps_measurement_period',
    'laser_measurement_period',
    'laser_detection_range',
    'noise_scale',
    'max_acceleration',
    'min_speed',
    'max_speed',
    'max_steer_rate',
    'max_steer',
)

_FLAG_FIELDS = ('enable_gps', 'enable_laser', 'enable_odometry')


def _is_number(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def validate_config(config: SimulatorParameters) -> None:
    """Validate configuration values for consistency and correctness.

    Positive semi-definiteness of the covariances is checked when the noise
    models are built.

    Args:
        config: Configuration to validate

    Raises:
        InvalidConfigurationError: If validation fails
    """
    errors: List[str] = []

    # Types first; range checks below only see well-typed values
    bad_type = set()
    for name in _NUMERIC_FIELDS:
        value = getattr(config, name)
        if not _is_number(value):
            errors.append(f"{name} must be a number, got {value!r}")
            bad_type.add(name)
    for name in _FLAG_FIELDS:
        value = getattr(config, name)
        if not isinstance(value, bool):
            errors.append(f"{name} must be true or false, got {value!r}")
    if config.seed is not None and (
        not isinstance(config.seed, numbers.Integral) or isinstance(config.seed, bool)
    ):
        errors.append(f"seed must be an integer or null, got {config.seed!r}")

    def ok(*names: str) -> bool:
        return not bad_type.intersection(names)

    # Time parameters
    if ok('dt') and config.dt <= 0:
        errors.append(f"dt must be positive, got {config.dt}")

    # Sensor parameters
    if ok('gps_measurement_period') and config.gps_measurement_period <= 0:
        errors.append(f"gps_measurement_period must be positive, got {config.gps_measurement_period}")
    if ok('laser_measurement_period') and config.laser_measurement_period <= 0:
        errors.append(f"laser_measurement_period must be positive, got {config.laser_measurement_period}")
    if ok('laser_detection_range') and config.laser_detection_range < 0:
        errors.append(f"laser_detection_range must be non-negative, got {config.laser_detection_range}")

    # Covariances
    _check_matrix('R_odometry', config.R_odometry, 2, errors)
    _check_matrix('R_gps', config.R_gps, 2, errors)
    _check_matrix('R_laser', config.R_laser, 3, errors)
    if ok('noise_scale') and config.noise_scale < 0:
        errors.append(f"noise_scale must be non-negative, got {config.noise_scale}")

    # Controller limits
    if ok('max_acceleration') and config.max_acceleration < 0:
        errors.append(f"max_acceleration must be non-negative, got {config.max_acceleration}")
    if ok('min_speed', 'max_speed') and config.min_speed > config.max_speed:
        errors.append(f"min_speed ({config.min_speed}) must be <= max_speed ({config.max_speed})")
    if ok('max_steer_rate') and config.max_steer_rate < 0:
        errors.append(f"max_steer_rate must be non-negative, got {config.max_steer_rate}")
    if ok('max_steer') and config.max_steer < 0:
        errors.append(f"max_steer must be non-negative, got {config.max_steer}")

    if errors:
        error_msg = "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
        raise InvalidConfigurationError(error_msg)


def parameters_from_dict(config_dict: Dict[str, Any]) -> SimulatorParameters:
    """Build parameters from a mapping, accepting legacy option names.

    Args:
        config_dict: Mapping of option names to values

    Returns:
        Parameters (not yet validated)

    Raises:
        InvalidConfigurationError: On unknown or duplicated options
    """
    known = {f.name for f in fields(SimulatorParameters)}
    kwargs: Dict[str, Any] = {}
    for key, value in config_dict.items():
        name = PARAMETER_ALIASES.get(key, key)
        if name not in known:
            raise InvalidConfigurationError(f"Unknown configuration option '{key}'")
        if name in kwargs:
            raise InvalidConfigurationError(f"Configuration option '{name}' given more than once")
        kwargs[name] = value
    return SimulatorParameters(**kwargs)


def load_config(config_path: str) -> SimulatorParameters:
    """Load configuration from YAML file.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Loaded configuration
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    try:
        with open(config_path, 'r') as f:
            config_dict = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Failed to parse YAML file {config_path}: {e}") from e

    if config_dict is None:
        raise ValueError(f"YAML file {config_path} is empty or contains no valid content")
    if not isinstance(config_dict, dict):
        raise ValueError(f"Invalid configuration structure in {config_path}: expected a mapping")

    config = parameters_from_dict(config_dict)
    config.config_path = str(config_path)

    # Validate configuration
    try:
        validate_config(config)
    except InvalidConfigurationError:
        logger.error(f"Configuration validation failed for {config_path}")
        raise

    logger.info(f"Configuration loaded and validated from {config_path}")

    return config


def save_config(config: SimulatorParameters, config_path: str):
    """Save configuration to YAML file.

    Args:
        config: Configuration to save
        config_path: Path to save YAML file
    """
    config_path = Path(config_path)
    config_path.parent.mkdir(parents=True, exist_ok=True)

    config_dict = {
        'dt': config.dt,
        'enable_gps': config.enable_gps,
        'enable_laser': config.enable_laser,
        'enable_odometry': config.enable_odometry,
        'gps_measurement_period': config.gps_measurement_period,
        'laser_measurement_period': config.laser_measurement_period,
        'laser_detection_range': config.laser_detection_range,
        'R_odometry': np.asarray(config.R_odometry, dtype=float).tolist(),
        'R_gps': np.asarray(config.R_gps, dtype=float).tolist(),
        'R_laser': np.asarray(config.R_laser, dtype=float).tolist(),
        'noise_scale': config.noise_scale,
        'seed': config.seed,
        'max_acceleration': config.max_acceleration,
        'min_speed': config.min_speed,
        'max_speed': config.max_speed,
        'max_steer_rate': config.max_steer_rate,
        'max_steer': config.max_steer,
        'scenario': config.scenario,
        'output_path': config.output_path,
    }

    with open(config_path, 'w') as f:
        yaml.safe_dump(config_dict, f, default_flow_style=False, indent=2)

    logger.info(f"Configuration saved to {config_path}")


__all__ = [
    'SimulatorParameters',
    'InvalidConfigurationError',
    'PARAMETER_ALIASES',
    'validate_config',
    'parameters_from_dict',
    'load_config',
    'save_config',
]
