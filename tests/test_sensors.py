"""Tests for the GPS and laser samplers."""

import math
import sys
from pathlib import Path

import numpy as np
import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from slamsim.core.data_structures import Pose, EventType
from slamsim.core.noise import NoiseModel
from slamsim.sensors import GPSSampler, LaserSampler


def quiet_noise(dim):
    return NoiseModel(np.eye(dim) * 0.01, noise_scale=0.0)


@pytest.fixture
def landmarks():
    return np.array([
        [4.0, 6.0, 2.0],     # offset (3, 4, 2) from (1, 2)
        [1.0, 2.0, 30.0],    # straight above, out of range
        [-5.0, 2.0, 0.0],    # behind, range 6
        [100.0, 0.0, 0.0],   # far away
    ])


def test_gps_fires_when_due():
    gps = GPSSampler(quiet_noise(2), period=1.0)
    gps.reset(0.0)
    event = gps.sample(0.1, Pose(3.0, 4.0, 0.5))

    assert event is not None
    assert event.kind == EventType.GPS_OBSERVATION
    assert event.timestamp == pytest.approx(0.1)
    assert np.allclose(event.data, [3.0, 4.0])
    assert np.allclose(event.covariance, np.eye(2) * 0.01)
    assert gps.next_due == pytest.approx(1.0)


def test_gps_waits_for_next_period():
    gps = GPSSampler(quiet_noise(2), period=1.0)
    gps.reset(0.0)
    assert gps.sample(0.0, Pose(0.0, 0.0, 0.0)) is not None
    assert gps.sample(0.5, Pose(0.0, 0.0, 0.0)) is None
    assert gps.sample(0.99, Pose(0.0, 0.0, 0.0)) is None
    assert gps.sample(1.0, Pose(0.0, 0.0, 0.0)) is not None
    assert gps.next_due == pytest.approx(2.0)


def test_gps_disabled():
    gps = GPSSampler(quiet_noise(2), period=1.0, enabled=False)
    gps.reset(0.0)
    for t in np.arange(0.0, 5.0, 0.1):
        assert gps.sample(t, Pose(0.0, 0.0, 0.0)) is None


def test_gps_noise_applied():
    noise = NoiseModel(np.eye(2), noise_scale=1.0, rng=np.random.default_rng(1))
    gps = GPSSampler(noise, period=1.0)
    event = gps.sample(0.0, Pose(0.0, 0.0, 0.0))
    assert not np.allclose(event.data, [0.0, 0.0])


def test_invalid_period():
    with pytest.raises(ValueError):
        GPSSampler(quiet_noise(2), period=0.0)


def test_laser_exact_geometry(landmarks):
    laser = LaserSampler(quiet_noise(3), period=0.5, detection_range=10.0)
    pose = Pose(1.0, 2.0, 0.3)
    event = laser.sample(0.0, pose, landmarks)

    assert event.kind == EventType.LASER_OBSERVATION
    assert event.landmark_ids == (0, 2)
    assert event.data.shape == (3, 2)

    r, az, el = event.data[:, 0]
    assert r == pytest.approx(math.sqrt(29.0))
    assert az == pytest.approx(math.atan2(4.0, 3.0) - 0.3)
    assert el == pytest.approx(math.atan2(2.0, 5.0))

    r, az, el = event.data[:, 1]
    assert r == pytest.approx(6.0)
    assert az == pytest.approx(math.pi - 0.3)
    assert el == pytest.approx(0.0)


def test_laser_azimuth_normalized(landmarks):
    laser = LaserSampler(quiet_noise(3), period=0.5, detection_range=10.0)
    event = laser.sample(0.0, Pose(1.0, 2.0, -0.3), landmarks)
    az = event.data[1]
    assert np.all(az > -np.pi)
    assert np.all(az <= np.pi)
    # Landmark behind: pi + 0.3 wraps to -pi + 0.3
    assert az[1] == pytest.approx(-math.pi + 0.3)


def test_laser_ids_match_true_range():
    rng = np.random.default_rng(4)
    landmarks = rng.uniform(-30.0, 30.0, size=(200, 3))
    noise = NoiseModel(np.diag([0.5, 0.1, 0.1]), noise_scale=1.0, rng=rng)
    laser = LaserSampler(noise, period=0.1, detection_range=15.0)
    pose = Pose(2.0, -3.0, 1.0)

    event = laser.sample(0.0, pose, landmarks)
    true_range = np.linalg.norm(landmarks - np.array([2.0, -3.0, 0.0]), axis=1)
    expected = tuple(np.flatnonzero(true_range <= 15.0).tolist())

    assert event.landmark_ids == expected
    assert set(event.landmark_ids) <= set(range(len(landmarks)))


def test_laser_range_is_inclusive():
    landmarks = np.array([[3.0, 4.0, 0.0]])
    laser = LaserSampler(quiet_noise(3), period=0.5, detection_range=5.0)
    event = laser.sample(0.0, Pose(0.0, 0.0, 0.0), landmarks)
    assert event is not None
    assert event.landmark_ids == (0,)


def test_laser_no_event_when_nothing_in_range(landmarks):
    laser = LaserSampler(quiet_noise(3), period=0.5, detection_range=1.0)
    assert laser.sample(0.0, Pose(50.0, 50.0, 0.0), landmarks) is None
    # The scan still consumed its slot
    assert laser.next_due == pytest.approx(0.5)


def test_laser_no_landmarks():
    laser = LaserSampler(quiet_noise(3), period=0.5, detection_range=10.0)
    assert laser.sample(0.0, Pose(0.0, 0.0, 0.0), np.empty((0, 3))) is None


def test_laser_schedule(landmarks):
    laser = LaserSampler(quiet_noise(3), period=0.5, detection_range=10.0)
    laser.reset(0.0)
    pose = Pose(1.0, 2.0, 0.0)
    fired = [t for t in np.arange(0.0, 2.0, 0.25) if laser.sample(t, pose, landmarks) is not None]
    assert fired == [0.0, 0.5, 1.0, 1.5]


def test_laser_disabled(landmarks):
    laser = LaserSampler(quiet_noise(3), period=0.5, detection_range=10.0, enabled=False)
    assert laser.sample(0.0, Pose(1.0, 2.0, 0.0), landmarks) is None


def test_event_arrays_are_read_only(landmarks):
    laser = LaserSampler(quiet_noise(3), period=0.5, detection_range=10.0)
    event = laser.sample(0.0, Pose(1.0, 2.0, 0.0), landmarks)
    with pytest.raises(ValueError):
        event.data[0, 0] = 1.0
    with pytest.raises(ValueError):
        event.covariance[0, 0] = 1.0


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
