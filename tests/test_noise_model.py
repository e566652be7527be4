"""Tests for the covariance-shaped noise model."""

import sys
from pathlib import Path

import numpy as np
import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from slamsim.core.noise import NoiseModel, covariance_sqrt
from slamsim.core.errors import InvalidCovarianceError


def test_sqrt_of_diagonal():
    s = covariance_sqrt(np.diag([4.0, 9.0]))
    assert np.allclose(s, np.diag([2.0, 3.0]))


def test_sqrt_is_symmetric_root():
    cov = np.array([[2.0, 0.5, 0.1], [0.5, 1.0, 0.2], [0.1, 0.2, 0.5]])
    s = covariance_sqrt(cov)
    assert np.allclose(s, s.T)
    assert np.allclose(s @ s, cov)


def test_zero_covariance_is_valid():
    s = covariance_sqrt(np.zeros((3, 3)))
    assert np.allclose(s, 0.0)


@pytest.mark.parametrize("cov", [
    np.array([[1.0, 0.5], [0.0, 1.0]]),      # not symmetric
    np.array([[1.0, 2.0], [2.0, 1.0]]),      # indefinite
    np.array([[-1.0, 0.0], [0.0, 1.0]]),     # negative variance
    np.ones((2, 3)),                         # not square
    np.array([[np.nan, 0.0], [0.0, 1.0]]),   # non-finite
])
def test_invalid_covariance_rejected(cov):
    with pytest.raises(InvalidCovarianceError):
        NoiseModel(cov)


def test_invalid_covariance_is_value_error():
    with pytest.raises(ValueError):
        NoiseModel(np.array([[1.0, 2.0], [2.0, 1.0]]))


def test_roundoff_negative_eigenvalue_is_clamped():
    cov = np.array([[1.0, 1.0], [1.0, 1.0]]) - 1e-12 * np.eye(2)
    model = NoiseModel(cov, rng=np.random.default_rng(0))
    assert np.all(np.isfinite(model.sample()))


def test_zero_scale_gives_zeros_and_keeps_rng_untouched():
    rng = np.random.default_rng(3)
    model = NoiseModel(np.eye(2), noise_scale=0.0, rng=rng)
    assert np.array_equal(model.sample(), np.zeros(2))
    assert np.array_equal(model.sample_channel(1, 4), np.zeros(4))

    reference = np.random.default_rng(3).standard_normal(2)
    assert np.array_equal(rng.standard_normal(2), reference)


def test_negative_scale_rejected():
    with pytest.raises(ValueError):
        NoiseModel(np.eye(2), noise_scale=-1.0)


def test_same_seed_same_samples():
    a = NoiseModel(np.eye(3), rng=np.random.default_rng(11))
    b = NoiseModel(np.eye(3), rng=np.random.default_rng(11))
    for _ in range(5):
        assert np.array_equal(a.sample(), b.sample())


def test_sample_statistics():
    cov = np.array([[2.0, 0.6], [0.6, 0.5]])
    model = NoiseModel(cov, noise_scale=1.0, rng=np.random.default_rng(42))
    samples = np.array([model.sample() for _ in range(20000)])
    assert np.allclose(samples.mean(axis=0), 0.0, atol=0.05)
    assert np.allclose(np.cov(samples.T), cov, atol=0.08)


def test_scale_multiplies_samples():
    a = NoiseModel(np.eye(2), noise_scale=1.0, rng=np.random.default_rng(5))
    b = NoiseModel(np.eye(2), noise_scale=3.0, rng=np.random.default_rng(5))
    assert np.allclose(3.0 * a.sample(), b.sample())


def test_sample_channel_uses_diagonal():
    cov = np.diag([0.25, 4.0, 9.0])
    model = NoiseModel(cov, rng=np.random.default_rng(8))
    values = model.sample_channel(2, 20000)
    assert values.shape == (20000,)
    assert values.std() == pytest.approx(3.0, rel=0.05)


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
