"""Gaussian noise generation shaped by a covariance matrix."""

from typing import Optional
import numpy as np
from scipy import linalg

from .errors import InvalidCovarianceError

# Numerical tolerance for the symmetry and positive semi-definiteness checks
COVARIANCE_TOLERANCE = 1e-9


def covariance_sqrt(covariance: np.ndarray, tol: float = COVARIANCE_TOLERANCE) -> np.ndarray:
    """Compute the symmetric square root of a covariance matrix.

    Eigenvalues in [-tol, 0) are treated as round-off and clamped to zero.

    Args:
        covariance: Square covariance matrix
        tol: Tolerance for symmetry and eigenvalue checks

    Returns:
        Symmetric matrix S with S @ S == covariance

    Raises:
        InvalidCovarianceError: If the matrix is not symmetric PSD
    """
    cov = np.asarray(covariance, dtype=float)
    if cov.ndim != 2 or cov.shape[0] != cov.shape[1]:
        raise InvalidCovarianceError(f"Covariance must be a square matrix, got shape {cov.shape}")
    if not np.all(np.isfinite(cov)):
        raise InvalidCovarianceError("Covariance contains non-finite values")
    if not np.allclose(cov, cov.T, rtol=0.0, atol=tol):
        raise InvalidCovarianceError(f"Covariance is not symmetric:\n{cov}")

    eigvals, eigvecs = linalg.eigh(cov)
    if eigvals.size > 0 and eigvals.min() < -tol:
        raise InvalidCovarianceError(
            f"Covariance is not positive semi-definite (min eigenvalue {eigvals.min():.3e})"
        )
    eigvals = np.clip(eigvals, 0.0, None)
    return (eigvecs * np.sqrt(eigvals)) @ eigvecs.T


class NoiseModel:
    """Zero-mean Gaussian noise source for one sensor or actuator channel.

    Samples are distributed as ``noise_scale * N(0, covariance)``. A scale of
    zero disables the noise entirely and leaves the random stream untouched,
    which keeps noise-free runs bit-identical.

    Args:
        covariance: Symmetric positive semi-definite covariance matrix
        noise_scale: Multiplier applied to every sample
        rng: Random generator; a fresh unseeded one is created if omitted
    """

    def __init__(
        self,
        covariance: np.ndarray,
        noise_scale: float = 1.0,
        rng: Optional[np.random.Generator] = None
    ):
        if noise_scale < 0:
            raise ValueError(f"noise_scale must be non-negative, got {noise_scale}")
        self.covariance = np.array(covariance, dtype=float)
        self.covariance.setflags(write=False)
        self.sqrt_covariance = covariance_sqrt(self.covariance)
        self.noise_scale = float(noise_scale)
        self.rng = rng if rng is not None else np.random.default_rng()

    @property
    def dim(self) -> int:
        """Dimensionality of the samples."""
        return self.covariance.shape[0]

    def sample(self) -> np.ndarray:
        """Draw one correlated noise vector."""
        if self.noise_scale == 0.0:
            return np.zeros(self.dim)
        z = self.rng.standard_normal(self.dim)
        return self.noise_scale * (self.sqrt_covariance @ z)

    def sample_channel(self, index: int, size: int) -> np.ndarray:
        """Draw independent scalar noise for one diagonal channel.

        Args:
            index: Diagonal entry of the covariance used for scaling
            size: Number of samples

        Returns:
            Array of shape (size,)
        """
        if self.noise_scale == 0.0:
            return np.zeros(size)
        sigma = np.sqrt(max(self.covariance[index, index], 0.0))
        return self.noise_scale * sigma * self.rng.standard_normal(size)
