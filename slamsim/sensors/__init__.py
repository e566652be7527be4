"""Simulated sensors."""

from .base import PeriodicSampler
from .gps import GPSSampler
from .laser import LaserSampler

__all__ = ['PeriodicSampler', 'GPSSampler', 'LaserSampler']
