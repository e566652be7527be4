"""Visualization module for simulation results."""

from .plots import plot_results

__all__ = ['plot_results']
