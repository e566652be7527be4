"""Simulation module: event sequencer and main loop."""

from .simulator import Simulator
from .main_loop import EventConsumer, RunResults, run_simulation, save_results

__all__ = [
    'Simulator',
    'EventConsumer',
    'RunResults',
    'run_simulation',
    'save_results',
]
