"""Scenario data loading."""

from .loader import (
    Scenario,
    load_scenario,
    save_scenario,
    resolve_scenario_dir,
    BUNDLED_SCENARIO_DIR,
)

__all__ = [
    'Scenario',
    'load_scenario',
    'save_scenario',
    'resolve_scenario_dir',
    'BUNDLED_SCENARIO_DIR',
]
