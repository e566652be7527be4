"""Tests for the main loop, result saving and plotting."""

import sys
from collections import Counter
from pathlib import Path

import numpy as np
import pytest
import yaml

sys.path.insert(0, str(Path(__file__).parent.parent))

import matplotlib
matplotlib.use('Agg')

from slamsim.config import SimulatorParameters
from slamsim.core.data_structures import Pose, EventType
from slamsim.scenario import Scenario
from slamsim.simulation import Simulator, RunResults, run_simulation, save_results


class RecordingConsumer:
    """Consumer that keeps every batch it receives."""

    def __init__(self):
        self.batches = []

    def process_events(self, events):
        self.batches.append(list(events))


@pytest.fixture
def simulator():
    params = SimulatorParameters(dt=0.5, laser_detection_range=10.0, seed=3)
    scenario = Scenario(
        initial_pose=Pose(0.0, 0.0, 0.0),
        landmarks=np.array([[3.0, 1.0, 0.5], [8.0, -2.0, 1.0]]),
        waypoints=np.array([[8.0, 0.0]]),
    )
    return Simulator(params, scenario)


def test_run_to_completion(simulator):
    consumer = RecordingConsumer()
    results = run_simulation(simulator, consumer)

    assert results.finished
    assert results.steps == len(consumer.batches)
    assert results.times.shape == (results.steps,)
    assert results.poses.shape == (results.steps, 3)
    assert results.controls.shape == (results.steps, 2)
    assert np.allclose(results.times, 0.5 * np.arange(1, results.steps + 1))
    assert results.landmarks.shape == (2, 3)
    assert results.waypoints.shape == (1, 2)
    assert np.linalg.norm(results.final_pose[:2] - [8.0, 0.0]) < 1.0


def test_event_counts_match_stream(simulator):
    consumer = RecordingConsumer()
    results = run_simulation(simulator, consumer)

    counted = Counter(e.kind.name for batch in consumer.batches for e in batch)
    for kind in EventType:
        assert results.event_counts[kind.name] == counted.get(kind.name, 0)
    assert results.event_counts['INITIAL_CONDITION'] == 1


def test_first_batch_starts_with_initialisation(simulator):
    consumer = RecordingConsumer()
    run_simulation(simulator, consumer)
    first = consumer.batches[0]
    assert first[0].kind == EventType.VEHICLE_ODOMETRY
    assert first[1].kind == EventType.INITIAL_CONDITION


def test_max_steps(simulator):
    results = run_simulation(simulator, max_steps=3)
    assert results.steps == 3
    assert not results.finished
    assert simulator.keep_running()


def test_run_without_consumer(simulator):
    results = run_simulation(simulator)
    assert results.finished


def test_save_results(simulator, tmp_path):
    results = run_simulation(simulator)
    output_dir = save_results(results, tmp_path / 'out')

    data = np.load(output_dir / 'trajectory.npz')
    assert np.allclose(data['poses'], results.poses)
    assert np.allclose(data['times'], results.times)
    assert np.allclose(data['landmarks'], results.landmarks)

    with open(output_dir / 'summary.yaml') as f:
        summary = yaml.safe_load(f)
    assert summary['steps'] == results.steps
    assert summary['finished'] is True
    assert summary['event_counts'] == results.event_counts
    assert np.allclose(summary['final_pose'], results.final_pose)


def test_empty_results_have_no_final_pose():
    results = RunResults(times=np.empty(0), poses=np.empty((0, 3)), controls=np.empty((0, 2)))
    with pytest.raises(ValueError):
        results.final_pose


def test_plot_results(simulator, tmp_path):
    from slamsim.visualization import plot_results

    results = run_simulation(simulator)
    output_path = tmp_path / 'plots' / 'trajectory.png'
    plot_results(results, output_path)
    assert output_path.exists()
    assert output_path.stat().st_size > 0


def test_plot_rejects_empty_results():
    from slamsim.visualization.plots import ResultsPlotter

    results = RunResults(times=np.empty(0), poses=np.empty((0, 3)), controls=np.empty((0, 2)))
    with pytest.raises(ValueError):
        ResultsPlotter(results)


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
