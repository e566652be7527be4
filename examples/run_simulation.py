#!/usr/bin/env python3
"""Example script to run the vehicle event simulator.

This script demonstrates how to drive the simulator with a consumer that
collects the event stream.
"""

import argparse
import sys
from collections import defaultdict
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from loguru import logger
import logging
from slamsim.config import SimulatorParameters, load_config
from slamsim.simulation import Simulator, run_simulation, save_results


class EventLog:
    """Minimal consumer that keeps the events per type."""

    def __init__(self):
        self.events = defaultdict(list)

    def process_events(self, events):
        for event in events:
            self.events[event.kind].append(event)


def main():
    """Main function."""
    parser = argparse.ArgumentParser(
        description='Run the vehicle event simulator'
    )
    parser.add_argument(
        '--config',
        type=str,
        default=None,
        help='Path to YAML parameter file (defaults are used if omitted)'
    )
    parser.add_argument(
        '--scenario',
        type=str,
        default=None,
        help='Scenario name or directory (overrides config)'
    )
    parser.add_argument(
        '--seed',
        type=int,
        default=None,
        help='Random seed (overrides config)'
    )
    parser.add_argument(
        '--noise-scale',
        type=float,
        default=None,
        help='Noise multiplier, 0 disables noise (overrides config)'
    )
    parser.add_argument(
        '--max-steps',
        type=int,
        default=None,
        help='Stop after this many steps'
    )
    parser.add_argument(
        '--output',
        type=str,
        default=None,
        help='Output directory (overrides config)'
    )
    parser.add_argument(
        '--plot',
        action='store_true',
        help='Save a plot of the ground-truth trajectory'
    )
    parser.add_argument(
        '--log-level',
        type=str,
        default='INFO',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help='Logging level'
    )

    args = parser.parse_args()

    # Configure logging
    logger.remove()
    logger.add(
        sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>",
        level=args.log_level
    )
    logging.getLogger('matplotlib').setLevel(logging.WARNING)

    # Load configuration
    if args.config is not None:
        logger.info(f"Loading parameters from {args.config}")
        params = load_config(args.config)
    else:
        params = SimulatorParameters()

    if args.scenario is not None:
        params.scenario = args.scenario
    if args.seed is not None:
        params.seed = args.seed
    if args.noise_scale is not None:
        params.noise_scale = args.noise_scale
    if args.output is not None:
        params.output_path = args.output

    # Create simulator
    logger.info("Creating simulator")
    simulator = Simulator(params)
    log = EventLog()

    # Run simulation
    results = run_simulation(simulator, consumer=log, max_steps=args.max_steps)

    # Save results
    output_dir = save_results(results, params.output_path)

    if args.plot:
        from slamsim.visualization import plot_results
        plot_results(results, output_dir / "trajectory.png")

    # Print summary
    logger.info("=" * 60)
    logger.info("SIMULATION SUMMARY")
    logger.info("=" * 60)
    logger.info(f"Total steps: {results.steps}")
    if results.steps:
        x, y, heading = results.final_pose
        logger.info(f"Total time: {results.times[-1]:.2f}s")
        logger.info(f"Final pose: ({x:.2f}, {y:.2f}, {heading:.2f})")
    for kind, count in results.event_counts.items():
        logger.info(f"{kind}: {count} events")
    logger.info("=" * 60)

    if results.finished:
        logger.success("All waypoints reached")
    else:
        logger.warning("Simulation stopped before the last waypoint")


if __name__ == '__main__':
    main()
