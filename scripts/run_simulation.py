#!/usr/bin/env python3
"""
Two-level predictor simulation runner.

Builds the predictors described in a YAML config, feeds them a
recorded trace or a seeded random branch stream, and reports the
hit rate of each.
"""

import argparse
import sys
from pathlib import Path

from twolevel.simulation.simulator import BranchSimulator, SimulationConfig
from twolevel.trace.generator import RandomTraceGenerator
from twolevel.utils.helpers import (
    create_predictor_from_config,
    load_config,
    save_results,
    setup_logging,
)

DEFAULT_CONFIG = Path(__file__).resolve().parent.parent / "config" / "default.yaml"


def build_simulator(config: dict, predictor_names=None) -> BranchSimulator:
    """Create the simulator and register the selected predictors."""
    simulator = BranchSimulator(SimulationConfig(**config.get('simulation', {})))

    names = predictor_names or list(config.get('predictors', {}))
    for name in names:
        simulator.add_predictor(name, create_predictor_from_config(config, name))

    return simulator


def main():
    parser = argparse.ArgumentParser(description='Simulate two-level branch predictors')
    parser.add_argument('--config', '-c', type=str, default=str(DEFAULT_CONFIG),
                        help='YAML configuration file')
    parser.add_argument('--predictors', '-p', nargs='+', default=None,
                        help='Predictor entries to run (default: all)')
    parser.add_argument('--trace', '-t', type=str, default=None,
                        help='Trace file (default: random branch stream)')
    parser.add_argument('--format', '-f', type=str, default='bits',
                        choices=['bits', 'hex'], help='Trace file format')
    parser.add_argument('--branches', '-n', type=int, default=None,
                        help='Simulation branches (overrides config)')
    parser.add_argument('--seed', '-s', type=int, default=None,
                        help='Random stream seed (overrides config)')
    parser.add_argument('--output', '-o', type=str, default=None,
                        help='Directory to save JSON results')
    parser.add_argument('--snapshot', action='store_true',
                        help='Print every predictor snapshot after the run')
    parser.add_argument('--log-level', type=str, default=None,
                        help='Logging level (overrides config)')

    args = parser.parse_args()

    try:
        config = load_config(args.config)
    except FileNotFoundError as e:
        print(f"Error: {e}")
        sys.exit(1)

    log_config = config.get('logging', {})
    setup_logging(args.log_level or log_config.get('level', 'INFO'),
                  log_config.get('file'))

    sim_config = config.setdefault('simulation', {})
    if args.branches is not None:
        sim_config['simulation_branches'] = args.branches
    if args.seed is not None:
        sim_config['seed'] = args.seed

    try:
        simulator = build_simulator(config, args.predictors)
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)

    if args.trace:
        trace_config = config.get('trace', {})
        options = {}
        if args.format == 'hex':
            options['address_width'] = trace_config.get('address_width', 16)
        results = simulator.run_file(args.trace, args.format, **options)
    else:
        trace_config = dict(config.get('trace', {}))
        total = simulator.config.warmup_branches + simulator.config.simulation_branches
        generator = RandomTraceGenerator(seed=simulator.config.seed, **trace_config)
        results = simulator.run(generator.generate(total),
                                trace_name=f"random-{generator.pattern}")

    print(results.get_summary())

    if args.snapshot:
        for predictor in simulator.predictors.values():
            print(f"\n{predictor.monitor()}")

    if args.output:
        paths = save_results(results.to_dict(), args.output, name="simulation")
        print(f"\nResults saved to: {paths['json']}")


if __name__ == '__main__':
    main()
