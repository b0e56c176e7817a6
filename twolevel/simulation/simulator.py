"""
Branch Prediction Simulator

Drives predictors through a stream of branch records and tallies
their hit rate.
"""

import logging
import time
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

import numpy as np
from tqdm import tqdm

from ..predictors.base import BasePredictor
from ..trace.formats import BranchRecord
from ..trace.parser import TraceParser
from .metrics import AddressProfile, SimulationResults, comparison_table

logger = logging.getLogger(__name__)


@dataclass
class SimulationConfig:
    """Configuration for simulation run."""
    warmup_branches: int = 0
    simulation_branches: int = 10000
    verbose: bool = False
    log_interval: int = 1000
    collect_per_branch_stats: bool = False
    seed: Optional[int] = None


class BranchSimulator:
    """
    Branch Prediction Simulator.

    Every predictor sees every branch: predict, then update with the
    actual outcome. Branches inside the warmup window train the
    predictors but are not counted.
    """

    def __init__(self, config: Union[SimulationConfig, dict, None] = None):
        """
        Initialize simulator.

        Args:
            config: Simulation configuration
        """
        if config is None:
            self.config = SimulationConfig()
        elif isinstance(config, dict):
            self.config = SimulationConfig(**config)
        else:
            self.config = config

        # Predictors to evaluate
        self.predictors: Dict[str, BasePredictor] = {}

        # Per-address breakdown (collect_per_branch_stats)
        self.profile = AddressProfile()

        # State
        self.branches_processed = 0
        self.warmup_complete = False

    def add_predictor(self, name: str, predictor: BasePredictor) -> None:
        """Add a predictor to evaluate."""
        self.predictors[name] = predictor

    def run(self, records: Iterable[BranchRecord],
            trace_name: str = "memory") -> SimulationResults:
        """
        Run simulation over branch records.

        At most warmup_branches + simulation_branches records are used.

        Args:
            records: Branch records (trace or generator)
            trace_name: Label for the results

        Returns:
            SimulationResults with all metrics
        """
        if not self.predictors:
            raise ValueError("No predictors registered")

        self._reset()

        total = self.config.warmup_branches + self.config.simulation_branches
        logger.info("Simulating %d branches on %s with %s",
                    total, trace_name, list(self.predictors))

        start_time = time.time()

        progress = records
        if self.config.verbose:
            progress = tqdm(records, total=total, desc="Simulating", unit="branches")

        for branch in progress:
            if self.branches_processed >= total:
                break
            self._process_branch(branch)

            if (self.config.verbose and
                    self.branches_processed % self.config.log_interval == 0):
                self._log_progress(trace_name)

        elapsed_time = time.time() - start_time
        results = self._compile_results(trace_name, elapsed_time)

        if self.config.verbose:
            self._print_results(results)

        return results

    def run_file(self, trace_path: Union[str, Path],
                 trace_format: str = 'bits', **format_options) -> SimulationResults:
        """
        Run simulation on a trace file.

        Args:
            trace_path: Path to trace file
            trace_format: 'bits' or 'hex'
            format_options: Passed to the trace format

        Returns:
            SimulationResults
        """
        parser = TraceParser(trace_format, **format_options)
        trace_path = Path(trace_path)
        total = self.config.warmup_branches + self.config.simulation_branches
        return self.run(parser.parse_file(trace_path, max_branches=total),
                        trace_name=trace_path.name)

    def _process_branch(self, branch: BranchRecord) -> None:
        """
        Process a single branch.

        Each predictor tallies its own hits; the tallies are restarted
        once warmup ends so they cover the measured window only.
        """
        self.branches_processed += 1

        in_warmup = self.branches_processed <= self.config.warmup_branches

        if not in_warmup and not self.warmup_complete:
            self.warmup_complete = True
            self._restart_tallies()
            logger.debug("Warmup complete after %d branches",
                         self.config.warmup_branches)

        for name, predictor in self.predictors.items():
            prediction = predictor.predict_and_update(branch.instruction, branch.actual)

            if not in_warmup and self.config.collect_per_branch_stats:
                self.profile.record(name, branch.address, prediction is branch.actual)

    def _restart_tallies(self) -> None:
        self.profile.clear()
        for predictor in self.predictors.values():
            predictor.reset_stats()

    def _reset(self) -> None:
        """Reset simulator state."""
        self.profile.clear()
        self.branches_processed = 0
        self.warmup_complete = False

        for predictor in self.predictors.values():
            predictor.reset()

    def _compile_results(self, trace_name: str,
                         elapsed_time: float) -> SimulationResults:
        """Compile simulation results."""
        if not self.warmup_complete:
            # Trace ended inside warmup: nothing was measured
            self._restart_tallies()

        return SimulationResults(
            trace_name=trace_name,
            branches_simulated=max(0, self.branches_processed - self.config.warmup_branches),
            warmup_branches=min(self.branches_processed, self.config.warmup_branches),
            elapsed_time=elapsed_time,
            predictor_results={
                name: pred.get_stats().to_dict()
                for name, pred in self.predictors.items()
            },
            hardware_costs={
                name: pred.get_hardware_cost()
                for name, pred in self.predictors.items()
            },
            config=asdict(self.config)
        )

    def _log_progress(self, trace_name: str) -> None:
        """Log progress during simulation."""
        measured = self.branches_processed - self.config.warmup_branches
        if measured <= 0:
            return

        stats = next(iter(self.predictors.values())).get_stats()
        tqdm.write(f"Branches: {measured:,} | "
                   f"Hit rate: {stats.accuracy*100:.2f}% | {trace_name}")

    def _print_results(self, results: SimulationResults) -> None:
        """Print final results."""
        print(f"\n{'='*60}")
        print("SIMULATION RESULTS")
        print(f"{'='*60}")
        print(f"Branches simulated: {results.branches_simulated:,}")
        print(f"Time elapsed: {results.elapsed_time:.2f}s")
        print()
        print(comparison_table(self.predictors))

        for name, hw in results.hardware_costs.items():
            print(f"{name}: {hw.get('total_bits', 0):,} bits nominal, "
                  f"{hw.get('used_entries', 0):,} table entries used")

        print(f"\n{'='*60}")


class ComparativeSimulator:
    """
    Run comparative simulations across multiple traces and predictors.
    """

    def __init__(self, config: SimulationConfig):
        self.config = config
        self.results: List[SimulationResults] = []

    def run_comparison(self,
                       traces: Dict[str, Iterable[BranchRecord]],
                       predictors: Dict[str, BasePredictor]) -> Dict:
        """
        Run comparison across traces.

        Args:
            traces: Trace name -> branch records
            predictors: Predictors to compare (reset before each trace)

        Returns:
            Aggregated results
        """
        self.results = []

        for trace_name, records in traces.items():
            sim = BranchSimulator(self.config)
            for name, predictor in predictors.items():
                sim.add_predictor(name, predictor)
            self.results.append(sim.run(records, trace_name=trace_name))

        return self._aggregate_results(self.results)

    def _aggregate_results(self, results: List[SimulationResults]) -> Dict:
        """Aggregate results across traces."""
        if not results:
            return {}

        predictor_names = list(results[0].predictor_results.keys())

        aggregated = {
            'traces': [r.trace_name for r in results],
            'total_branches': sum(r.branches_simulated for r in results),
            'total_time': sum(r.elapsed_time for r in results),
            'per_predictor': {}
        }

        for name in predictor_names:
            acc_values = [r.predictor_results[name].get('accuracy', 0)
                          for r in results]
            miss_values = [r.predictor_results[name].get('misprediction_rate', 0)
                           for r in results]

            aggregated['per_predictor'][name] = {
                'avg_accuracy': float(np.mean(acc_values)),
                'std_accuracy': float(np.std(acc_values)),
                'avg_misprediction_rate': float(np.mean(miss_values)),
                'per_trace_accuracy': dict(zip(aggregated['traces'], acc_values))
            }

        return aggregated
