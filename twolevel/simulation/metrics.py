"""
Simulation Results and Per-Address Profiling

Overall hit/miss tallies live in each predictor's PredictorStats;
this module packages them into results and adds an optional
per-address breakdown.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping

from ..predictors.base import BasePredictor


@dataclass
class SimulationResults:
    """Outcome of one simulation run."""
    trace_name: str
    branches_simulated: int
    warmup_branches: int
    elapsed_time: float
    predictor_results: Dict[str, Dict[str, Any]]
    hardware_costs: Dict[str, Dict[str, Any]]
    config: Dict[str, Any]

    def to_dict(self) -> Dict:
        return {
            'trace_name': self.trace_name,
            'branches_simulated': self.branches_simulated,
            'warmup_branches': self.warmup_branches,
            'elapsed_time': self.elapsed_time,
            'predictor_results': self.predictor_results,
            'hardware_costs': self.hardware_costs,
            'config': self.config
        }

    def get_summary(self) -> str:
        lines = [
            f"Trace: {self.trace_name}",
            f"Branches: {self.branches_simulated:,}",
            f"Time: {self.elapsed_time:.2f}s",
            ""
        ]

        for name, stats in self.predictor_results.items():
            lines.append(f"{name}:")
            lines.append(f"  Hit rate: {stats.get('accuracy', 0)*100:.4f}%")
            lines.append(f"  Mispredictions: {stats.get('mispredictions', 0):,}")

        return "\n".join(lines)


@dataclass
class AddressCounts:
    """Hits for one branch address."""
    total: int = 0
    correct: int = 0

    @property
    def accuracy(self) -> float:
        return self.correct / self.total if self.total else 0.0


class AddressProfile:
    """
    Per-address hit counts, one profile per predictor.

    Addresses are bit strings as produced by BranchRecord.address.
    """

    def __init__(self):
        self._profiles: Dict[str, Dict[str, AddressCounts]] = {}

    def record(self, predictor_name: str, address: str, correct: bool) -> None:
        counts = self._profiles.setdefault(predictor_name, {}).setdefault(
            address, AddressCounts())
        counts.total += 1
        if correct:
            counts.correct += 1

    def per_address(self, predictor_name: str) -> Dict[str, Dict[str, Any]]:
        """Counts and hit rate for each address seen by a predictor."""
        return {
            address: {'total': c.total, 'correct': c.correct, 'accuracy': c.accuracy}
            for address, c in sorted(self._profiles.get(predictor_name, {}).items())
        }

    def hard_branches(self, predictor_name: str,
                      threshold: float = 0.3,
                      min_samples: int = 10) -> List[str]:
        """
        Addresses a predictor handles badly.

        Args:
            predictor_name: Predictor to analyze
            threshold: Minimum misprediction rate
            min_samples: Occurrences needed before an address is judged

        Returns:
            Addresses in key order
        """
        return [
            address
            for address, c in sorted(self._profiles.get(predictor_name, {}).items())
            if c.total >= min_samples and 1.0 - c.accuracy >= threshold
        ]

    def clear(self) -> None:
        self._profiles.clear()


def comparison_table(predictors: Mapping[str, BasePredictor]) -> str:
    """Side-by-side hit rates from each predictor's current stats."""
    if not predictors:
        return "No predictors registered"

    rule = "-" * 56
    lines = [
        "Predictor Comparison:",
        rule,
        f"{'Predictor':<20} {'Hit rate':>12} {'Mispred':>10} {'Branches':>10}",
        rule
    ]
    for name, predictor in predictors.items():
        stats = predictor.get_stats()
        lines.append(f"{name:<20} {stats.accuracy*100:>11.4f}% "
                     f"{stats.mispredictions:>10,} {stats.predictions:>10,}")
    lines.append(rule)
    return "\n".join(lines)
