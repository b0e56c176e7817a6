# Simulation Package
from .simulator import BranchSimulator, SimulationConfig, ComparativeSimulator
from .metrics import AddressProfile, SimulationResults, comparison_table

__all__ = [
    'BranchSimulator',
    'SimulationConfig',
    'ComparativeSimulator',
    'AddressProfile',
    'SimulationResults',
    'comparison_table'
]
