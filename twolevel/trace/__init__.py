# Trace Package
from .parser import TraceParser, BranchTrace
from .formats import TraceFormat, BitTextFormat, HexTextFormat, BranchRecord
from .generator import RandomTraceGenerator

__all__ = [
    'TraceParser',
    'BranchTrace',
    'TraceFormat',
    'BitTextFormat',
    'HexTextFormat',
    'BranchRecord',
    'RandomTraceGenerator',
]
