# Components Package
from .bits import (
    Bit, BitVector, bits_to_string, string_to_bits,
    bits_to_int, int_to_bits, zeros, concat
)
from .errors import (
    PredictorStateError, BitWidthError,
    PartitionNotProvisionedError, MissingDefaultError
)
from .monitor import Monitorable
from .history import ShiftRegister, RegisterBank
from .counters import SaturatingCounter, CountMode, count
from .tables import HistoryTable, PartitionedHistoryTable, IndexingScheme

__all__ = [
    'Bit',
    'BitVector',
    'bits_to_string',
    'string_to_bits',
    'bits_to_int',
    'int_to_bits',
    'zeros',
    'concat',
    'PredictorStateError',
    'BitWidthError',
    'PartitionNotProvisionedError',
    'MissingDefaultError',
    'Monitorable',
    'ShiftRegister',
    'RegisterBank',
    'SaturatingCounter',
    'CountMode',
    'count',
    'HistoryTable',
    'PartitionedHistoryTable',
    'IndexingScheme',
]
