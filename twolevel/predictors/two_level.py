"""
Two-Level Adaptive Branch Predictors

One predictor class covering the Yeh & Patt taxonomy. The first
level is a branch history register (global, per-address or per-set),
the second level a pattern history table of saturating counters
(global, or partitioned per address or per set).

    GAg  global history,      one global table
    GAp  global history,      table partitioned by address prefix
    GAs  global history,      table partitioned by hashed address
    PAg  per-address history, one global table
    PAp  per-address history, table partitioned by address prefix
    PAs  per-address history, table partitioned by hashed address
    SAg  per-set history,     one global table
    SAp  per-set history,     table partitioned by address prefix
    SAs  per-set history,     table partitioned by hashed address

Usage protocol, per branch occurrence: predict(instruction), then
update(instruction, actual) with the same instruction. Calling update
without a preceding predict is allowed but folds the outcome into
whatever the counter view last held; on a partitioned table whose
selector was never predicted the write fails with
PartitionNotProvisionedError, and the failed update leaves the
counter view, the history registers and the tables untouched.

Partitioned tables are keyed by selector followed by history (for
PAp: address prefix ++ history); the leading key bits pick the
sub-table.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Union

from .base import BasePredictor, BranchInstruction, BranchResult
from ..components.bits import Bit, BitVector, concat, zeros
from ..components.counters import CountMode, SaturatingCounter, count
from ..components.history import RegisterBank, ShiftRegister
from ..components.tables import HistoryTable, IndexingScheme, PartitionedHistoryTable

logger = logging.getLogger(__name__)


class Scope(Enum):
    """How a history register or pattern table is shared."""
    GLOBAL = "global"
    PER_ADDRESS = "per_address"
    PER_SET = "per_set"


@dataclass(frozen=True)
class SchemeConfig:
    """Wiring of a two-level scheme."""
    name: str
    history: Scope
    table: Scope

    @property
    def uses_address(self) -> bool:
        return Scope.PER_ADDRESS in (self.history, self.table)

    @property
    def uses_hash(self) -> bool:
        return Scope.PER_SET in (self.history, self.table)


SCHEMES = {
    scheme.name.lower(): scheme for scheme in (
        SchemeConfig('GAg', Scope.GLOBAL, Scope.GLOBAL),
        SchemeConfig('GAp', Scope.GLOBAL, Scope.PER_ADDRESS),
        SchemeConfig('GAs', Scope.GLOBAL, Scope.PER_SET),
        SchemeConfig('PAg', Scope.PER_ADDRESS, Scope.GLOBAL),
        SchemeConfig('PAp', Scope.PER_ADDRESS, Scope.PER_ADDRESS),
        SchemeConfig('PAs', Scope.PER_ADDRESS, Scope.PER_SET),
        SchemeConfig('SAg', Scope.PER_SET, Scope.GLOBAL),
        SchemeConfig('SAp', Scope.PER_SET, Scope.PER_ADDRESS),
        SchemeConfig('SAs', Scope.PER_SET, Scope.PER_SET),
    )
}


def get_scheme(scheme: Union[str, SchemeConfig]) -> SchemeConfig:
    """Look up a scheme by (case-insensitive) name."""
    if isinstance(scheme, SchemeConfig):
        return scheme
    try:
        return SCHEMES[scheme.lower()]
    except KeyError:
        raise ValueError(f"Unknown predictor scheme: {scheme}") from None


# ============================================================================
# Configuration Presets - parameters of the reference driver programs
# ============================================================================

GAG_DEFAULT = {
    'scheme': 'GAg',
    'history_width': 4,
    'counter_width': 2,
}

GAP_DEFAULT = {
    'scheme': 'GAp',
    'history_width': 4,
    'counter_width': 2,
    'address_width': 4,
}

GAS_DEFAULT = {
    'scheme': 'GAs',
    'history_width': 4,
    'counter_width': 2,
    'address_width': 8,
    'hash_width': 4,
}

PAP_DEFAULT = {
    'scheme': 'PAp',
    'history_width': 4,
    'counter_width': 2,
    'address_width': 4,
}

SAS_DEFAULT = {
    'scheme': 'SAs',
    'history_width': 4,
    'counter_width': 2,
    'address_width': 8,
    'hash_width': 4,
}


class TwoLevelPredictor(BasePredictor):
    """
    Two-level adaptive predictor parameterized by a SchemeConfig.

    Config keys:
        scheme: Scheme name or SchemeConfig (default 'GAg')
        history_width: Bits per branch history register
        counter_width: Bits per saturating counter
        address_width: Address bits used as selector (per-address)
                       or hashed (per-set; None hashes the whole address)
        hash_width: Width K of the hashed selector (per-set)
        count_mode: 'saturating' or 'wraparound'
    """

    def __init__(self, config: dict = None):
        config = dict(config or GAG_DEFAULT)
        self.scheme = get_scheme(config.get('scheme', 'GAg'))
        name = config.get('name', self.scheme.name)
        super().__init__(name, config)

        self.history_width = config.get('history_width', 4)
        self.counter_width = config.get('counter_width', 2)
        self.address_width = config.get('address_width')
        self.hash_width = config.get('hash_width')
        self.count_mode = CountMode(config.get('count_mode', 'saturating'))

        self._validate()

        # === First level: branch history ===
        self.bhr: Optional[ShiftRegister] = None
        self.history_bank: Optional[RegisterBank] = None
        if self.scheme.history is Scope.GLOBAL:
            self.bhr = ShiftRegister(self.history_width, name="bhr")
        else:
            self.history_bank = RegisterBank(
                self._selector_width(self.scheme.history), self.history_width)

        # === Second level: pattern history table ===
        rows = 1 << self.history_width
        if self.scheme.table is Scope.GLOBAL:
            self.pht = HistoryTable(rows, self.counter_width)
        else:
            self.pht = PartitionedHistoryTable(
                self._selector_width(self.scheme.table), rows, self.counter_width)

        # Counter view the selected block is loaded into
        self.counter = SaturatingCounter(self.counter_width)

    def _validate(self) -> None:
        for key in ('history_width', 'counter_width'):
            value = getattr(self, key)
            if not isinstance(value, int) or value <= 0:
                raise ValueError(f"{key} must be a positive integer, got {value!r}")

        if self.scheme.uses_address and not self.address_width:
            raise ValueError(f"{self.scheme.name} requires a positive address_width")
        if self.scheme.uses_hash and not self.hash_width:
            raise ValueError(f"{self.scheme.name} requires a positive hash_width")

    def _selector_width(self, scope: Scope) -> int:
        if scope is Scope.PER_ADDRESS:
            return self.address_width
        if scope is Scope.PER_SET:
            return self.hash_width
        return 0

    def _selector(self, scope: Scope, address: Sequence[Bit]) -> BitVector:
        """Selector bits of an address for a sharing scope."""
        if scope is Scope.PER_ADDRESS:
            return IndexingScheme.prefix(address, self.address_width)
        if scope is Scope.PER_SET:
            hashed = address if self.address_width is None else address[:self.address_width]
            return IndexingScheme.xor_fold(hashed, self.hash_width)
        return ()

    def _history_register(self, address: Sequence[Bit]) -> ShiftRegister:
        if self.history_bank is None:
            return self.bhr
        return self.history_bank.read(self._selector(self.scheme.history, address))

    def _history_bits(self, address: Sequence[Bit]) -> BitVector:
        """Current history for an address, without provisioning a register."""
        if self.history_bank is None:
            return self.bhr.read()
        return self.history_bank.peek(self._selector(self.scheme.history, address))

    def _composite_key(self, address: Sequence[Bit],
                       history: Sequence[Bit]) -> BitVector:
        """Table selector (if partitioned) followed by history bits."""
        return concat(self._selector(self.scheme.table, address), history)

    def _default_block(self) -> BitVector:
        return zeros(self.counter_width)

    def predict(self, instruction: BranchInstruction) -> BranchResult:
        """
        Read the counter for the current history and address.

        A missing block is provisioned as zero; no other state changes.
        """
        address = instruction.address
        key = self._composite_key(address, self._history_register(address).read())

        block = self.pht.set_default(key, self._default_block())
        self.counter.load(block)

        return BranchResult.from_bit(block[0])

    def update(self, instruction: BranchInstruction,
               actual: BranchResult) -> None:
        """
        Count toward the outcome, write the counter back at the key
        used by predict, then shift the outcome into the history.
        """
        address = instruction.address
        key = self._composite_key(address, self._history_bits(address))
        block = count(self.counter.read(), actual.taken, self.count_mode)

        # Raises before any state changes if the partition was never predicted
        self.pht.put(key, block)
        self.counter.load(block)

        history = self._history_register(address)
        history.insert(actual.to_bit())
        if self.history_bank is not None:
            self.history_bank.write(self._selector(self.scheme.history, address),
                                    history.read())

    def reset(self) -> None:
        """Zero all registers and drop every table entry."""
        super().reset()
        if self.bhr is not None:
            self.bhr.clear()
        if self.history_bank is not None:
            self.history_bank.clear()
        self.pht.clear()
        self.counter.clear()

    def monitor(self) -> str:
        history = (self.bhr.monitor() if self.bhr is not None
                   else self.history_bank.monitor())
        return (f"{self.name} predictor snapshot:\n"
                f"BHR:\n{history}\n"
                f"SC: {self.counter.monitor()}\n"
                f"{self.pht.monitor()}")

    def get_hardware_cost(self) -> dict:
        """Estimate hardware implementation cost."""
        if self.bhr is not None:
            history_bits = self.history_width
        else:
            history_bits = self.history_bank.get_storage_bits()
        table_bits = self.pht.get_storage_bits()
        total_bits = history_bits + table_bits + self.counter_width

        return {
            'scheme': self.scheme.name,
            'history_bits': history_bits,
            'table_bits': table_bits,
            'counter_bits': self.counter_width,
            'used_entries': len(self.pht),
            'total_bits': total_bits,
            'total_bytes': total_bits // 8,
            'total_kb': total_bits / 8 / 1024
        }

    def __repr__(self) -> str:
        return (f"TwoLevelPredictor({self.scheme.name}, "
                f"history={self.history_width}, counter={self.counter_width})")


def create_predictor(scheme: Union[str, SchemeConfig],
                     **params) -> TwoLevelPredictor:
    """
    Build a predictor for a scheme.

    Example:
        create_predictor('GAs', history_width=4, counter_width=2,
                         address_width=8, hash_width=4)
    """
    config = dict(params)
    config['scheme'] = get_scheme(scheme).name
    return TwoLevelPredictor(config)
