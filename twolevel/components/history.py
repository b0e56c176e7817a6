"""
Branch History Registers

Fixed-width serial-in/parallel-out shift registers and the
per-selector register banks used by per-address and per-set schemes.
"""

import logging
import numpy as np
from typing import Dict, Optional, Sequence

from .bits import Bit, BitVector, bits_to_string, zeros
from .errors import BitWidthError, PartitionNotProvisionedError
from .monitor import Monitorable

logger = logging.getLogger(__name__)


class ShiftRegister(Monitorable):
    """
    Fixed-width shift register.

    Index 0 is the most significant bit. Inserting a bit shifts the
    contents one place toward the least significant end, drops the
    oldest bit and writes the new one at index 0.
    """

    def __init__(self, width: int,
                 default: Optional[Sequence[Bit]] = None,
                 name: str = ""):
        """
        Initialize the register.

        Args:
            width: Number of bits held
            default: Initial contents (zero-filled if None)
            name: Label used in snapshots
        """
        if width <= 0:
            raise ValueError(f"Register width must be positive, got {width}")

        self.width = width
        self.name = name

        # Binary storage: 0 = ZERO, 1 = ONE
        self._bits = np.zeros(width, dtype=np.int8)

        if default is not None:
            self.load(default)

    def read(self) -> BitVector:
        """Parallel read. Returns a copy of the contents."""
        return tuple(Bit.from_bool(b) for b in self._bits)

    def load(self, bits: Sequence[Bit]) -> None:
        """
        Parallel load of the whole register.

        Raises:
            BitWidthError: if len(bits) != width (register unchanged)
        """
        if len(bits) != self.width:
            raise BitWidthError(self.width, len(bits), "register")
        self._bits = np.array([1 if b.value else 0 for b in bits], dtype=np.int8)

    def insert(self, bit: Bit) -> None:
        """Serial insert: shift toward the LSB end and write bit at the MSB."""
        self._bits = np.roll(self._bits, 1)
        self._bits[0] = 1 if bit.value else 0

    def clear(self) -> None:
        """Zero-fill the register."""
        self._bits.fill(0)

    def monitor(self) -> str:
        return bits_to_string(self.read())

    def __len__(self) -> int:
        return self.width

    def __repr__(self) -> str:
        label = self.name or type(self).__name__
        return f"{label}({self.width}): {self.monitor()}"


class RegisterBank(Monitorable):
    """
    Lazily populated bank of shift registers indexed by a selector.

    Per-address and per-set schemes keep one history register per
    address (or hashed address) bucket instead of one global register.
    """

    def __init__(self, selector_width: int, register_width: int):
        """
        Args:
            selector_width: Number of bits in a selector
            register_width: Width of every register in the bank
        """
        self.selector_width = selector_width
        self.register_width = register_width
        self._registers: Dict[str, ShiftRegister] = {}

    def read(self, selector: Sequence[Bit]) -> ShiftRegister:
        """
        Get the register for a selector, creating a zero-filled one on
        first access.
        """
        key = bits_to_string(selector)
        register = self._registers.get(key)
        if register is None:
            register = ShiftRegister(self.register_width, name=f"bhr[{key}]")
            self._registers[key] = register
            logger.debug("Provisioned history register for selector %s", key)
        return register

    def peek(self, selector: Sequence[Bit]) -> BitVector:
        """Contents for a selector without provisioning (zeros if unseen)."""
        register = self._registers.get(bits_to_string(selector))
        if register is None:
            return zeros(self.register_width)
        return register.read()

    def write(self, selector: Sequence[Bit], bits: Sequence[Bit]) -> None:
        """
        Load bits into the already materialized register of a selector.

        Raises:
            PartitionNotProvisionedError: if the selector was never read
            BitWidthError: if bits do not match the register width
        """
        key = bits_to_string(selector)
        register = self._registers.get(key)
        if register is None:
            raise PartitionNotProvisionedError(key)
        register.load(bits)

    def clear(self) -> None:
        """Discard every register."""
        self._registers.clear()

    def selectors(self):
        return sorted(self._registers)

    def monitor(self) -> str:
        lines = [f"{key}: {self._registers[key].monitor()}"
                 for key in sorted(self._registers)]
        return "\n".join(lines)

    def __contains__(self, selector: Sequence[Bit]) -> bool:
        return bits_to_string(selector) in self._registers

    def __len__(self) -> int:
        return len(self._registers)

    def get_storage_bits(self) -> int:
        """Nominal storage: one register per possible selector."""
        return (1 << self.selector_width) * self.register_width
