"""
Saturating Counters

Up/down counters stored in shift-register form. The confidence state
of a two-level predictor is an n-bit saturating counter whose most
significant bit is the prediction.
"""

from enum import Enum
from typing import Optional, Sequence

from .bits import Bit, BitVector, bits_to_int, int_to_bits
from .history import ShiftRegister


class CountMode(Enum):
    """Behavior of the incrementer at its numeric bounds."""
    SATURATING = "saturating"   # clamp at 0 and 2^W - 1
    WRAPAROUND = "wraparound"   # modular arithmetic


def count(bits: Sequence[Bit], up: bool,
          mode: CountMode = CountMode.SATURATING) -> BitVector:
    """
    Combinational incrementer/decrementer.

    Args:
        bits: Current counter value (MSB first)
        up: Increment if True, decrement otherwise
        mode: Saturating or wraparound arithmetic

    Returns:
        New value with the same width as `bits`
    """
    width = len(bits)
    max_value = (1 << width) - 1
    value = bits_to_int(bits)

    if mode is CountMode.SATURATING:
        value = min(max_value, value + 1) if up else max(0, value - 1)
    else:
        value = (value + (1 if up else -1)) & max_value

    return int_to_bits(value, width)


class SaturatingCounter(ShiftRegister):
    """
    n-bit saturating up/down counter.

    Inserting ONE (taken) increments, inserting ZERO (not taken)
    decrements. At a bound the insert is a no-op rather than a wrap.
    """

    def __init__(self, width: int, default: Optional[Sequence[Bit]] = None,
                 name: str = "sc"):
        super().__init__(width, default, name)

    @property
    def max_value(self) -> int:
        return (1 << self.width) - 1

    def to_number(self) -> int:
        """Stored bits as an unsigned big-endian integer."""
        return bits_to_int(self.read())

    def insert(self, bit: Bit) -> None:
        """Count up on ONE, down on ZERO, saturating at the bounds."""
        value = self.to_number()
        if bit is Bit.ONE:
            if value == self.max_value:
                return
            value += 1
        else:
            if value == 0:
                return
            value -= 1

        self.load(int_to_bits(value, self.width))

    def insert_bit(self, result) -> None:
        """Count toward a BranchResult (TAKEN counts up)."""
        self.insert(result.to_bit())

    def is_saturated(self) -> bool:
        value = self.to_number()
        return value == 0 or value == self.max_value

    def predicts_taken(self) -> bool:
        """Prediction is the most significant bit."""
        return self.read()[0] is Bit.ONE

    def __repr__(self) -> str:
        return f"SaturatingCounter({self.width}): {self.monitor()} = {self.to_number()}"
