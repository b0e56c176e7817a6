"""
Bits and Bit Vectors

Two-valued logic cells and the fixed-width vectors built from them.
A bit vector is a tuple of Bit ordered most-significant bit first.
"""

from enum import Enum
from typing import Iterable, Sequence, Tuple


class Bit(Enum):
    """A single binary logic value."""
    ZERO = False
    ONE = True

    @classmethod
    def from_bool(cls, value: bool) -> 'Bit':
        return cls.ONE if value else cls.ZERO

    @classmethod
    def from_char(cls, char: str) -> 'Bit':
        if char == '1':
            return cls.ONE
        if char == '0':
            return cls.ZERO
        raise ValueError(f"Not a bit: {char!r}")

    def __xor__(self, other: 'Bit') -> 'Bit':
        return Bit.from_bool(self.value ^ other.value)

    def __bool__(self) -> bool:
        return self.value

    def __str__(self) -> str:
        return "1" if self.value else "0"


BitVector = Tuple[Bit, ...]


def bits_to_string(bits: Iterable[Bit]) -> str:
    """Canonical textual form, e.g. (ONE, ZERO) -> "10"."""
    return ''.join(str(bit) for bit in bits)


def string_to_bits(text: str) -> BitVector:
    """Parse a string of '0'/'1' characters into a bit vector."""
    return tuple(Bit.from_char(c) for c in text)


def bits_to_int(bits: Iterable[Bit]) -> int:
    """Interpret bits as an unsigned big-endian integer."""
    result = 0
    for bit in bits:
        result = (result << 1) | (1 if bit.value else 0)
    return result


def int_to_bits(value: int, width: int) -> BitVector:
    """
    Encode an unsigned integer as a big-endian bit vector.

    Args:
        value: Non-negative integer to encode
        width: Number of bits in the result

    Returns:
        Bit vector of exactly `width` bits
    """
    if value < 0 or value >= (1 << width):
        raise ValueError(f"{value} does not fit in {width} bits")
    return tuple(Bit.from_bool((value >> i) & 1) for i in range(width - 1, -1, -1))


def zeros(width: int) -> BitVector:
    return (Bit.ZERO,) * width


def concat(*vectors: Sequence[Bit]) -> BitVector:
    """Concatenate vectors, first argument most significant."""
    result: Tuple[Bit, ...] = ()
    for vector in vectors:
        result += tuple(vector)
    return result
