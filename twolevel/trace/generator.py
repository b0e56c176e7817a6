"""
Synthetic Trace Generator

Seeds pseudo-random branch instructions and outcomes, for driving
predictors without a recorded trace.
"""

import numpy as np
from typing import Iterator, List, Optional

from ..components.bits import Bit, BitVector
from ..predictors.base import BranchInstruction, BranchResult
from .formats import BranchRecord


class RandomTraceGenerator:
    """
    Random branch stream.

    Patterns:
        random: every field drawn independently; each branch is taken
                with probability `taken_probability`
        loop:   a small pool of branch addresses, each behaving like a
                loop back-edge taken `loop_length - 1` times then not
                taken once
    """

    PATTERNS = ('random', 'loop')

    def __init__(self, address_width: int, opcode_width: int = 6,
                 target_width: int = 16, taken_probability: float = 0.6,
                 pattern: str = 'random', n_addresses: int = 8,
                 loop_length: int = 10, seed: Optional[int] = None):
        """
        Args:
            address_width: Bits per instruction address
            opcode_width: Bits per opcode
            target_width: Bits per jump target
            taken_probability: P(taken) for the random pattern
            pattern: 'random' or 'loop'
            n_addresses: Address pool size for the loop pattern
            loop_length: Iterations per loop for the loop pattern
            seed: Seed for reproducible streams
        """
        if pattern not in self.PATTERNS:
            raise ValueError(f"Unknown trace pattern: {pattern}")
        if not 0.0 <= taken_probability <= 1.0:
            raise ValueError(f"taken_probability must be in [0, 1], got {taken_probability}")

        self.address_width = address_width
        self.opcode_width = opcode_width
        self.target_width = target_width
        self.taken_probability = taken_probability
        self.pattern = pattern
        self.n_addresses = n_addresses
        self.loop_length = loop_length

        self.rng = np.random.default_rng(seed)

        # Loop pattern state
        self._pool: List[BranchInstruction] = []
        self._iterations = np.zeros(n_addresses, dtype=np.int64)

    def random_bits(self, width: int) -> BitVector:
        """Uniformly random bit vector."""
        return tuple(Bit.from_bool(b) for b in self.rng.integers(0, 2, size=width))

    def random_instruction(self) -> BranchInstruction:
        return BranchInstruction(
            address=self.random_bits(self.address_width),
            opcode=self.random_bits(self.opcode_width),
            target=self.random_bits(self.target_width)
        )

    def _next_random(self) -> BranchRecord:
        taken = self.rng.random() < self.taken_probability
        return BranchRecord(self.random_instruction(), BranchResult.from_bool(taken))

    def _next_loop(self) -> BranchRecord:
        if not self._pool:
            self._pool = [self.random_instruction() for _ in range(self.n_addresses)]

        slot = int(self.rng.integers(0, self.n_addresses))
        self._iterations[slot] += 1
        taken = self._iterations[slot] % self.loop_length != 0
        return BranchRecord(self._pool[slot], BranchResult.from_bool(taken))

    def generate(self, num_branches: int) -> Iterator[BranchRecord]:
        """Yield `num_branches` records."""
        step = self._next_loop if self.pattern == 'loop' else self._next_random
        for i in range(num_branches):
            record = step()
            record.instruction_count = i + 1
            yield record
