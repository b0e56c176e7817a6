"""
Trace Format Definitions

Text trace formats for feeding branch outcomes to the predictors.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, TextIO

from ..components.bits import bits_to_int, bits_to_string, int_to_bits, string_to_bits
from ..predictors.base import BranchInstruction, BranchResult

logger = logging.getLogger(__name__)

TAKEN_TOKENS = ('T', '1', 'TAKEN', 'TRUE', 'Y')
NOT_TAKEN_TOKENS = ('N', '0', 'NOT_TAKEN', 'FALSE')


@dataclass
class BranchRecord:
    """Single branch occurrence from a trace."""
    instruction: BranchInstruction
    actual: BranchResult

    # Optional metadata
    instruction_count: Optional[int] = None

    @property
    def address(self) -> str:
        return bits_to_string(self.instruction.address)

    @property
    def taken(self) -> bool:
        return self.actual.taken


def parse_outcome(token: str) -> BranchResult:
    """Parse an outcome column such as 'T' or 'N'."""
    token = token.upper()
    if token in TAKEN_TOKENS:
        return BranchResult.TAKEN
    if token in NOT_TAKEN_TOKENS:
        return BranchResult.NOT_TAKEN
    raise ValueError(f"Unknown branch outcome: {token!r}")


class TraceFormat(ABC):
    """Abstract base class for trace formats."""

    def parse(self, file_handle: Iterable[str]) -> Iterator[BranchRecord]:
        """
        Parse trace lines and yield branch records.

        Blank lines and '#' comments are ignored; malformed lines are
        logged and skipped.

        Args:
            file_handle: Open text file handle (or any iterable of lines)

        Yields:
            BranchRecord for each branch in trace
        """
        for line_num, line in enumerate(file_handle, 1):
            line = line.strip()

            # Skip empty lines and comments
            if not line or line.startswith('#'):
                continue

            try:
                yield self.parse_line(line.split())
            except (ValueError, IndexError) as e:
                logger.warning("Skipping malformed trace line %d: %s", line_num, e)

    @abstractmethod
    def parse_line(self, parts: list) -> BranchRecord:
        """Parse the whitespace-separated columns of one line."""
        pass

    @abstractmethod
    def format_record(self, record: BranchRecord) -> str:
        """Render a record as one trace line."""
        pass

    @abstractmethod
    def get_format_name(self) -> str:
        """Return format name."""
        pass

    def dump(self, records: Iterable[BranchRecord], file_handle: TextIO) -> int:
        """
        Write records, one per line.

        Returns:
            Number of records written
        """
        written = 0
        file_handle.write(f"# {self.get_format_name()} branch trace\n")
        for record in records:
            file_handle.write(self.format_record(record) + "\n")
            written += 1
        return written


def _optional_bits(parts: list, index: int):
    """Optional bit-string column; missing or '-' means empty."""
    if len(parts) <= index or parts[index] == "-":
        return ()
    return string_to_bits(parts[index])


class BitTextFormat(TraceFormat):
    """
    Bit-string trace format.

    Format: ADDRESS OUTCOME [OPCODE [TARGET]]
    Example:
        0110 T 000011 0000000000010000
        1010 N
    """

    def get_format_name(self) -> str:
        return "BitText"

    def parse_line(self, parts: list) -> BranchRecord:
        if len(parts) < 2:
            raise ValueError("expected at least ADDRESS and OUTCOME")

        instruction = BranchInstruction(
            address=string_to_bits(parts[0]),
            opcode=_optional_bits(parts, 2),
            target=_optional_bits(parts, 3)
        )
        return BranchRecord(instruction=instruction, actual=parse_outcome(parts[1]))

    def format_record(self, record: BranchRecord) -> str:
        instruction = record.instruction
        outcome = 'T' if record.taken else 'N'
        fields = [bits_to_string(instruction.address), outcome]
        if instruction.opcode or instruction.target:
            fields.append(bits_to_string(instruction.opcode) or "-")
        if instruction.target:
            fields.append(bits_to_string(instruction.target))
        return " ".join(fields)


class HexTextFormat(TraceFormat):
    """
    Numeric PC trace format.

    Format: PC OUTCOME [TARGET]
    Example:
        0x400100 T 0x400200
        0x400108 N

    The low `address_width` bits of each PC (after dropping
    `inst_shift_amt` alignment bits) become the address bit vector.
    """

    def __init__(self, address_width: int = 16, target_width: int = 16,
                 inst_shift_amt: int = 2):
        self.address_width = address_width
        self.target_width = target_width
        self.inst_shift_amt = inst_shift_amt

    def get_format_name(self) -> str:
        return "HexText"

    def _to_bits(self, number: int, width: int):
        return int_to_bits((number >> self.inst_shift_amt) & ((1 << width) - 1), width)

    def parse_line(self, parts: list) -> BranchRecord:
        if len(parts) < 2:
            raise ValueError("expected at least PC and OUTCOME")

        pc = int(parts[0], 0)
        target = int(parts[2], 0) if len(parts) > 2 else 0

        instruction = BranchInstruction(
            address=self._to_bits(pc, self.address_width),
            target=self._to_bits(target, self.target_width)
        )
        return BranchRecord(instruction=instruction, actual=parse_outcome(parts[1]))

    def format_record(self, record: BranchRecord) -> str:
        pc = bits_to_int(record.instruction.address) << self.inst_shift_amt
        target = bits_to_int(record.instruction.target) << self.inst_shift_amt
        outcome = 'T' if record.taken else 'N'
        return f"0x{pc:x} {outcome} 0x{target:x}"
