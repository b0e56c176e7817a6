"""
Pattern History Tables and Indexing Schemes

Associative tables mapping history/address keys to saturating
counter blocks, their partitioned (per-address / per-set) form, and
the functions that derive partition selectors from branch addresses.
"""

import logging
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from .bits import Bit, BitVector, bits_to_string
from .errors import BitWidthError, MissingDefaultError, PartitionNotProvisionedError
from .monitor import Monitorable

logger = logging.getLogger(__name__)


class HistoryTable(Monitorable):
    """
    Pattern history table (PHT).

    Maps a bit-vector key to a counter block of fixed width. Keys are
    compared by their exact bit sequence. The row count is sizing
    metadata only: it is not checked against the keys actually used.
    """

    def __init__(self, n_rows: int, block_width: int):
        """
        Initialize table.

        Args:
            n_rows: Nominal number of rows (advisory)
            block_width: Bits per block (counter width)
        """
        self.n_rows = n_rows
        self.block_width = block_width

        self._entries: Dict[str, BitVector] = {}

        # Access statistics
        self.reads = 0
        self.writes = 0

    def get(self, key: Sequence[Bit]) -> Optional[BitVector]:
        """Return the block stored at key, or None if absent."""
        self.reads += 1
        return self._entries.get(bits_to_string(key))

    def put(self, key: Sequence[Bit], value: Sequence[Bit]) -> None:
        """
        Store a block at key.

        Raises:
            BitWidthError: if the block width is wrong (table unchanged)
        """
        self._check_width(value)
        self.writes += 1
        self._entries[bits_to_string(key)] = tuple(value)

    def put_if_absent(self, key: Sequence[Bit], value: Sequence[Bit]) -> None:
        """Store a block only if key has no entry yet."""
        self._check_width(value)
        entry = bits_to_string(key)
        if entry not in self._entries:
            self.writes += 1
            self._entries[entry] = tuple(value)

    def set_default(self, key: Sequence[Bit],
                    default: Optional[Sequence[Bit]]) -> BitVector:
        """
        Return the block at key, inserting `default` first if absent.

        Raises:
            MissingDefaultError: if default is None
        """
        if default is None:
            raise MissingDefaultError()

        self.put_if_absent(key, default)
        return self.get(key)

    def clear(self) -> None:
        """Remove all entries."""
        self._entries.clear()

    def items(self) -> Iterator[Tuple[str, BitVector]]:
        """Entries in key order."""
        for key in sorted(self._entries):
            yield key, self._entries[key]

    def _check_width(self, value: Sequence[Bit]) -> None:
        if len(value) != self.block_width:
            raise BitWidthError(self.block_width, len(value), "cache block")

    def monitor(self) -> str:
        lines = [
            "+-----------------------------------+",
            f"| {'Address':<20} | {'Block':<10} |",
            "|----------------------|------------|",
        ]
        for key, block in self.items():
            lines.append(f"| {key[-16:]:<20} | {bits_to_string(block):<10} |")
            lines.append("+-----------------------------------+")
        return "\n".join(lines) + "\n"

    def get_storage_bits(self) -> int:
        """Nominal storage in bits."""
        return self.n_rows * self.block_width

    def get_statistics(self) -> dict:
        """Get table statistics."""
        return {
            'rows': self.n_rows,
            'block_width': self.block_width,
            'total_bits': self.get_storage_bits(),
            'used_entries': len(self._entries),
            'reads': self.reads,
            'writes': self.writes,
        }

    def __contains__(self, key: Sequence[Bit]) -> bool:
        return bits_to_string(key) in self._entries

    def __len__(self) -> int:
        return len(self._entries)


class PartitionedHistoryTable(Monitorable):
    """
    Table of pattern history tables, one per selector.

    The first `selector_width` bits of a key choose a sub-table, the
    remaining bits index into it. Sub-tables are only created by the
    default-insert paths, never by a plain put.
    """

    def __init__(self, selector_width: int, n_rows_per_table: int,
                 block_width: int):
        """
        Args:
            selector_width: Bits of the key that select a sub-table
            n_rows_per_table: Nominal rows in each sub-table
            block_width: Bits per block
        """
        self.selector_width = selector_width
        self.n_rows_per_table = n_rows_per_table
        self.block_width = block_width

        self._tables: Dict[str, HistoryTable] = {}

    def get(self, key: Sequence[Bit]) -> Optional[BitVector]:
        selector, index = self._split(key)
        table = self._tables.get(selector)
        if table is None:
            return None
        return table.get(index)

    def put(self, key: Sequence[Bit], value: Sequence[Bit]) -> None:
        """
        Store a block in an existing sub-table.

        Raises:
            BitWidthError: if the block width is wrong
            PartitionNotProvisionedError: if the selector has no sub-table
        """
        self._check_width(value)
        selector, index = self._split(key)
        table = self._tables.get(selector)
        if table is None:
            raise PartitionNotProvisionedError(selector)
        table.put(index, value)

    def put_if_absent(self, key: Sequence[Bit], value: Sequence[Bit]) -> None:
        """Provision the sub-table if needed, then store if absent."""
        self._check_width(value)
        selector, index = self._split(key)
        self._provision(selector).put_if_absent(index, value)

    def set_default(self, key: Sequence[Bit],
                    default: Optional[Sequence[Bit]]) -> BitVector:
        if default is None:
            raise MissingDefaultError()

        self.put_if_absent(key, default)
        return self.get(key)

    def clear(self) -> None:
        """Clear and discard every sub-table."""
        for table in self._tables.values():
            table.clear()
        self._tables.clear()

    def partitions(self) -> List[str]:
        return sorted(self._tables)

    def partition(self, selector: Sequence[Bit]) -> Optional[HistoryTable]:
        return self._tables.get(bits_to_string(selector))

    def items(self) -> Iterator[Tuple[str, BitVector]]:
        """Entries in key order, keyed by selector + index."""
        for selector in sorted(self._tables):
            for index, block in self._tables[selector].items():
                yield selector + index, block

    def _provision(self, selector: str) -> HistoryTable:
        table = self._tables.get(selector)
        if table is None:
            table = HistoryTable(self.n_rows_per_table, self.block_width)
            self._tables[selector] = table
            logger.debug("Provisioned PHT for selector %s", selector)
        return table

    def _split(self, key: Sequence[Bit]) -> Tuple[str, BitVector]:
        key = tuple(key)
        return (bits_to_string(key[:self.selector_width]),
                key[self.selector_width:])

    def _check_width(self, value: Sequence[Bit]) -> None:
        if len(value) != self.block_width:
            raise BitWidthError(self.block_width, len(value), "cache block")

    def monitor(self) -> str:
        parts = []
        for selector in sorted(self._tables):
            parts.append(f"PHT for selector: {selector}\n"
                         f"{self._tables[selector].monitor()}\n")
        return "".join(parts)

    def get_storage_bits(self) -> int:
        """Nominal storage: one sub-table per possible selector."""
        return ((1 << self.selector_width) * self.n_rows_per_table
                * self.block_width)

    def get_statistics(self) -> dict:
        tables = self._tables.values()
        return {
            'partitions': len(self._tables),
            'rows_per_table': self.n_rows_per_table,
            'block_width': self.block_width,
            'total_bits': self.get_storage_bits(),
            'used_entries': len(self),
            'reads': sum(t.reads for t in tables),
            'writes': sum(t.writes for t in tables),
        }

    def __contains__(self, key: Sequence[Bit]) -> bool:
        selector, index = self._split(key)
        table = self._tables.get(selector)
        return table is not None and index in table

    def __len__(self) -> int:
        return sum(len(t) for t in self._tables.values())


class IndexingScheme:
    """
    Selector functions for partitioned tables and register banks.
    """

    @staticmethod
    def prefix(address: Sequence[Bit], width: int) -> BitVector:
        """The first `width` bits of an address."""
        return tuple(address[:width])

    @staticmethod
    def xor_fold(address: Sequence[Bit], width: int) -> BitVector:
        """
        Fold an address of any length down to `width` bits.

        Bit i of the input is XOR-accumulated into output slot
        i mod width; slots that receive no input bit stay ZERO.
        Pure, so predict and update derive the same selector.

        Args:
            address: Input address bits
            width: Output width (K)

        Returns:
            Selector of exactly `width` bits
        """
        if width <= 0:
            raise ValueError(f"Hash width must be positive, got {width}")

        folded = [Bit.ZERO] * width
        for i, bit in enumerate(address):
            folded[i % width] ^= bit
        return tuple(folded)
