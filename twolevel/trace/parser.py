"""
Trace Parser

Unified trace reader/writer for the text formats.
Handles compressed traces and provides a streaming interface.
"""

import gzip
import lzma
import bz2
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Union

from .formats import BitTextFormat, BranchRecord, HexTextFormat, TraceFormat


class BranchTrace:
    """
    Container for branch trace data.

    Can be used for streaming or caching trace data.
    """

    def __init__(self, records: Optional[List[BranchRecord]] = None):
        self._records = records or []

    def add(self, record: BranchRecord) -> None:
        """Add a branch record."""
        self._records.append(record)

    def __iter__(self) -> Iterator[BranchRecord]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __getitem__(self, idx: int) -> BranchRecord:
        return self._records[idx]

    def get_statistics(self) -> dict:
        """Get trace statistics."""
        if not self._records:
            return {'count': 0}

        taken_count = sum(1 for r in self._records if r.taken)
        unique_addresses = len(set(r.address for r in self._records))

        return {
            'count': len(self._records),
            'taken': taken_count,
            'not_taken': len(self._records) - taken_count,
            'taken_ratio': taken_count / len(self._records),
            'unique_addresses': unique_addresses,
        }


class TraceParser:
    """
    Trace parser with format selection and decompression.
    """

    # Supported formats
    FORMATS = {
        'bits': BitTextFormat,
        'hex': HexTextFormat,
    }

    # Compression handlers
    COMPRESSION = {
        '.gz': gzip.open,
        '.gzip': gzip.open,
        '.xz': lzma.open,
        '.bz2': bz2.open,
        '.lzma': lzma.open,
    }

    def __init__(self, format_name: str = 'bits', **format_options):
        """
        Initialize parser.

        Args:
            format_name: 'bits' or 'hex'
            format_options: Passed to the format constructor
        """
        format_class = self.FORMATS.get(format_name.lower())
        if format_class is None:
            raise ValueError(f"Unknown trace format: {format_name}")

        self.format_name = format_name.lower()
        self._format: TraceFormat = format_class(**format_options)

    def _open(self, filepath: Path, mode: str):
        open_func = self.COMPRESSION.get(filepath.suffix.lower(), open)
        return open_func(filepath, mode + 't' if open_func is not open else mode)

    def parse_file(self, filepath: Union[str, Path],
                   max_branches: Optional[int] = None,
                   skip_branches: int = 0) -> Iterator[BranchRecord]:
        """
        Parse a trace file.

        Args:
            filepath: Path to trace file
            max_branches: Maximum branches to read (None = all)
            skip_branches: Number of branches to skip

        Yields:
            BranchRecord for each branch
        """
        filepath = Path(filepath)
        if not filepath.exists():
            raise FileNotFoundError(f"Trace file not found: {filepath}")

        with self._open(filepath, 'r') as file_handle:
            count = 0
            skipped = 0

            for record in self._format.parse(file_handle):
                if skipped < skip_branches:
                    skipped += 1
                    continue

                yield record
                count += 1

                if max_branches and count >= max_branches:
                    break

    def load_trace(self, filepath: Union[str, Path],
                   max_branches: Optional[int] = None,
                   skip_branches: int = 0) -> BranchTrace:
        """Load entire trace into memory."""
        records = list(self.parse_file(filepath, max_branches, skip_branches))
        return BranchTrace(records)

    def write_trace(self, records: Iterable[BranchRecord],
                    filepath: Union[str, Path]) -> int:
        """
        Write records to a (possibly compressed) trace file.

        Returns:
            Number of records written
        """
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)

        with self._open(filepath, 'w') as file_handle:
            return self._format.dump(records, file_handle)

    @classmethod
    def list_supported_formats(cls) -> List[str]:
        """List supported trace formats."""
        return list(cls.FORMATS.keys())
