"""
Streaming JSON Lines handlers for sample logs and prediction exports
"""

import json
import logging
from pathlib import Path
from typing import Any, Generator, Iterable

from ..core import Sample
from .serialization import NumpyJsonEncoder


class StreamingWriter:
    """Write one JSON document per line"""

    def __init__(self, filepath: str, append: bool = False, flush_every: int = 100):
        """
        Initialize streaming writer

        Args:
            filepath: Output file path
            append: Append to an existing file instead of truncating it
            flush_every: Flush after this many items
        """
        self.filepath = filepath
        self.append = append
        self.flush_every = max(1, flush_every)
        self.file_handle = None
        self.items_written = 0

        Path(filepath).parent.mkdir(parents=True, exist_ok=True)
        self.logger = logging.getLogger(__name__)

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def open(self):
        if self.file_handle is None:
            self.file_handle = open(self.filepath, 'a' if self.append else 'w')

    def write(self, item: Any):
        """Write single item"""
        if not self.file_handle:
            raise RuntimeError("Writer not opened")

        json.dump(item, self.file_handle, cls=NumpyJsonEncoder)
        self.file_handle.write('\n')
        self.items_written += 1

        # Periodic flush
        if self.items_written % self.flush_every == 0:
            self.file_handle.flush()

    def write_all(self, items: Iterable[Any]):
        for item in items:
            self.write(item)

    def close(self):
        """Close writer"""
        if self.file_handle:
            self.file_handle.close()
            self.file_handle = None
            self.logger.debug(f"Streaming writer closed: {self.items_written} items")


class StreamingReader:
    """Read JSON Lines lazily"""

    def __init__(self, filepath: str):
        """
        Initialize streaming reader

        Args:
            filepath: Input file path
        """
        self.filepath = filepath

        if not Path(filepath).exists():
            raise FileNotFoundError(f"File not found: {filepath}")

    def read(self) -> Generator[Any, None, None]:
        """Read items generator; blank lines are skipped"""
        with open(self.filepath, 'r') as f:
            for line_number, line in enumerate(f, start=1):
                if not line.strip():
                    continue
                try:
                    yield json.loads(line)
                except json.JSONDecodeError as e:
                    raise ValueError(f"{self.filepath}:{line_number}: invalid JSON ({e.msg})") from e

    def read_samples(self) -> Generator[Sample, None, None]:
        """Read recorded detector samples"""
        for item in self.read():
            yield Sample.from_dict(item)
