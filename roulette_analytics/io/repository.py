"""
Simulation record repositories
"""

import logging
import os
import threading
from pathlib import Path
from typing import Callable, Dict, List, Optional, TypeVar

from ..core import SimulationRecord, SimulationRepository, RepositoryError, POCKET_COUNT
from ..core.constants import MS_PER_DAY, RETENTION_DAYS
from .streaming import StreamingReader, StreamingWriter

T = TypeVar('T')


def _check_number(actual_number: int):
    if not 0 <= actual_number < POCKET_COUNT:
        raise ValueError(f"Pocket number must be in [0, {POCKET_COUNT - 1}], got {actual_number}")


class InMemorySimulationRepository(SimulationRepository):
    """Thread-safe repository keeping records in insertion order"""

    def __init__(self):
        self._records: Dict[int, SimulationRecord] = {}
        self._next_id = 1
        self._lock = threading.Lock()
        self.logger = logging.getLogger(__name__)

    def insert(self, predicted_number: int, confidence: float, timestamp: int) -> SimulationRecord:
        with self._lock:
            record = SimulationRecord(
                id=self._next_id,
                timestamp=timestamp,
                predicted_number=predicted_number,
                confidence=confidence
            )
            self._records[record.id] = record
            self._next_id += 1
        return record

    def update_actual_number(self, record_id: int, actual_number: int) -> None:
        _check_number(actual_number)
        with self._lock:
            record = self._records.get(record_id)
            if record is None:
                raise RepositoryError(f"No record with id {record_id}")
            self._records[record_id] = SimulationRecord(
                id=record.id,
                timestamp=record.timestamp,
                predicted_number=record.predicted_number,
                confidence=record.confidence,
                actual_number=actual_number
            )

    def delete_older_than(self, timestamp: int) -> int:
        with self._lock:
            stale = [rid for rid, r in self._records.items() if r.timestamp < timestamp]
            for rid in stale:
                del self._records[rid]
        if stale:
            self.logger.info(f"Deleted {len(stale)} records older than {timestamp}")
        return len(stale)

    def get(self, record_id: int) -> Optional[SimulationRecord]:
        with self._lock:
            return self._records.get(record_id)

    def all(self) -> List[SimulationRecord]:
        with self._lock:
            records = list(self._records.values())
        return sorted(records, key=lambda r: (r.timestamp, r.id))

    def delete_all(self) -> None:
        with self._lock:
            self._records.clear()

    def __len__(self) -> int:
        return len(self._records)


class JsonlSimulationRepository(InMemorySimulationRepository):
    """Repository persisted as a JSON Lines file.

    Inserts are appended; updates and deletions rewrite the whole file
    through a temporary file swapped in with ``os.replace``. A failed write
    leaves both the file and the in-memory records unchanged and is raised
    as RepositoryError.
    """

    def __init__(self, filepath: str):
        """
        Initialize repository

        Args:
            filepath: Records file, created on first write
        """
        super().__init__()
        self.filepath = filepath
        # Serializes file writes with their in-memory change
        self._write_lock = threading.Lock()
        self._load()

    def _load(self):
        if not Path(self.filepath).exists():
            return

        try:
            for item in StreamingReader(self.filepath).read():
                record = SimulationRecord.from_dict(item)
                self._records[record.id] = record
        except (OSError, ValueError, KeyError) as e:
            raise RepositoryError(f"Failed to load {self.filepath}: {e}") from e

        if self._records:
            self._next_id = max(self._records) + 1
        self.logger.debug(f"Loaded {len(self._records)} records from {self.filepath}")

    def _rewrite(self):
        path = Path(self.filepath)
        tmp_path = path.with_name(path.name + '.tmp')
        try:
            with StreamingWriter(str(tmp_path)) as writer:
                writer.write_all(r.to_dict() for r in self.all())
            os.replace(tmp_path, path)
        except OSError as e:
            tmp_path.unlink(missing_ok=True)
            raise RepositoryError(f"Failed to write {self.filepath}: {e}") from e

    def _apply(self, change: Callable[[], T]) -> T:
        """Run an in-memory change and persist it, restoring the records on failure"""
        with self._write_lock:
            with self._lock:
                snapshot = dict(self._records)
            result = change()
            try:
                self._rewrite()
            except RepositoryError:
                with self._lock:
                    self._records = snapshot
                raise
            return result

    def insert(self, predicted_number: int, confidence: float, timestamp: int) -> SimulationRecord:
        with self._write_lock:
            record = super().insert(predicted_number, confidence, timestamp)
            try:
                with StreamingWriter(self.filepath, append=True) as writer:
                    writer.write(record.to_dict())
            except OSError as e:
                with self._lock:
                    self._records.pop(record.id, None)
                raise RepositoryError(f"Failed to append to {self.filepath}: {e}") from e
        return record

    def update_actual_number(self, record_id: int, actual_number: int) -> None:
        self._apply(lambda: super(JsonlSimulationRepository, self).update_actual_number(record_id, actual_number))

    def delete_older_than(self, timestamp: int) -> int:
        with self._lock:
            stale = any(r.timestamp < timestamp for r in self._records.values())
        if not stale:
            return 0
        return self._apply(lambda: super(JsonlSimulationRepository, self).delete_older_than(timestamp))

    def delete_all(self) -> None:
        self._apply(super().delete_all)


def sweep_retention(repository: SimulationRepository, now: int, days: int = RETENTION_DAYS) -> int:
    """
    Delete records older than the retention window

    Args:
        repository: Target repository
        now: Current time in ms
        days: Retention window in days

    Returns:
        Number of deleted records
    """
    if days < 0:
        raise ValueError("Retention days must not be negative")
    return repository.delete_older_than(now - days * MS_PER_DAY)
