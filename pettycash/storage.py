"""Record stores for expense entries.

Backends:
- MemoryStore: process-local, used by tests and as the base for files
- JsonFileStore: MemoryStore written through to a JSON file after every change

Usage:
    with open_store() as store:
        record = store.insert(new_expense)
        store.delete(record.id)

Mutations follow mutate -> persist -> acknowledge. If persisting fails the
in-memory change is rolled back and PersistenceError is raised.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, Iterable, Optional, Tuple

from pettycash.config import DATA_FILE, ensure_data_directories
from pettycash.domain import ExpenseRecord, NewExpense
from pettycash.errors import PersistenceError
from pettycash.transforms import record_from_dict, record_to_dict

logger = logging.getLogger(__name__)


class RecordStore(ABC):
    """Contract the service relies on. ``list`` returns an immutable snapshot."""

    @abstractmethod
    def list(self) -> Tuple[ExpenseRecord, ...]:
        ...

    @abstractmethod
    def get(self, record_id: int) -> Optional[ExpenseRecord]:
        ...

    @abstractmethod
    def insert(self, new: NewExpense) -> ExpenseRecord:
        ...

    @abstractmethod
    def delete(self, record_id: int) -> bool:
        ...

    def open(self) -> "RecordStore":
        return self

    def close(self) -> None:
        pass

    def __enter__(self) -> "RecordStore":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class MemoryStore(RecordStore):

    def __init__(
        self,
        records: Iterable[ExpenseRecord] = (),
        clock: Callable[[], datetime] = datetime.now,
    ):
        self._records: Dict[int, ExpenseRecord] = {}
        self._next_id = 1
        self._clock = clock
        self._lock = threading.RLock()
        self._load(records)

    def _load(self, records: Iterable[ExpenseRecord]) -> None:
        self._records = {}
        self._next_id = 1
        for r in records:
            self._records[r.id] = r
            # ids are never reused while the highest one is still present
            self._next_id = max(self._next_id, r.id + 1)

    def _persist(self) -> None:
        pass

    def list(self) -> Tuple[ExpenseRecord, ...]:
        with self._lock:
            return tuple(self._records.values())

    def get(self, record_id: int) -> Optional[ExpenseRecord]:
        with self._lock:
            return self._records.get(record_id)

    def insert(self, new: NewExpense) -> ExpenseRecord:
        with self._lock:
            record = ExpenseRecord(
                id=self._next_id,
                amount=new.amount,
                description=new.description,
                category=new.category,
                payment_mode=new.payment_mode,
                date=new.date or self._clock(),
                notes=new.notes,
            )
            previous = dict(self._records)
            self._records[record.id] = record
            try:
                self._persist()
            except PersistenceError:
                self._records = previous
                raise
            self._next_id += 1
        logger.info("Inserted expense id=%s (category=%s, amount=%s)",
                    record.id, record.category.value, record.amount)
        return record

    def delete(self, record_id: int) -> bool:
        with self._lock:
            if record_id not in self._records:
                logger.info("Expense id=%s not found", record_id)
                return False
            previous = dict(self._records)
            removed = self._records.pop(record_id)
            try:
                self._persist()
            except PersistenceError:
                self._records = previous
                raise
        logger.info("Deleted expense id=%s (category=%s, amount=%s). Remaining expenses=%d.",
                    record_id, removed.category.value, removed.amount, len(previous) - 1)
        return True


class JsonFileStore(MemoryStore):
    """MemoryStore persisted as a JSON array of records.

    The file is replaced atomically on every mutation. A missing file is
    created empty on ``open``; an unreadable or malformed one raises
    PersistenceError rather than being overwritten. Mutating a store that
    has not been opened raises PersistenceError and leaves the file alone.
    """

    def __init__(self, path: Path | str, clock: Callable[[], datetime] = datetime.now):
        super().__init__(clock=clock)
        self.path = Path(path)
        self._opened = False

    def open(self) -> "JsonFileStore":
        with self._lock:
            if self._opened:
                return self
            if self.path.exists():
                self._load(self._read())
                logger.info("Loaded %d expenses from %s", len(self._records), self.path)
            else:
                logger.info("No data file at %s, starting empty", self.path)
                self._write()
            self._opened = True
        return self

    def close(self) -> None:
        with self._lock:
            if not self._opened:
                return
            self._write()
            self._opened = False
        logger.info("Closed store at %s", self.path)

    def _read(self) -> Tuple[ExpenseRecord, ...]:
        try:
            with self.path.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
        except (OSError, json.JSONDecodeError) as exc:
            logger.exception("Failed to read data file %s", self.path)
            raise PersistenceError(f"Cannot read {self.path}: {exc}") from exc
        if not isinstance(data, list):
            raise PersistenceError(f"{self.path} must contain a JSON array of expenses")
        try:
            return tuple(record_from_dict(d) for d in data)
        except (KeyError, TypeError, ValueError) as exc:
            logger.exception("Malformed expense in %s", self.path)
            raise PersistenceError(f"Malformed expense in {self.path}: {exc}") from exc

    def _persist(self) -> None:
        # an unopened store has not loaded the file; writing would truncate it
        if not self._opened:
            raise PersistenceError(f"Store at {self.path} is not open")
        self._write()

    def _write(self) -> None:
        payload = [record_to_dict(r) for r in self._records.values()]
        tmp_path = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            # atomic write: write to temp file then move
            fd, tmp_path = tempfile.mkstemp(prefix="tmp_expenses_", dir=self.path.parent, text=True)
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(payload, handle, indent=2)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_path, self.path)
        except OSError as exc:
            logger.exception("Failed to save data file %s", self.path)
            if tmp_path is not None and os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise PersistenceError(f"Cannot write {self.path}: {exc}") from exc


def open_store(path: Path | str | None = None) -> JsonFileStore:
    """Create and open the file-backed store; defaults to config.DATA_FILE."""
    if path is None:
        ensure_data_directories()
        path = DATA_FILE
    return JsonFileStore(path).open()
