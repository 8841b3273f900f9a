from __future__ import annotations

import json
import logging
import os
import threading
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Generic, Iterator, TypeVar

from pydantic import BaseModel, ValidationError

T = TypeVar("T", bound=BaseModel)

_LOCK_TIMEOUT_S = 5.0

_process_locks: dict[str, threading.Lock] = {}
_process_locks_guard = threading.Lock()

logger = logging.getLogger("bettertodo.storage")


def _process_lock(path: Path) -> threading.Lock:
    key = str(path.resolve())
    with _process_locks_guard:
        lock = _process_locks.get(key)
        if lock is None:
            lock = threading.Lock()
            _process_locks[key] = lock
        return lock


class JsonlTable(Generic[T]):
    """A list of pydantic records kept as one JSON object per line.

    Every read-modify-write must run inside ``locked()``: it serializes writers
    within the process and, through an ``O_EXCL`` lock file, across processes
    that share the state directory.
    """

    def __init__(self, file_path: Path, model: type[T]) -> None:
        self.file_path = file_path
        self.model = model
        self.file_path.parent.mkdir(parents=True, exist_ok=True)
        self.lock_path = self.file_path.with_suffix(".lock")
        self._lock = _process_lock(self.file_path)

    def load_all(self) -> list[T]:
        if not self.file_path.exists() or self.file_path.stat().st_size == 0:
            return []

        records: list[T] = []
        with self.file_path.open("r", encoding="utf-8") as handle:
            for line in handle:
                line = line.strip()
                if not line:
                    continue
                try:
                    records.append(self.model.model_validate(json.loads(line)))
                except (json.JSONDecodeError, ValidationError):
                    logger.warning("skipping corrupt record", extra={"extra_fields": {"file": self.file_path.name}})
                    continue
        return records

    def rewrite(self, records: list[T]) -> None:
        tmp_path = self.file_path.with_suffix(".tmp")
        with tmp_path.open("w", encoding="utf-8") as handle:
            for record in records:
                handle.write(record.model_dump_json())
                handle.write("\n")
        tmp_path.replace(self.file_path)

    def append(self, record: T) -> None:
        with self.file_path.open("a", encoding="utf-8") as handle:
            handle.write(record.model_dump_json())
            handle.write("\n")

    @contextmanager
    def locked(self) -> Iterator[None]:
        with self._lock:
            self._acquire_file_lock()
            try:
                yield
            finally:
                try:
                    self.lock_path.unlink()
                except FileNotFoundError:
                    pass

    def _lock_is_stale(self) -> bool:
        try:
            age_s = time.time() - self.lock_path.stat().st_mtime
        except FileNotFoundError:
            return False
        return age_s > _LOCK_TIMEOUT_S

    def _acquire_file_lock(self) -> None:
        deadline = time.monotonic() + _LOCK_TIMEOUT_S
        while True:
            try:
                fd = os.open(self.lock_path, os.O_CREAT | os.O_EXCL | os.O_WRONLY)
                os.close(fd)
                return
            except FileExistsError:
                if time.monotonic() >= deadline or self._lock_is_stale():
                    # Left behind by a crashed process; reclaim it and take it over.
                    logger.warning("stale lock file reclaimed", extra={"extra_fields": {"file": self.lock_path.name}})
                    try:
                        self.lock_path.unlink()
                    except FileNotFoundError:
                        pass
                    deadline = time.monotonic() + _LOCK_TIMEOUT_S
                    continue
                time.sleep(0.01)
