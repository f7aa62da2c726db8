"""
Task repository - JSON file operations for the REST API tasks.

The whole collection lives in one file as a JSON array. Every change is a
read-modify-write of the full array; there is no partial update.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List

from tasktrack.errors import FormatError, StorageError
from tasktrack.utils.json_format import pretty_dumps

logger = logging.getLogger(__name__)

_locks_guard = threading.Lock()
_file_locks: Dict[Path, threading.Lock] = {}


def _lock_for(path: Path) -> threading.Lock:
    """One lock per resolved file path, shared by every repository on that file."""
    key = path.resolve()
    with _locks_guard:
        lock = _file_locks.get(key)
        if lock is None:
            lock = threading.Lock()
            _file_locks[key] = lock
        return lock


class TaskFileRepository:
    """Repository for the JSON task file."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._lock = _lock_for(self.path)

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Serialize a read-modify-write cycle against this file within the process."""
        with self._lock:
            yield

    def read_all(self) -> List[Dict[str, Any]]:
        """Load every stored record. A missing file is an empty collection."""
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except OSError as exc:
            raise StorageError(f"failed to read {self.path.name}: {exc.strerror or exc}") from exc

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise FormatError(f"{self.path.name} contains invalid JSON") from exc

        if not isinstance(data, list):
            raise FormatError(f"{self.path.name} must contain a JSON array")
        if not all(isinstance(item, dict) for item in data):
            raise FormatError(f"{self.path.name} must contain an array of task objects")
        return data

    def write_all(self, records: List[Dict[str, Any]]) -> None:
        """Replace the file contents with the given records (atomic rename)."""
        text = pretty_dumps(records)
        directory = self.path.parent
        tmp_name = None
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", suffix=".tmp", dir=directory)
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(text)
            os.replace(tmp_name, self.path)
            tmp_name = None
        except OSError as exc:
            raise StorageError(f"failed to write {self.path.name}: {exc.strerror or exc}") from exc
        finally:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    logger.warning("Could not remove temp file %s", tmp_name)
        logger.debug("Wrote %d tasks to %s", len(records), self.path)
