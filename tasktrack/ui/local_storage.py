"""
Browser-local key-value storage.

The browser task store only needs string get/set by key. Two backends:
an in-memory dict (tests, throwaway sessions) and a SQLAlchemy table that
survives restarts.
"""

from __future__ import annotations

import logging
from typing import Dict, Optional, Protocol

from sqlalchemy import Column, MetaData, String, Table, Text, create_engine, delete, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from tasktrack.errors import StorageError

logger = logging.getLogger(__name__)

metadata = MetaData()

local_storage_table = Table(
    "local_storage",
    metadata,
    Column("key", String(255), primary_key=True),
    Column("value", Text, nullable=False),
)


class LocalStorage(Protocol):
    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class MemoryLocalStorage:
    """Dict-backed storage."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class SqlLocalStorage:
    """
    SQLAlchemy-backed storage (SQLite by default).

    The table is created on construction. Each call runs in its own
    transaction so a failed write leaves the previous value in place.
    """

    def __init__(self, url_or_engine: str | Engine, echo: bool = False):
        if isinstance(url_or_engine, Engine):
            self.engine = url_or_engine
        else:
            self.engine = create_engine(url_or_engine, echo=echo, future=True)
        try:
            metadata.create_all(self.engine)
        except SQLAlchemyError as exc:
            raise StorageError(f"local storage unavailable: {exc}") from exc

    def get_item(self, key: str) -> Optional[str]:
        try:
            with self.engine.connect() as conn:
                row = conn.execute(
                    select(local_storage_table.c.value).where(local_storage_table.c.key == key)
                ).first()
        except SQLAlchemyError as exc:
            raise StorageError(f"failed to read {key!r} from local storage") from exc
        return None if row is None else row[0]

    def set_item(self, key: str, value: str) -> None:
        try:
            with self.engine.begin() as conn:
                conn.execute(delete(local_storage_table).where(local_storage_table.c.key == key))
                conn.execute(local_storage_table.insert().values(key=key, value=value))
        except SQLAlchemyError as exc:
            raise StorageError(f"failed to write {key!r} to local storage") from exc

    def remove_item(self, key: str) -> None:
        try:
            with self.engine.begin() as conn:
                conn.execute(delete(local_storage_table).where(local_storage_table.c.key == key))
        except SQLAlchemyError as exc:
            raise StorageError(f"failed to remove {key!r} from local storage") from exc

    def dispose(self) -> None:
        self.engine.dispose()
