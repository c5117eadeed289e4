"""Key/value persistence adapters consumed by the budget store.

Contract: ``save(key, blob)`` and ``load(key) -> blob | None``. Writes are
fire-and-forget from the store's point of view; an adapter that fails to write
logs the failure and returns normally.
"""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import Dict, Optional, Protocol

from .schema import BASIC_UTC_NOW, init_db

logger = logging.getLogger("budgetbox.db")


class KeyValueStore(Protocol):
    def save(self, key: str, blob: str) -> None: ...

    def load(self, key: str) -> Optional[str]: ...


class InMemoryKeyValueStore:
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})
        self.writes = 0

    def save(self, key: str, blob: str) -> None:
        self.data[key] = blob
        self.writes += 1

    def load(self, key: str) -> Optional[str]:
        return self.data.get(key)


class SQLiteKeyValueStore:
    def __init__(self, db_path: Path):
        self.db_path = db_path
        init_db(db_path)

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def save(self, key: str, blob: str) -> None:
        try:
            with self._connect() as conn:
                conn.execute(
                    f"""
                    INSERT INTO kv_store (key, value) VALUES (?, ?)
                    ON CONFLICT(key) DO UPDATE SET
                        value = excluded.value,
                        updated_at = ({BASIC_UTC_NOW})
                    """,
                    (key, blob),
                )
        except sqlite3.Error:
            logger.exception("failed to persist key %s", key)

    def load(self, key: str) -> Optional[str]:
        try:
            with self._connect() as conn:
                cur = conn.cursor()
                cur.execute("SELECT value FROM kv_store WHERE key = ?", (key,))
                row = cur.fetchone()
                return row["value"] if row else None
        except sqlite3.Error:
            logger.exception("failed to load key %s", key)
            return None
