"""Database schema DDL definitions and initialization utilities.

Tables:
  - kv_store: key/value blobs (serialized budget collection, settings)
  - metadata: schema version marker
"""

from __future__ import annotations
import sqlite3
from typing import Sequence
from pathlib import Path

BASIC_UTC_NOW = "strftime('%Y-%m-%dT%H:%M:%fZ','now')"
CURRENT_SCHEMA_VERSION = 1

KV_STORE_DDL = f"""
CREATE TABLE IF NOT EXISTS kv_store (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW})
);
"""

METADATA_DDL = f"""
CREATE TABLE IF NOT EXISTS metadata (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW})
);
"""

ALL_DDL: Sequence[str] = (KV_STORE_DDL, METADATA_DDL)


def init_db(db_path: Path) -> None:
    """Create tables if they do not exist and stamp the schema version (idempotent)."""
    conn = sqlite3.connect(db_path)
    try:
        cur = conn.cursor()
        for ddl in ALL_DDL:
            cur.executescript(ddl)
        cur.execute(
            "INSERT INTO metadata (key, value) VALUES ('schema_version', ?) "
            "ON CONFLICT(key) DO NOTHING",
            (str(CURRENT_SCHEMA_VERSION),),
        )
        conn.commit()
    finally:
        conn.close()
