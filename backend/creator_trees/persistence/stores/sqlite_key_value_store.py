"""SQLite implementation of KeyValueStore."""
from __future__ import annotations
import os
import sqlite3
from typing import Optional

from creator_trees.domain.common.errors import StorageError
from creator_trees.persistence.interfaces.key_value_store import KeyValueStore

_SCHEMA = """
CREATE TABLE IF NOT EXISTS kv_store (
    key   TEXT PRIMARY KEY,
    value TEXT NOT NULL
)
"""


class SqliteKeyValueStore(KeyValueStore):

    def __init__(self, db_path: str):
        self._db_path = db_path
        self.init_db()

    def get_connection(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        return conn

    def init_db(self) -> None:
        """Create the parent directory and the kv_store table if needed."""
        parent = os.path.dirname(self._db_path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        conn = self.get_connection()
        conn.execute(_SCHEMA)
        conn.commit()
        conn.close()

    def get(self, key: str) -> Optional[str]:
        try:
            conn = self.get_connection()
            try:
                row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise StorageError(str(e)) from e
        return row["value"] if row else None

    def set(self, key: str, value: str) -> None:
        try:
            conn = self.get_connection()
            try:
                conn.execute(
                    """
                    INSERT INTO kv_store (key, value) VALUES (:key, :value)
                    ON CONFLICT(key) DO UPDATE SET value = excluded.value
                    """,
                    {"key": key, "value": value},
                )
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise StorageError(str(e)) from e
