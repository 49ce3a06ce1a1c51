from __future__ import annotations

import sqlite3
from typing import Optional

from .db import META_COLS, Database

MIGRATION_KEY = "legacy_migration_done"
WINDOW_PREFS_KEY = "window_prefs_json"
UI_PREFS_KEY = "ui_prefs_json"


# PUBLIC_INTERFACE
class MetaStore:
    """
    Generic string key/value persistence on top of the app_meta table.

    `get`/`set` work on a connection the caller already holds, so they can be
    part of a larger session or transaction. `get_value`/`set_value` open their
    own session. Values are stored as given; callers own the encoding.
    """

    def __init__(self, db: Database) -> None:
        self._db = db

    @staticmethod
    def get(conn: sqlite3.Connection, key: str) -> Optional[str]:
        row = conn.execute(
            f"SELECT {META_COLS.value} FROM {META_COLS.table} WHERE {META_COLS.key} = ?", (key,)
        ).fetchone()
        return None if row is None else str(row[0])

    @staticmethod
    def set(conn: sqlite3.Connection, key: str, value: str) -> None:
        conn.execute(
            f"""
            INSERT INTO {META_COLS.table} ({META_COLS.key}, {META_COLS.value}) VALUES (?, ?)
            ON CONFLICT({META_COLS.key}) DO UPDATE SET {META_COLS.value} = excluded.{META_COLS.value}
            """,
            (key, value),
        )

    def get_value(self, key: str) -> Optional[str]:
        with self._db.session() as conn:
            return self.get(conn, key)

    def set_value(self, key: str, value: str) -> None:
        with self._db.session() as conn:
            self.set(conn, key, value)
