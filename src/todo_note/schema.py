from __future__ import annotations

import logging
import sqlite3
from typing import Callable, List, Tuple

from .db import COLS, META_COLS, Database
from .errors import SchemaError, StorageError

logger = logging.getLogger(__name__)


def _create_base_tables(conn: sqlite3.Connection) -> None:
    conn.execute(
        f"""
        CREATE TABLE IF NOT EXISTS {COLS.table} (
            {COLS.id} TEXT PRIMARY KEY,
            {COLS.title} TEXT NOT NULL,
            {COLS.recurrence_tag} TEXT NOT NULL DEFAULT 'none',
            {COLS.note} TEXT NOT NULL DEFAULT '',
            {COLS.completed} INTEGER NOT NULL DEFAULT 0,
            {COLS.due_date} TEXT NULL,
            {COLS.sort_order} INTEGER NOT NULL,
            {COLS.created_at} TEXT NOT NULL,
            {COLS.updated_at} TEXT NOT NULL
        )
        """
    )
    conn.execute(
        f"""
        CREATE TABLE IF NOT EXISTS {META_COLS.table} (
            {META_COLS.key} TEXT PRIMARY KEY,
            {META_COLS.value} TEXT NOT NULL
        )
        """
    )
    conn.execute(
        f"CREATE INDEX IF NOT EXISTS idx_{COLS.table}_sort_order ON {COLS.table}({COLS.sort_order})"
    )
    conn.execute(
        f"CREATE INDEX IF NOT EXISTS idx_{COLS.table}_completed_sort "
        f"ON {COLS.table}({COLS.completed}, {COLS.sort_order})"
    )


def _add_recurrence_tag(conn: sqlite3.Connection) -> None:
    # Databases written before versioning existed report user_version 0 but
    # may already carry the column, so check before altering.
    cols = {row["name"] for row in conn.execute(f"PRAGMA table_info({COLS.table})")}
    if COLS.recurrence_tag in cols:
        return
    conn.execute(
        f"ALTER TABLE {COLS.table} ADD COLUMN {COLS.recurrence_tag} TEXT NOT NULL DEFAULT 'none'"
    )
    logger.info("Schema migration: added column %s", COLS.recurrence_tag)


# Ordered, numbered steps. Never reorder or renumber; only append.
MIGRATIONS: List[Tuple[int, str, Callable[[sqlite3.Connection], None]]] = [
    (1, "create base tables", _create_base_tables),
    (2, "add todos.recurrence_tag", _add_recurrence_tag),
]

SCHEMA_VERSION = MIGRATIONS[-1][0]


# PUBLIC_INTERFACE
def get_schema_version(conn: sqlite3.Connection) -> int:
    """Return the schema version recorded in PRAGMA user_version."""
    return int(conn.execute("PRAGMA user_version").fetchone()[0])


# PUBLIC_INTERFACE
def ensure_schema(db: Database) -> int:
    """
    Bring the database up to SCHEMA_VERSION. Safe to call on every startup.

    Each pending step runs in its own transaction together with the version
    bump, so a failed step leaves the previous version recorded.

    Returns:
        The schema version after all pending steps ran.

    Raises:
        SchemaError if a step fails or the database is newer than this code.
    """
    try:
        with db.session() as conn:
            current = get_schema_version(conn)
    except StorageError as err:
        raise SchemaError(f"Failed to read schema version: {err.message}") from err

    if current > SCHEMA_VERSION:
        raise SchemaError(
            f"Unsupported database schema version {current}; expected at most {SCHEMA_VERSION}"
        )

    for version, name, step in MIGRATIONS:
        if version <= current:
            continue
        logger.info("Applying schema step %s (%s)", version, name)
        try:
            with db.transaction() as conn:
                step(conn)
                conn.execute(f"PRAGMA user_version = {int(version)}")
        except StorageError as err:
            raise SchemaError(f"Schema step {version} ({name}) failed: {err.message}") from err
        current = version

    return current
