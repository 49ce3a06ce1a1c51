from __future__ import annotations

import sqlite3

import pytest

from todo_note.db import Database
from todo_note.errors import SchemaError
from todo_note.repositories import TodoRepository
from todo_note.schema import SCHEMA_VERSION, ensure_schema, get_schema_version


def _columns(db: Database, table: str) -> dict:
    with db.session() as conn:
        return {row["name"]: row["dflt_value"] for row in conn.execute(f"PRAGMA table_info({table})")}


def _indexes(db: Database) -> set:
    with db.session() as conn:
        return {row["name"] for row in conn.execute("SELECT name FROM sqlite_master WHERE type = 'index'")}


def test_fresh_database_gets_full_schema(db_path):
    db = Database(db_path)
    assert ensure_schema(db) == SCHEMA_VERSION

    cols = _columns(db, "todos")
    assert set(cols) == {
        "id", "title", "recurrence_tag", "note", "completed", "due_date", "sort_order", "created_at", "updated_at",
    }
    assert cols["recurrence_tag"] == "'none'"
    assert cols["note"] == "''"
    assert cols["completed"] == "0"
    assert set(_columns(db, "app_meta")) == {"key", "value"}
    assert {"idx_todos_sort_order", "idx_todos_completed_sort"} <= _indexes(db)
    db.close()


def test_is_idempotent(db):
    assert ensure_schema(db) == SCHEMA_VERSION
    assert ensure_schema(db) == SCHEMA_VERSION
    with db.session() as conn:
        assert get_schema_version(conn) == SCHEMA_VERSION


def test_adds_recurrence_tag_to_old_database(db_path):
    raw = sqlite3.connect(db_path)
    raw.execute(
        """
        CREATE TABLE todos (
            id TEXT PRIMARY KEY, title TEXT NOT NULL, note TEXT NOT NULL DEFAULT '',
            completed INTEGER NOT NULL DEFAULT 0, due_date TEXT NULL, sort_order INTEGER NOT NULL,
            created_at TEXT NOT NULL, updated_at TEXT NOT NULL
        )
        """
    )
    raw.execute(
        "INSERT INTO todos (id, title, sort_order, created_at, updated_at) VALUES ('old', 'Old', 0, 't', 't')"
    )
    raw.commit()
    raw.close()

    db = Database(db_path)
    assert ensure_schema(db) == SCHEMA_VERSION
    assert "recurrence_tag" in _columns(db, "todos")
    [old] = TodoRepository(db).list()
    assert old["recurrence_tag"] == "none"
    db.close()


def test_unversioned_database_that_already_has_the_column(db_path):
    raw = sqlite3.connect(db_path)
    raw.execute(
        """
        CREATE TABLE todos (
            id TEXT PRIMARY KEY, title TEXT NOT NULL, recurrence_tag TEXT NOT NULL DEFAULT 'none',
            note TEXT NOT NULL DEFAULT '', completed INTEGER NOT NULL DEFAULT 0, due_date TEXT NULL,
            sort_order INTEGER NOT NULL, created_at TEXT NOT NULL, updated_at TEXT NOT NULL
        )
        """
    )
    raw.commit()
    raw.close()

    db = Database(db_path)
    assert ensure_schema(db) == SCHEMA_VERSION
    db.close()


def test_newer_database_is_rejected(db_path):
    raw = sqlite3.connect(db_path)
    raw.execute(f"PRAGMA user_version = {SCHEMA_VERSION + 1}")
    raw.commit()
    raw.close()

    db = Database(db_path)
    with pytest.raises(SchemaError):
        ensure_schema(db)
    db.close()


def test_failed_step_is_fatal(db_path):
    raw = sqlite3.connect(db_path)
    # A view named like the table makes CREATE TABLE/ALTER impossible.
    raw.execute("CREATE VIEW todos AS SELECT 1 AS id")
    raw.commit()
    raw.close()

    db = Database(db_path)
    with pytest.raises(SchemaError):
        ensure_schema(db)
    with db.session() as conn:
        assert get_schema_version(conn) == 0
    db.close()
