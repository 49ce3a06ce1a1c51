from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from todo_note.db import Database
from todo_note.main import create_app
from todo_note.migration import MigrationService
from todo_note.preferences import PreferencesService
from todo_note.repositories import TodoRepository
from todo_note.schema import ensure_schema
from todo_note.settings import Settings

from .fakes import RecordingWindow, TickClock


@pytest.fixture()
def db_path(tmp_path: Path) -> str:
    return str(tmp_path / "todo.db")


@pytest.fixture()
def db(db_path: str):
    """
    A migrated database on a temp file.

    Tests may close the handle themselves; closing an already closed
    connection is a no-op.
    """
    database = Database(db_path, lock_timeout=1.0)
    ensure_schema(database)
    yield database
    database.close()


@pytest.fixture()
def clock() -> TickClock:
    return TickClock()


@pytest.fixture()
def repo(db: Database, clock: TickClock) -> TodoRepository:
    return TodoRepository(db, clock=clock)


@pytest.fixture()
def migration(db: Database, clock: TickClock) -> MigrationService:
    return MigrationService(db, clock=clock)


@pytest.fixture()
def window() -> RecordingWindow:
    return RecordingWindow()


@pytest.fixture()
def prefs(db: Database, window: RecordingWindow) -> PreferencesService:
    return PreferencesService(db, window)


@pytest.fixture()
def client(db_path: str, window: RecordingWindow):
    app = create_app(Settings(sqlite_db_path=db_path), window=window)
    with TestClient(app) as c:
        yield c
