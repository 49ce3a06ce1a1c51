from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .db import Database
from .meta import MetaStore
from .migration import MigrationService
from .preferences import PreferencesService
from .repositories import TodoRepository
from .schema import ensure_schema
from .settings import Settings
from .window import NullWindowController, WindowController, apply_window_prefs

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
@dataclass
class AppContext:
    """
    Everything the operations need, owned in one place and passed explicitly.

    All services share the same Database handle, so every operation is
    serialized by its lock.
    """

    db: Database
    schema_version: int
    meta: MetaStore
    todos: TodoRepository
    prefs: PreferencesService
    migration: MigrationService
    window: WindowController

    @classmethod
    def open(cls, settings: Settings, window: Optional[WindowController] = None) -> "AppContext":
        """
        Open the store, bring the schema up to date and restore the window.

        Raises:
            StorageError / SchemaError if the database cannot be opened or
            migrated; these are fatal to startup.
        """
        db = Database(settings.sqlite_db_path, lock_timeout=settings.db_lock_timeout)
        try:
            version = ensure_schema(db)
        except Exception:
            db.close()
            raise
        win = window or NullWindowController()
        prefs = PreferencesService(db, win)
        apply_window_prefs(win, prefs.load_startup_window_prefs())
        logger.info("Store ready db=%s schema_version=%s", db.path, version)
        return cls(
            db=db,
            schema_version=version,
            meta=MetaStore(db),
            todos=TodoRepository(db),
            prefs=prefs,
            migration=MigrationService(db),
            window=win,
        )

    def close(self) -> None:
        self.db.close()
