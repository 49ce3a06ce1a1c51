from __future__ import annotations

import logging
import os
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from threading import Lock
from typing import Generator

from .errors import LockError, StorageError

logger = logging.getLogger(__name__)

MEMORY_PATH = ":memory:"


@dataclass(frozen=True)
class _Cols:
    table: str = "todos"
    id: str = "id"
    title: str = "title"
    recurrence_tag: str = "recurrence_tag"
    note: str = "note"
    completed: str = "completed"
    due_date: str = "due_date"
    sort_order: str = "sort_order"
    created_at: str = "created_at"
    updated_at: str = "updated_at"


@dataclass(frozen=True)
class _MetaCols:
    table: str = "app_meta"
    key: str = "key"
    value: str = "value"


COLS = _Cols()
META_COLS = _MetaCols()

TODO_SELECT = (
    f"SELECT {COLS.id}, {COLS.title}, {COLS.recurrence_tag}, {COLS.note}, {COLS.completed}, "
    f"{COLS.due_date}, {COLS.created_at}, {COLS.updated_at}, {COLS.sort_order} FROM {COLS.table}"
)


# PUBLIC_INTERFACE
class Database:
    """
    The single shared storage handle.

    Holds one SQLite connection guarded by one lock. Every store operation runs
    inside exactly one `session()`; multi-statement operations use
    `transaction()` so that either all of their writes apply or none do.

    The connection is opened in autocommit mode (isolation_level=None):
    single statements commit on their own and transactions are always explicit.
    """

    def __init__(self, db_path: str, lock_timeout: float = 5.0) -> None:
        if db_path != MEMORY_PATH:
            os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
        self._db_path = db_path
        self._lock_timeout = lock_timeout
        self._lock = Lock()
        try:
            self._conn = sqlite3.connect(db_path, check_same_thread=False, isolation_level=None)
        except sqlite3.Error as err:
            raise StorageError(str(err)) from err
        self._conn.row_factory = sqlite3.Row
        logger.info("Opened database path=%s", db_path)

    @property
    def path(self) -> str:
        return self._db_path

    def _acquire(self) -> None:
        # timeout=-1 means "wait forever" for threading.Lock
        timeout = self._lock_timeout if self._lock_timeout >= 0 else -1
        if not self._lock.acquire(timeout=timeout):
            raise LockError("Failed to acquire database lock")

    @contextmanager
    def session(self) -> Generator[sqlite3.Connection, None, None]:
        """
        Acquire exclusive access to the connection for the duration of the block.

        Raises:
            LockError if the lock cannot be acquired within the configured timeout.
            StorageError for any sqlite3.Error raised inside the block.
        """
        self._acquire()
        try:
            yield self._conn
        except sqlite3.Error as err:
            raise StorageError(str(err)) from err
        finally:
            self._lock.release()

    @contextmanager
    def transaction(self) -> Generator[sqlite3.Connection, None, None]:
        """
        Exclusive session wrapped in BEGIN IMMEDIATE ... COMMIT.

        Any exception raised inside the block rolls the transaction back and is
        re-raised (sqlite3 errors as StorageError).
        """
        with self.session() as conn:
            conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
            except BaseException:
                conn.execute("ROLLBACK")
                raise
            conn.execute("COMMIT")

    def close(self) -> None:
        with self.session() as conn:
            conn.close()
        logger.info("Closed database path=%s", self._db_path)
