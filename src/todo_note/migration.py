from __future__ import annotations

import logging
import uuid
from typing import Callable, Sequence

from .db import COLS, Database
from .meta import MIGRATION_KEY, MetaStore
from .models import LegacyTodo, MigrationResult, normalize_due_date, normalize_recurrence_tag, now_iso
from .repositories import min_sort_order

logger = logging.getLogger(__name__)

_DONE = "true"


# PUBLIC_INTERFACE
class MigrationService:
    """
    One-time import of todos kept by the pre-SQLite version of the app.

    The import is gated by the `legacy_migration_done` meta flag. The flag is
    written in the same transaction as the imported rows, whatever the number
    of rows imported, so the import runs at most once.
    """

    def __init__(self, db: Database, clock: Callable[[], str] = now_iso) -> None:
        self._db = db
        self._clock = clock

    def is_done(self) -> bool:
        with self._db.session() as conn:
            return MetaStore.get(conn, MIGRATION_KEY) == _DONE

    def migrate_legacy_if_needed(self, payload: Sequence[LegacyTodo]) -> MigrationResult:
        """
        Import `payload` unless the import already ran.

        Imported rows are placed before every existing row, keeping the payload
        order. Records with a blank title are skipped; records whose id already
        exists are ignored. Neither consumes a sort slot nor counts as migrated.
        """
        if self.is_done():
            logger.info("Legacy migration already done; skipping %s records", len(payload))
            return MigrationResult(migrated_count=0, already_migrated=True)

        migrated = 0
        with self._db.transaction() as conn:
            # Re-check inside the write lock in case another call got there first.
            if MetaStore.get(conn, MIGRATION_KEY) == _DONE:
                return MigrationResult(migrated_count=0, already_migrated=True)

            next_sort = min_sort_order(conn) - len(payload)

            for legacy in payload:
                title = (legacy.title or "").strip()
                if not title:
                    continue

                todo_id = legacy.id if (legacy.id or "").strip() else str(uuid.uuid4())
                created_at = legacy.created_at if (legacy.created_at or "").strip() else self._clock()
                updated_at = legacy.updated_at if (legacy.updated_at or "").strip() else created_at

                cur = conn.execute(
                    f"""
                    INSERT OR IGNORE INTO {COLS.table} ({COLS.id}, {COLS.title}, {COLS.recurrence_tag},
                        {COLS.note}, {COLS.completed}, {COLS.due_date}, {COLS.sort_order},
                        {COLS.created_at}, {COLS.updated_at})
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        todo_id,
                        title,
                        normalize_recurrence_tag(legacy.recurrence_tag),
                        legacy.note or "",
                        1 if legacy.completed else 0,
                        normalize_due_date(legacy.due_date),
                        next_sort,
                        created_at,
                        updated_at,
                    ),
                )
                if cur.rowcount > 0:
                    migrated += 1
                    next_sort += 1
                else:
                    logger.debug("Legacy todo id=%s already present; ignored", todo_id)

            MetaStore.set(conn, MIGRATION_KEY, _DONE)

        logger.info("Legacy migration imported %s of %s records", migrated, len(payload))
        return MigrationResult(migrated_count=migrated, already_migrated=False)
