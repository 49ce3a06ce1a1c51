from __future__ import annotations

import logging
import sqlite3
import uuid
from typing import Callable, List, Optional, Sequence

from .db import COLS, TODO_SELECT, Database
from .errors import NotFoundError, ValidationError
from .models import (
    Clear,
    SetTo,
    TodoEntity,
    TodoPatch,
    normalize_due_date,
    normalize_recurrence_tag,
    now_iso,
)

logger = logging.getLogger(__name__)

TITLE_EMPTY = "Title cannot be empty"


def _clean_title(title: Optional[str]) -> str:
    trimmed = (title or "").strip()
    if not trimmed:
        raise ValidationError(TITLE_EMPTY)
    return trimmed


def _row_to_entity(row: sqlite3.Row) -> TodoEntity:
    return {
        "id": str(row[COLS.id]),
        "title": str(row[COLS.title]),
        "recurrence_tag": normalize_recurrence_tag(row[COLS.recurrence_tag]),
        "note": row[COLS.note] or "",
        "completed": bool(row[COLS.completed]),
        "due_date": row[COLS.due_date],
        "created_at": str(row[COLS.created_at]),
        "updated_at": str(row[COLS.updated_at]),
    }


def _fetch(conn: sqlite3.Connection, todo_id: str) -> Optional[TodoEntity]:
    row = conn.execute(f"{TODO_SELECT} WHERE {COLS.id} = ?", (todo_id,)).fetchone()
    return _row_to_entity(row) if row else None


def _fetch_or_raise(conn: sqlite3.Connection, todo_id: str) -> TodoEntity:
    entity = _fetch(conn, todo_id)
    if entity is None:
        raise NotFoundError(f"Todo not found: {todo_id}")
    return entity


def _escape_like(text: str) -> str:
    # Search text is literal; % and _ must not act as wildcards.
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def min_sort_order(conn: sqlite3.Connection) -> int:
    """Smallest stored sort key, or 0 for an empty table."""
    row = conn.execute(f"SELECT COALESCE(MIN({COLS.sort_order}), 0) FROM {COLS.table}").fetchone()
    return int(row[0])


# PUBLIC_INTERFACE
class TodoRepository:
    """
    CRUD and ordering over the todos table.

    Every method runs inside one session of the shared Database handle; reorder
    additionally runs inside a single transaction.
    """

    def __init__(self, db: Database, clock: Callable[[], str] = now_iso) -> None:
        self._db = db
        self._clock = clock

    def list(self, completed: Optional[bool] = None, search: Optional[str] = None) -> List[TodoEntity]:
        """
        Return todos ordered by sort key ascending then newest first.

        Filters:
        - completed: only open (False) or only done (True) todos
        - search: case-insensitive substring match on title, note or due date
        """
        clauses = []
        params: list = []

        if completed is not None:
            clauses.append(f"{COLS.completed} = ?")
            params.append(1 if completed else 0)

        needle = (search or "").strip()
        if needle:
            clauses.append(
                f"({COLS.title} LIKE ? ESCAPE '\\' OR {COLS.note} LIKE ? ESCAPE '\\' "
                f"OR COALESCE({COLS.due_date}, '') LIKE ? ESCAPE '\\')"
            )
            like = f"%{_escape_like(needle)}%"
            params.extend([like, like, like])

        where_sql = f" WHERE {' AND '.join(clauses)}" if clauses else ""
        with self._db.session() as conn:
            rows = conn.execute(
                f"{TODO_SELECT}{where_sql} ORDER BY {COLS.sort_order} ASC, {COLS.created_at} DESC",
                params,
            ).fetchall()
            return [_row_to_entity(r) for r in rows]

    def get(self, todo_id: str) -> Optional[TodoEntity]:
        with self._db.session() as conn:
            return _fetch(conn, todo_id)

    def create(
        self,
        title: str,
        recurrence_tag: Optional[str] = None,
        note: Optional[str] = None,
        due_date: Optional[str] = None,
    ) -> TodoEntity:
        """
        Insert a new todo in front of every existing one.

        Raises:
            ValidationError if the trimmed title is empty.
        """
        clean_title = _clean_title(title)
        now = self._clock()
        entity: TodoEntity = {
            "id": str(uuid.uuid4()),
            "title": clean_title,
            "recurrence_tag": normalize_recurrence_tag(recurrence_tag),
            "note": note or "",
            "completed": False,
            "due_date": normalize_due_date(due_date),
            "created_at": now,
            "updated_at": now,
        }
        with self._db.session() as conn:
            sort_order = min_sort_order(conn) - 1
            conn.execute(
                f"""
                INSERT INTO {COLS.table} ({COLS.id}, {COLS.title}, {COLS.recurrence_tag}, {COLS.note},
                    {COLS.completed}, {COLS.due_date}, {COLS.sort_order}, {COLS.created_at}, {COLS.updated_at})
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    entity["id"],
                    entity["title"],
                    entity["recurrence_tag"],
                    entity["note"],
                    0,
                    entity["due_date"],
                    sort_order,
                    entity["created_at"],
                    entity["updated_at"],
                ),
            )
        logger.debug("Todo created id=%s sort_order=%s", entity["id"], sort_order)
        return entity

    def update(self, todo_id: str, patch: TodoPatch) -> TodoEntity:
        """
        Apply the fields present in `patch` and refresh updated_at.

        Raises:
            NotFoundError if the id is unknown.
            ValidationError if a present title trims to empty.
        """
        with self._db.session() as conn:
            updated = _fetch_or_raise(conn, todo_id).copy()

            if patch.title is not None:
                updated["title"] = _clean_title(patch.title)
            if patch.recurrence_tag is not None:
                updated["recurrence_tag"] = normalize_recurrence_tag(patch.recurrence_tag)
            if patch.note is not None:
                updated["note"] = patch.note
            if patch.completed is not None:
                updated["completed"] = bool(patch.completed)
            if isinstance(patch.due_date, Clear):
                updated["due_date"] = None
            elif isinstance(patch.due_date, SetTo):
                updated["due_date"] = normalize_due_date(patch.due_date.value)
            updated["updated_at"] = self._clock()

            conn.execute(
                f"""
                UPDATE {COLS.table}
                SET {COLS.title} = ?, {COLS.recurrence_tag} = ?, {COLS.note} = ?, {COLS.completed} = ?,
                    {COLS.due_date} = ?, {COLS.updated_at} = ?
                WHERE {COLS.id} = ?
                """,
                (
                    updated["title"],
                    updated["recurrence_tag"],
                    updated["note"],
                    1 if updated["completed"] else 0,
                    updated["due_date"],
                    updated["updated_at"],
                    todo_id,
                ),
            )
        logger.debug("Todo updated id=%s", todo_id)
        return updated

    def toggle(self, todo_id: str) -> TodoEntity:
        """Flip the completed flag. Raises NotFoundError for unknown ids."""
        with self._db.session() as conn:
            target = _fetch_or_raise(conn, todo_id).copy()
            target["completed"] = not target["completed"]
            target["updated_at"] = self._clock()
            conn.execute(
                f"UPDATE {COLS.table} SET {COLS.completed} = ?, {COLS.updated_at} = ? WHERE {COLS.id} = ?",
                (1 if target["completed"] else 0, target["updated_at"], todo_id),
            )
        return target

    def delete(self, todo_id: str) -> None:
        """Remove the row if present. Unknown ids are a no-op."""
        with self._db.session() as conn:
            cur = conn.execute(f"DELETE FROM {COLS.table} WHERE {COLS.id} = ?", (todo_id,))
        logger.debug("Todo delete id=%s removed=%s", todo_id, cur.rowcount)

    def reorder(self, ids: Sequence[str]) -> None:
        """
        Assign sort keys 0..n-1 following `ids`, atomically.

        `ids` is expected to be the full current id set in the desired order;
        rows left out keep their previous sort key.
        """
        now = self._clock()
        with self._db.transaction() as conn:
            for index, todo_id in enumerate(ids):
                conn.execute(
                    f"UPDATE {COLS.table} SET {COLS.sort_order} = ?, {COLS.updated_at} = ? WHERE {COLS.id} = ?",
                    (index, now, todo_id),
                )
        logger.debug("Todos reordered count=%s", len(ids))
