from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, TypedDict, Union

RECURRENCE_NONE = "none"
RECURRENCE_DAILY = "daily"
RECURRENCE_BI_WEEKLY = "bi-weekly"
RECURRENCE_TAGS = (RECURRENCE_NONE, RECURRENCE_DAILY, RECURRENCE_BI_WEEKLY)


# PUBLIC_INTERFACE
class TodoEntity(TypedDict):
    """
    A todo as handed out by the store.

    Fields:
    - id: Opaque unique string (uuid4 for new rows, legacy ids are kept)
    - title: Non-empty trimmed title
    - recurrence_tag: One of RECURRENCE_TAGS
    - note: Free text, "" by default
    - completed: Boolean completion flag
    - due_date: Optional date string; never blank
    - created_at: ISO-8601 timestamp with offset
    - updated_at: ISO-8601 timestamp with offset

    The sort key lives only in the database and is not part of the entity.
    """

    id: str
    title: str
    recurrence_tag: str
    note: str
    completed: bool
    due_date: Optional[str]
    created_at: str
    updated_at: str


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def normalize_recurrence_tag(value: Optional[str]) -> str:
    """Map anything outside the canonical set (including "weekly") to "none"."""
    if value is None:
        return RECURRENCE_NONE
    candidate = value.strip()
    if candidate in (RECURRENCE_DAILY, RECURRENCE_BI_WEEKLY):
        return candidate
    return RECURRENCE_NONE


def normalize_due_date(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    trimmed = value.strip()
    return trimmed or None


# Tri-state update field: leave unchanged, clear, or set to a value.
@dataclass(frozen=True)
class Unchanged:
    pass


@dataclass(frozen=True)
class Clear:
    pass


@dataclass(frozen=True)
class SetTo:
    value: str


FieldChange = Union[Unchanged, Clear, SetTo]

UNCHANGED = Unchanged()
CLEAR = Clear()


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class TodoPatch:
    """
    Partial update for a todo. None means "leave as is" for the plain fields;
    due_date uses an explicit FieldChange so that clearing is not confused
    with omission.
    """

    title: Optional[str] = None
    recurrence_tag: Optional[str] = None
    note: Optional[str] = None
    completed: Optional[bool] = None
    due_date: FieldChange = field(default=UNCHANGED)


@dataclass(frozen=True)
class LegacyTodo:
    """A record from the pre-SQLite local storage, as supplied by the shell."""

    id: str
    title: str
    note: str = ""
    completed: bool = False
    recurrence_tag: Optional[str] = None
    due_date: Optional[str] = None
    created_at: str = ""
    updated_at: str = ""


@dataclass(frozen=True)
class MigrationResult:
    migrated_count: int
    already_migrated: bool
