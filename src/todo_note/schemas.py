from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .models import CLEAR, UNCHANGED, LegacyTodo, SetTo, TodoPatch

# The host shell speaks camelCase; Python attributes stay snake_case.
_CAMEL = dict(alias_generator=to_camel, populate_by_name=True)


class PanelMode(str, Enum):
    MINI = "mini"
    EXPANDED = "expanded"


class MotionMode(str, Enum):
    BALANCED = "balanced"
    HIGH = "high"
    LOW = "low"


class ReadabilityMode(str, Enum):
    ADAPTIVE = "adaptive"
    PURE = "pure"
    STRONG = "strong"


class ReduceMotionOverride(str, Enum):
    SYSTEM = "system"
    ON = "on"
    OFF = "off"


# PUBLIC_INTERFACE
class WindowPrefs(BaseModel):
    """
    Persisted window geometry and panel state.

    Defaults are what a first start (or a missing blob) uses.
    """

    model_config = ConfigDict(
        **_CAMEL,
        allow_inf_nan=False,
        json_schema_extra={
            "example": {"x": 80, "y": 80, "width": 380, "height": 520, "mode": "mini", "alwaysOnTop": True}
        },
    )

    x: float = Field(default=80.0, description="Window left position (logical px)")
    y: float = Field(default=80.0, description="Window top position (logical px)")
    width: float = Field(default=380.0, description="Window width (logical px)")
    height: float = Field(default=520.0, description="Window height (logical px)")
    mode: PanelMode = Field(default=PanelMode.MINI, description="Panel mode: mini or expanded")
    always_on_top: bool = Field(default=True, description="Keep the window above others")


# PUBLIC_INTERFACE
class UiPrefs(BaseModel):
    """Persisted UI appearance preferences."""

    model_config = ConfigDict(**_CAMEL)

    motion_mode: MotionMode = Field(default=MotionMode.BALANCED)
    readability_mode: ReadabilityMode = Field(default=ReadabilityMode.ADAPTIVE)
    reduce_motion_override: ReduceMotionOverride = Field(default=ReduceMotionOverride.SYSTEM)


# PUBLIC_INTERFACE
class TodoCreate(BaseModel):
    """
    Schema for creating a new Todo item.

    The title is trimmed and checked by the store, which answers
    "Title cannot be empty" for blank titles.
    """

    model_config = ConfigDict(
        **_CAMEL,
        json_schema_extra={
            "example": {"title": "Buy milk", "recurrenceTag": "daily", "note": "2 litres", "dueDate": "2025-02-01"}
        },
    )

    title: str = Field(..., description="Short title for the todo item")
    recurrence_tag: Optional[str] = Field(default=None, description="none, daily or bi-weekly")
    note: Optional[str] = Field(default=None, description="Free text note")
    due_date: Optional[str] = Field(default=None, description="Optional due date; blank means none")


# PUBLIC_INTERFACE
class TodoUpdate(BaseModel):
    """
    Schema for partially updating a Todo item.

    Omitted fields are left unchanged. For dueDate an explicit null clears the
    stored value, which is why it is read from model_fields_set.
    """

    model_config = ConfigDict(**_CAMEL)

    title: Optional[str] = Field(default=None)
    recurrence_tag: Optional[str] = Field(default=None)
    note: Optional[str] = Field(default=None)
    completed: Optional[bool] = Field(default=None)
    due_date: Optional[str] = Field(default=None)

    def to_patch(self) -> TodoPatch:
        if "due_date" not in self.model_fields_set:
            due = UNCHANGED
        elif self.due_date is None:
            due = CLEAR
        else:
            due = SetTo(self.due_date)
        return TodoPatch(
            title=self.title,
            recurrence_tag=self.recurrence_tag,
            note=self.note,
            completed=self.completed,
            due_date=due,
        )


# PUBLIC_INTERFACE
class TodoOut(BaseModel):
    """Schema returned by the API for a Todo item."""

    model_config = ConfigDict(**_CAMEL)

    id: str
    title: str
    recurrence_tag: str
    note: str
    completed: bool
    due_date: Optional[str] = None
    created_at: str
    updated_at: str


class ReorderRequest(BaseModel):
    ids: List[str] = Field(..., description="Every todo id, in the desired display order")


class LegacyTodoIn(BaseModel):
    """A todo from the old local storage. Unknown keys are ignored."""

    model_config = ConfigDict(**_CAMEL)

    id: str = ""
    title: str = ""
    recurrence_tag: Optional[str] = None
    note: str = ""
    completed: bool = False
    due_date: Optional[str] = None
    created_at: str = ""
    updated_at: str = ""

    def to_legacy(self) -> LegacyTodo:
        return LegacyTodo(
            id=self.id,
            title=self.title,
            note=self.note,
            completed=self.completed,
            recurrence_tag=self.recurrence_tag,
            due_date=self.due_date,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class MigrateLegacyRequest(BaseModel):
    payload: List[LegacyTodoIn] = Field(default_factory=list)


class MigrationResultOut(BaseModel):
    model_config = ConfigDict(**_CAMEL)

    migrated_count: int
    already_migrated: bool


class PanelModeRequest(BaseModel):
    mode: PanelMode


class AlwaysOnTopRequest(BaseModel):
    enabled: bool


class WindowMoved(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    x: float
    y: float


class WindowResized(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    width: float
    height: float
