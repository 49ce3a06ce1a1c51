from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from ..context import AppContext
from ..errors import NotFoundError
from ..migration import MigrationService
from ..repositories import TodoRepository
from ..schemas import (
    MigrateLegacyRequest,
    MigrationResultOut,
    ReorderRequest,
    TodoCreate,
    TodoOut,
    TodoUpdate,
)
from . import get_context

router = APIRouter(
    prefix="/api/v1/todos",
    tags=["todos"],
)

_ERRORS = {
    400: {"description": "Validation error, e.g. 'Title cannot be empty'"},
    404: {"description": "Todo not found: <id>"},
    503: {"description": "Failed to acquire database lock"},
}


def _get_repo(ctx: AppContext = Depends(get_context)) -> TodoRepository:
    """
    Dependency wrapper for the repository to keep signatures clean.
    """
    return ctx.todos


def _get_migration(ctx: AppContext = Depends(get_context)) -> MigrationService:
    return ctx.migration


# PUBLIC_INTERFACE
@router.get(
    "/",
    response_model=List[TodoOut],
    summary="List Todos",
    description=(
        "Todos in display order (sort order ascending, newest first on ties).\n\n"
        "Query parameters:\n"
        "- completed: filter by completion status (false = open, true = done)\n"
        "- q: case-insensitive substring match on title, note or due date"
    ),
)
def list_todos(
    completed: Optional[bool] = Query(None, description="Filter by completion status"),
    q: Optional[str] = Query(None, description="Search text for title/note/due date"),
    repo: TodoRepository = Depends(_get_repo),
) -> List[TodoOut]:
    items = repo.list(completed=completed, search=q.strip() if q else None)
    return [TodoOut(**t) for t in items]  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.post(
    "/",
    response_model=TodoOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create Todo",
    description="Create a new Todo at the top of the list and return it.",
    responses={400: _ERRORS[400]},
)
def create_todo(payload: TodoCreate, repo: TodoRepository = Depends(_get_repo)) -> TodoOut:
    created = repo.create(
        payload.title,
        recurrence_tag=payload.recurrence_tag,
        note=payload.note,
        due_date=payload.due_date,
    )
    return TodoOut(**created)  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.put(
    "/order",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Reorder Todos",
    description=(
        "Set the display order. `ids` must list every todo id in the desired order; "
        "the change is applied atomically."
    ),
)
def reorder_todos(payload: ReorderRequest, repo: TodoRepository = Depends(_get_repo)) -> Response:
    repo.reorder(payload.ids)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# PUBLIC_INTERFACE
@router.post(
    "/migrate-legacy",
    response_model=MigrationResultOut,
    summary="Import legacy todos once",
    description=(
        "Import todos from the old local storage. Runs at most once; later calls answer "
        "alreadyMigrated=true without writing anything."
    ),
)
def migrate_legacy(
    payload: MigrateLegacyRequest, migration: MigrationService = Depends(_get_migration)
) -> MigrationResultOut:
    result = migration.migrate_legacy_if_needed([item.to_legacy() for item in payload.payload])
    return MigrationResultOut(
        migrated_count=result.migrated_count,
        already_migrated=result.already_migrated,
    )


# PUBLIC_INTERFACE
@router.get(
    "/{todo_id}",
    response_model=TodoOut,
    summary="Get Todo",
    responses={404: _ERRORS[404]},
)
def get_todo(todo_id: str, repo: TodoRepository = Depends(_get_repo)) -> TodoOut:
    item = repo.get(todo_id)
    if item is None:
        raise NotFoundError(f"Todo not found: {todo_id}")
    return TodoOut(**item)  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.patch(
    "/{todo_id}",
    response_model=TodoOut,
    summary="Update Todo",
    description=(
        "Partially update fields of a Todo item. For dueDate: omit to keep, "
        "null to clear, a string to set."
    ),
    responses={400: _ERRORS[400], 404: _ERRORS[404]},
)
def patch_todo(todo_id: str, payload: TodoUpdate, repo: TodoRepository = Depends(_get_repo)) -> TodoOut:
    updated = repo.update(todo_id, payload.to_patch())
    return TodoOut(**updated)  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.post(
    "/{todo_id}/toggle",
    response_model=TodoOut,
    summary="Toggle Todo",
    description="Flip the completed flag.",
    responses={404: _ERRORS[404]},
)
def toggle_todo(todo_id: str, repo: TodoRepository = Depends(_get_repo)) -> TodoOut:
    return TodoOut(**repo.toggle(todo_id))  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.delete(
    "/{todo_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Todo",
    description="Delete a Todo item by ID. Deleting an unknown id also answers 204.",
)
def delete_todo(todo_id: str, repo: TodoRepository = Depends(_get_repo)) -> Response:
    repo.delete(todo_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
