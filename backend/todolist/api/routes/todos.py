import logging
from typing import List, NoReturn, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status

from todolist.api.deps import require_user_id
from todolist.models import Todo
from todolist.repositories import RepoResult, TodoRepository, get_todo_repository
from todolist.repositories.base import MAX_TODO_ID
from todolist.schemas.todo import MessageOut, TodoCreate, TodoOut, TodoUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/todos", tags=["todos"])

NOT_FOUND_DETAIL = "Todo not found or unauthorized"


def _internal_error(detail: str, result: RepoResult) -> NoReturn:
    # The repository's message stays in the log; callers only see ``detail``
    logger.error("%s: %s (%s)", detail, result.error.message, result.error.kind.value)
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)


def _require_todo_id(todo_id: Optional[int]) -> int:
    if todo_id is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Todo ID is required")
    return todo_id


def _get_owned_todo(repo: TodoRepository, todo_id: int, user_id: int, failure_detail: str) -> Todo:
    """
    Fetch a todo the caller owns.

    A todo that does not exist and one that belongs to another user get the
    same 404, so ids of other users' todos cannot be probed.
    """
    found = repo.get_by_id(todo_id)
    if not found.ok:
        _internal_error(failure_detail, found)

    todo = found.value
    if todo is None or todo.owner_id != user_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND_DETAIL)
    return todo


@router.get("", response_model=List[TodoOut])
def list_todos(
    user_id: int = Depends(require_user_id),
    repo: TodoRepository = Depends(get_todo_repository),
):
    result = repo.list_by_owner(user_id)
    if not result.ok:
        _internal_error("Failed to fetch todos", result)
    return [TodoOut.model_validate(todo) for todo in result.value]


@router.get("/{todo_id}", response_model=TodoOut)
def get_todo(
    todo_id: int = Path(ge=1, le=MAX_TODO_ID),
    user_id: int = Depends(require_user_id),
    repo: TodoRepository = Depends(get_todo_repository),
):
    todo = _get_owned_todo(repo, todo_id, user_id, "Failed to fetch todo")
    return TodoOut.model_validate(todo)


@router.post("", response_model=TodoOut)
def create_todo(
    data: TodoCreate,
    user_id: int = Depends(require_user_id),
    repo: TodoRepository = Depends(get_todo_repository),
):
    if not data.title or not data.description or not data.description.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing required fields")

    result = repo.create(
        owner_id=user_id,
        title=data.title,
        description=data.description,
        due_date=data.due_date,
        urgency=data.urgency,
    )
    if not result.ok:
        _internal_error("Failed to create todo", result)

    logger.info("Created todo id=%s for user_id=%s", result.value.id, user_id)
    return TodoOut.model_validate(result.value)


@router.put("", response_model=TodoOut)
def update_todo(
    data: TodoUpdate,
    todo_id: Optional[int] = Query(default=None, alias="id", ge=1, le=MAX_TODO_ID),
    user_id: int = Depends(require_user_id),
    repo: TodoRepository = Depends(get_todo_repository),
):
    todo_id = _require_todo_id(todo_id)
    _get_owned_todo(repo, todo_id, user_id, "Failed to update todo")

    patch = data.to_patch()
    result = repo.update(todo_id, patch)
    if not result.ok:
        _internal_error("Failed to update todo", result)

    logger.info("Updated todo id=%s for user_id=%s: %s", todo_id, user_id, sorted(patch))
    return TodoOut.model_validate(result.value)


@router.delete("", response_model=MessageOut)
def delete_todo(
    todo_id: Optional[int] = Query(default=None, alias="id", ge=1, le=MAX_TODO_ID),
    user_id: int = Depends(require_user_id),
    repo: TodoRepository = Depends(get_todo_repository),
):
    todo_id = _require_todo_id(todo_id)
    _get_owned_todo(repo, todo_id, user_id, "Failed to delete todo")

    result = repo.delete(todo_id)
    if not result.ok:
        _internal_error("Failed to delete todo", result)

    logger.info("Deleted todo id=%s for user_id=%s", todo_id, user_id)
    return MessageOut(message="Todo deleted successfully")
