from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

from fastapi import Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from todolist.core.database import get_session
from todolist.models import Todo, Urgency
from todolist.models.todo import utcnow
from todolist.utils import DueDateInput, parse_due_date

from .base import MAX_TODO_ID, RepoErrorKind, RepoResult, TodoRepository

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = frozenset({"title", "description", "completed", "due_date", "urgency"})


def _storable_id(todo_id: int) -> bool:
    # Larger ids overflow the driver instead of simply matching nothing
    return 1 <= todo_id <= MAX_TODO_ID


class _Invalid(ValueError):
    pass


def _require_text(name: str, value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise _Invalid(f"{name} must be a non-empty string")
    return value


def _coerce_urgency(value: Any) -> Urgency:
    try:
        return Urgency(value)
    except ValueError:
        allowed = ", ".join(u.value for u in Urgency)
        raise _Invalid(f"urgency must be one of: {allowed}") from None


def _coerce_due_date(value: Any):
    try:
        return parse_due_date(value)
    except ValueError as e:
        raise _Invalid(str(e)) from None


def _clean_patch(patch: Mapping[str, Any]) -> Dict[str, Any]:
    unknown = set(patch) - UPDATABLE_FIELDS
    if unknown:
        raise _Invalid(f"unknown field(s): {', '.join(sorted(unknown))}")

    changes: Dict[str, Any] = {}
    for name, value in patch.items():
        if name in ("title", "description"):
            changes[name] = _require_text(name, value)
        elif name == "completed":
            if not isinstance(value, bool):
                raise _Invalid("completed must be a boolean")
            changes[name] = value
        elif name == "urgency":
            changes[name] = _coerce_urgency(value)
        else:
            # due_date: None is an explicit clear, not "no change"
            changes[name] = _coerce_due_date(value)
    return changes


class SQLModelTodoRepository(TodoRepository):
    """
    TodoRepository backed by a SQLModel session.

    Each mutating call commits its own unit of work. Store failures roll the
    session back and come back as ``storage`` errors instead of raising.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def _storage_failure(self, op: str, exc: SQLAlchemyError) -> RepoResult:
        self._session.rollback()
        logger.exception("Todo store failure during %s", op)
        return RepoResult.failure(RepoErrorKind.STORAGE, f"{op} failed: {exc.__class__.__name__}")

    def list_by_owner(self, owner_id: int) -> RepoResult[List[Todo]]:
        try:
            todos = self._session.exec(
                select(Todo).where(Todo.owner_id == owner_id).order_by(Todo.id.asc())
            ).all()
        except SQLAlchemyError as exc:
            return self._storage_failure("list", exc)
        return RepoResult.success(list(todos))

    def create(
        self,
        owner_id: int,
        title: str,
        description: str,
        due_date: Optional[DueDateInput] = None,
        urgency: Optional[Urgency | str] = None,
    ) -> RepoResult[Todo]:
        try:
            todo = Todo(
                owner_id=owner_id,
                title=_require_text("title", title),
                description=_require_text("description", description),
                completed=False,
                due_date=_coerce_due_date(due_date),
                urgency=Urgency.MEDIUM if urgency is None else _coerce_urgency(urgency),
            )
        except _Invalid as e:
            return RepoResult.failure(RepoErrorKind.VALIDATION, str(e))

        try:
            self._session.add(todo)
            self._session.commit()
            self._session.refresh(todo)
        except SQLAlchemyError as exc:
            return self._storage_failure("create", exc)

        logger.debug("Stored todo id=%s for owner=%s", todo.id, owner_id)
        return RepoResult.success(todo)

    def get_by_id(self, todo_id: int) -> RepoResult[Optional[Todo]]:
        if not _storable_id(todo_id):
            return RepoResult.success(None)
        try:
            todo = self._session.get(Todo, todo_id)
        except SQLAlchemyError as exc:
            return self._storage_failure("get", exc)
        return RepoResult.success(todo)

    def update(self, todo_id: int, patch: Mapping[str, Any]) -> RepoResult[Todo]:
        try:
            changes = _clean_patch(patch)
        except _Invalid as e:
            return RepoResult.failure(RepoErrorKind.VALIDATION, str(e))

        if not _storable_id(todo_id):
            return RepoResult.failure(RepoErrorKind.NOT_FOUND, f"todo {todo_id} does not exist")

        try:
            todo = self._session.get(Todo, todo_id)
            if todo is None:
                return RepoResult.failure(RepoErrorKind.NOT_FOUND, f"todo {todo_id} does not exist")

            for name, value in changes.items():
                setattr(todo, name, value)
            todo.updated_at = utcnow()

            self._session.add(todo)
            self._session.commit()
            self._session.refresh(todo)
        except SQLAlchemyError as exc:
            return self._storage_failure("update", exc)

        logger.debug("Updated todo id=%s fields=%s", todo_id, sorted(changes))
        return RepoResult.success(todo)

    def delete(self, todo_id: int) -> RepoResult[None]:
        if not _storable_id(todo_id):
            return RepoResult.failure(RepoErrorKind.NOT_FOUND, f"todo {todo_id} does not exist")
        try:
            todo = self._session.get(Todo, todo_id)
            if todo is None:
                return RepoResult.failure(RepoErrorKind.NOT_FOUND, f"todo {todo_id} does not exist")
            self._session.delete(todo)
            self._session.commit()
        except SQLAlchemyError as exc:
            return self._storage_failure("delete", exc)
        return RepoResult.success(None)


def get_todo_repository(session: Session = Depends(get_session)) -> TodoRepository:
    """FastAPI dependency: a repository bound to the request's session."""
    return SQLModelTodoRepository(session)
