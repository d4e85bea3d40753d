from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, List, Mapping, Optional, TypeVar

from todolist.models import Todo, Urgency
from todolist.utils import DueDateInput

T = TypeVar("T")

# Largest primary key a 64-bit INTEGER column can hold
MAX_TODO_ID = 2**63 - 1


class RepoErrorKind(str, Enum):
    STORAGE = "storage"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class RepoError:
    """Tagged failure returned by a repository operation."""

    kind: RepoErrorKind
    message: str


@dataclass(frozen=True)
class RepoResult(Generic[T]):
    """Outcome of a repository operation.

    Exactly one of ``value``/``error`` is meaningful; check ``ok`` first.
    A successful lookup may carry ``value=None`` (record absent).
    """

    value: Optional[T] = None
    error: Optional[RepoError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Optional[T] = None) -> "RepoResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, kind: RepoErrorKind, message: str) -> "RepoResult[T]":
        return cls(error=RepoError(kind=kind, message=message))


class TodoRepository(ABC):
    """Owner-scoped storage contract for todos."""

    @abstractmethod
    def list_by_owner(self, owner_id: int) -> RepoResult[List[Todo]]:
        """All todos of ``owner_id`` in insertion order."""

    @abstractmethod
    def create(
        self,
        owner_id: int,
        title: str,
        description: str,
        due_date: Optional[DueDateInput] = None,
        urgency: Optional[Urgency | str] = None,
    ) -> RepoResult[Todo]:
        """Store a new, not yet completed todo and return it with its id."""

    @abstractmethod
    def get_by_id(self, todo_id: int) -> RepoResult[Optional[Todo]]:
        """Todo by primary key; ``value`` is None when it does not exist."""

    @abstractmethod
    def update(self, todo_id: int, patch: Mapping[str, Any]) -> RepoResult[Todo]:
        """
        Apply ``patch`` to an existing todo.

        Keys absent from ``patch`` are left untouched; ``due_date`` present
        with None clears the due date.
        """

    @abstractmethod
    def delete(self, todo_id: int) -> RepoResult[None]:
        """Permanently remove a todo."""
