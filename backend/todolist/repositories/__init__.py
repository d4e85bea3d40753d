from .base import RepoError, RepoErrorKind, RepoResult, TodoRepository
from .todos import SQLModelTodoRepository, get_todo_repository

__all__ = [
    "RepoError",
    "RepoErrorKind",
    "RepoResult",
    "TodoRepository",
    "SQLModelTodoRepository",
    "get_todo_repository",
]
