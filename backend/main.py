# Entry point for ``uvicorn main:app`` from the backend directory
from todolist.main import app  # noqa: F401
