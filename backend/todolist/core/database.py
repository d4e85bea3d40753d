from typing import Iterator

from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine, Session

from .config import settings


def make_engine(url: str, **kwargs) -> Engine:
    """Engine for ``url``; SQLite connections may cross the sync-route threadpool."""
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    return create_engine(url, echo=False, pool_pre_ping=True, **kwargs)


engine = make_engine(settings.database_url)


def init_db(bind: Engine = engine) -> None:
    # IMPORTANT: Import models so metadata contains tables
    import todolist.models  # noqa: F401
    SQLModel.metadata.create_all(bind)


def get_session() -> Iterator[Session]:
    with Session(engine) as session:
        yield session
