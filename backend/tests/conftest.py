import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session

from todolist.core.database import get_session, init_db, make_engine
from todolist.core.security import create_access_token, hash_password
from todolist.main import app
from todolist.models import User


@pytest.fixture
def engine():
    # One shared in-memory database per test
    engine = make_engine("sqlite://", poolclass=StaticPool)
    init_db(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def client(session):
    app.dependency_overrides[get_session] = lambda: session
    # Not entered as a context manager: startup would create the real database
    yield TestClient(app)
    app.dependency_overrides.clear()


def _make_user(session, email):
    user = User(email=email, password_hash=hash_password("secret123"))
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture
def alice(session):
    return _make_user(session, "alice@example.com")


@pytest.fixture
def bob(session):
    return _make_user(session, "bob@example.com")


def auth_headers(user):
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture
def alice_headers(alice):
    return auth_headers(alice)


@pytest.fixture
def bob_headers(bob):
    return auth_headers(bob)
