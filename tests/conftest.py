"""Shared fixtures: in-memory database, API client and account helpers."""
from __future__ import annotations

import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

# Ensure the project root is available on sys.path so tests can import the package.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from barberworld.auth import token_for  # noqa: E402
from barberworld.db import get_session  # noqa: E402
from barberworld.main import app  # noqa: E402
from barberworld.models import Shop, User  # noqa: E402


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def client(engine):
    def override_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = override_session
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(session):
    def _make_user(email: str, role: str = "client", name: str | None = None) -> User:
        # Tokens are minted directly, so the hash is never checked
        user = User(email=email, password_hash="not-used", role=role, name=name)
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def auth_headers():
    def _auth_headers(user: User) -> dict:
        return {"Authorization": f"Bearer {token_for(user)}"}

    return _auth_headers


@pytest.fixture
def barber(make_user):
    return make_user("bob@barbers.test", role="barber", name="Bob")


@pytest.fixture
def shop(session, barber):
    shop = Shop(owner_user_id=barber.id, name="Fade Factory")
    session.add(shop)
    session.commit()
    session.refresh(shop)
    return shop


@pytest.fixture
def carla(make_user):
    return make_user("carla@clients.test", name="Carla")


@pytest.fixture
def dan(make_user):
    return make_user("dan@clients.test", name="Dan")
