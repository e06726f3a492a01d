"""Shared fixtures: a throwaway SQLite database and an HTTP test client."""
from __future__ import annotations

import os
from typing import Callable, Iterator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import delete

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///./test_schoolconnect.db")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("ADMIN_USERNAMES", "teacher.admin")
os.environ.setdefault("STRICT_STATUS_TRANSITIONS", "false")

from schoolconnect.database import Base, SessionLocal, engine  # noqa: E402
from schoolconnect.main import app  # noqa: E402
from schoolconnect.models import GroupChat, GroupMember, Message, MessageDeletion, User, UserSession  # noqa: E402

ADMIN = "teacher.admin"
PASSWORD = "classroom-pass"


@pytest.fixture(scope="session", autouse=True)
def _create_schema() -> Iterator[None]:
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def _clean_database() -> Iterator[None]:
    with SessionLocal() as session:
        session.execute(delete(MessageDeletion))
        session.execute(delete(Message))
        session.execute(delete(GroupMember))
        session.execute(delete(GroupChat))
        session.execute(delete(UserSession))
        session.execute(delete(User))
        session.commit()
    yield


@pytest.fixture
def client() -> Iterator[TestClient]:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def signup(client: TestClient) -> Callable[[str], dict[str, str]]:
    """Register and log in a handle, returning its bearer headers."""

    def _signup(username: str) -> dict[str, str]:
        registered = client.post("/api/register", json={"username": username, "password": PASSWORD})
        assert registered.status_code == 201, registered.text
        login = client.post("/api/login", json={"username": username, "password": PASSWORD})
        assert login.status_code == 200, login.text
        return {"Authorization": f"Bearer {login.json()['access_token']}"}

    return _signup
