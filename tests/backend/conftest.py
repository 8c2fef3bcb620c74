from collections.abc import Callable, Iterator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker

from backend.app.auth.jwt import create_access_token
from backend.app.database import get_db
from backend.app.main import create_app
from backend.app.models import User
from core.constants import UserRole


@pytest.fixture
def test_app_client(test_db) -> Iterator[tuple[TestClient, sessionmaker]]:
    _, TestingSessionLocal, _ = test_db
    app = create_app()

    def override_get_db() -> Iterator[Session]:
        with TestingSessionLocal() as session, session.begin():
            yield session

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as client:
        yield client, TestingSessionLocal


@pytest.fixture
def auth_headers() -> Callable[[User], dict[str, str]]:
    """Build an Authorization header carrying a signed access token for a user."""

    def _headers(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user)}"}

    return _headers


@pytest.fixture
def authorized_client(
    test_app_client,
    make_user,
    auth_headers,
) -> Iterator[tuple[TestClient, User, sessionmaker]]:
    """Client whose requests carry a bearer token for a real student account."""
    client, TestingSessionLocal = test_app_client
    user = make_user(role=UserRole.STUDENT, name="Student", email="student@example.com")

    client.headers.update(auth_headers(user))

    yield client, user, TestingSessionLocal

    client.headers.pop("Authorization", None)


@pytest.fixture
def manager(make_user) -> User:
    return make_user(role=UserRole.MANAGER, name="Manager", email="manager@example.com")


@pytest.fixture
def worker(make_user) -> User:
    return make_user(role=UserRole.WORKER, name="Worker", email="worker@example.com")
