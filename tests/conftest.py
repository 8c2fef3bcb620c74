"""
Pytest fixtures for CampusEats tests.

Each test gets a fresh in-memory SQLite database built from the ORM models.
"""

import os
import tempfile

# Settings are cached on first use, so the test environment is fixed before
# any application module is imported.
os.environ.setdefault("ENV", "test")
os.environ.setdefault("JWT_SECRET_KEY", "campuseats-test-signing-key-0123456789abcdef")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("REFRESH_COOKIE_SECURE", "false")
os.environ.setdefault("UPLOAD_ROOT", tempfile.mkdtemp(prefix="campuseats-uploads-"))
os.environ.setdefault("PUBLIC_BASE_URL", "http://testserver")

from decimal import Decimal  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

import core.models  # noqa: E402,F401
from core.constants import MenuCategory, UserRole  # noqa: E402
from core.db import Base, enable_sqlite_foreign_keys  # noqa: E402
from core.models import MenuItem, User  # noqa: E402
from core.security import hash_password  # noqa: E402

TEST_PASSWORD = "Str0ng!Pass"


@pytest.fixture(scope="function")
def test_db():
    """Create a fresh in-memory database for each test."""
    db_url = "sqlite://"
    engine = create_engine(
        db_url,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)

    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)

    yield db_url, TestingSessionLocal, engine

    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def test_session(test_db):
    """Get a test session from the test database."""
    _, TestingSessionLocal, _ = test_db
    session = TestingSessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


@pytest.fixture
def make_user(test_session):
    """Factory inserting committed users with a real password hash."""
    counter = iter(range(1, 10_000))

    def _make_user(role=UserRole.STUDENT, email=None, name="Test User", password=TEST_PASSWORD):
        user = User(
            name=name,
            email=email or f"{role.value.lower()}{next(counter)}@example.com",
            password_hash=hash_password(password),
            role=role,
        )
        test_session.add(user)
        test_session.commit()
        return user

    return _make_user


@pytest.fixture
def make_menu_item(test_session):
    """Factory inserting committed menu items."""

    def _make_menu_item(name="Margherita", price="30.00", category=MenuCategory.PIZZA):
        item = MenuItem(
            name=name,
            price=Decimal(price),
            category=category,
            description=f"{name} description",
            allergens=[],
        )
        test_session.add(item)
        test_session.commit()
        return item

    return _make_menu_item
