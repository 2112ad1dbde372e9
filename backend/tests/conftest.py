"""
Pytest configuration and fixtures for Litaria tests.
"""

import os
import tempfile

# Settings are read at import time, so the test environment goes first
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-litaria-tests")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("SCHEDULER_ENABLED", "false")
os.environ.setdefault("COOKIE_SECURE", "false")
os.environ.setdefault("MEDIA_ROOT", tempfile.mkdtemp(prefix="litaria-media-"))

import pytest
from datetime import timedelta
from typing import Callable, Generator
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from app.core.database import Base, get_db
from app.core.auth import create_access_token, hash_password
from app.core.errors import register_exception_handlers
from app.core.timeutils import utcnow
from app.models.user import User
from app.models.category import Category
from app.models.subcategory import Subcategory
from app.models.post import Post, PostStatus


# Use in-memory SQLite database for tests
TEST_DATABASE_URL = "sqlite:///:memory:"

TEST_PASSWORD = "correct-horse-battery"


@pytest.fixture(scope="function")
def db_engine():
    """Create a test database engine."""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(db_engine) -> Generator[Session, None, None]:
    """Create a test database session."""
    TestingSessionLocal = sessionmaker(
        autocommit=False, autoflush=False, bind=db_engine
    )
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Session factory bound to the test engine, for code that opens its own sessions."""
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture(scope="function")
def test_app(db_session):
    """Create a FastAPI test app without lifespan events."""
    from fastapi import FastAPI
    from app.main import include_routers

    # Create app without lifespan to avoid starting the scheduler
    test_app = FastAPI(title="Litaria - Test", version="1.0.0")
    register_exception_handlers(test_app)
    include_routers(test_app)

    # Override database dependency
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    test_app.dependency_overrides[get_db] = override_get_db

    return test_app


@pytest.fixture(scope="function")
def client(test_app) -> TestClient:
    """Create a test client without entering context manager."""
    return TestClient(test_app, raise_server_exceptions=False)


def _make_user(db_session, name: str, email: str) -> User:
    user = User(
        name=name,
        email=email,
        password_hash=hash_password(TEST_PASSWORD),
        is_active=True,
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture(scope="function")
def test_user(db_session) -> User:
    """Create a test user."""
    return _make_user(db_session, "Test Author", "author@example.com")


@pytest.fixture(scope="function")
def other_user(db_session) -> User:
    """A second author, for ownership checks."""
    return _make_user(db_session, "Other Author", "other@example.com")


@pytest.fixture(scope="function")
def auth_headers(test_user) -> dict:
    """Create authentication headers for test requests."""
    access_token = create_access_token(data={"sub": test_user.id})
    return {"Authorization": f"Bearer {access_token}"}


@pytest.fixture(scope="function")
def authenticated_client(client, test_user) -> TestClient:
    """Create an authenticated test client."""
    access_token = create_access_token(data={"sub": test_user.id})
    client.cookies.set("auth_token", access_token)
    return client


@pytest.fixture(scope="function")
def other_client(test_app, other_user) -> TestClient:
    """A separate client authenticated as ``other_user``."""
    other = TestClient(test_app, raise_server_exceptions=False)
    other.cookies.set("auth_token", create_access_token(data={"sub": other_user.id}))
    return other


@pytest.fixture(scope="function")
def test_category(db_session) -> Category:
    """Create the English "Creative" category."""
    category = Category(name="Creative", language="en")
    db_session.add(category)
    db_session.commit()
    db_session.refresh(category)
    return category


@pytest.fixture(scope="function")
def bengali_category(db_session) -> Category:
    category = Category(name="Culture", language="bn")
    db_session.add(category)
    db_session.commit()
    db_session.refresh(category)
    return category


@pytest.fixture(scope="function")
def test_subcategory(db_session, test_category) -> Subcategory:
    subcategory = Subcategory(name="Poetry", category_id=test_category.id)
    db_session.add(subcategory)
    db_session.commit()
    db_session.refresh(subcategory)
    return subcategory


@pytest.fixture(scope="function")
def make_post(db_session, test_user, test_category) -> Callable[..., Post]:
    """Factory inserting posts directly, bypassing the service rules."""

    def _make_post(**overrides) -> Post:
        fields = {
            "title": "A Test Post",
            "content": "Some content worth reading.",
            "language": test_category.language,
            "author_id": test_user.id,
            "category_id": test_category.id,
            "status": PostStatus.PUBLISHED,
            "is_lead": False,
        }
        fields.update(overrides)
        if fields["status"] == PostStatus.PUBLISHED:
            fields.setdefault("published_at", utcnow())
        post = Post(**fields)
        db_session.add(post)
        db_session.commit()
        db_session.refresh(post)
        return post

    return _make_post


@pytest.fixture(scope="function")
def scheduled_posts(make_post):
    """One scheduled post due an hour ago and one due in an hour."""
    now = utcnow()
    due = make_post(
        title="Due Post",
        status=PostStatus.SCHEDULED,
        scheduled_date=now - timedelta(hours=1),
    )
    future = make_post(
        title="Future Post",
        status=PostStatus.SCHEDULED,
        scheduled_date=now + timedelta(hours=1),
    )
    return due, future


@pytest.fixture
def test_password() -> str:
    """Plain-text password of the fixture users."""
    return TEST_PASSWORD
