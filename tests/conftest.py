"""
Pytest configuration and fixtures for MyBlog API tests.
"""
import os
import tempfile

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("STORAGE_ROOT", os.path.join(tempfile.gettempdir(), "myblog-test-storage"))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from myblog.database import Base, get_db
from myblog.datastore import AsyncDataStore, BlobStorage, DataStore, get_blob_storage
from myblog.limiter import limiter
from myblog.main import app
from myblog.models import Post, Profile, User
from myblog.auth import get_password_hash, create_access_token

# Disable rate limiting for tests
limiter.enabled = False

# Use in-memory SQLite for tests with shared connection
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@event.listens_for(engine, "connect")
def _foreign_keys_on(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


# Global session for sharing across requests
_test_session = None


def get_test_db():
    """Get the shared test database session."""
    yield _test_session


@pytest.fixture(scope="function")
def db():
    """Create a fresh database for each test."""
    global _test_session

    Base.metadata.create_all(bind=engine)
    _test_session = TestingSessionLocal()
    app.dependency_overrides[get_db] = get_test_db

    yield _test_session

    app.dependency_overrides.clear()
    _test_session.close()
    _test_session = None
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def blob_storage(tmp_path):
    """Blob storage rooted in a temporary directory."""
    return BlobStorage(tmp_path / "storage", "http://testserver")


@pytest.fixture(scope="function")
def client(db, blob_storage):
    """Create a test client."""
    app.dependency_overrides[get_blob_storage] = lambda: blob_storage
    with TestClient(app) as c:
        yield c


def _create_user(db, email, nickname, password="testpassword123"):
    user = User(email=email, hashed_password=get_password_hash(password), is_active=True)
    user.profile = Profile(email=email, nickname=nickname)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture(scope="function")
def test_user(db):
    """Create a test user with a profile."""
    return _create_user(db, "test@example.com", "tester")


@pytest.fixture(scope="function")
def other_user(db):
    return _create_user(db, "other@example.com", "someone")


def _headers(user):
    return {"Authorization": f"Bearer {create_access_token({'sub': str(user.id)})}"}


@pytest.fixture(scope="function")
def auth_headers(test_user):
    """Get auth headers for the test user."""
    return _headers(test_user)


@pytest.fixture(scope="function")
def other_headers(other_user):
    return _headers(other_user)


@pytest.fixture(scope="function")
def make_post(db):
    """Factory inserting posts directly through the ORM."""
    def _make(author, title="A post", content="Body text", is_public=True, **fields):
        post = Post(author_id=author.id, title=title, content=content, is_public=is_public, **fields)
        db.add(post)
        db.commit()
        db.refresh(post)
        return post
    return _make


@pytest.fixture(scope="function")
def store(db):
    return DataStore(db)


@pytest.fixture(scope="function")
def async_store(store):
    return AsyncDataStore(store)
