"""Pytest configuration and fixtures."""

import os

os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from src.database import Base, get_db
from src.exceptions import BlobStoreError
from src.main import app
from src.services.blob_store import StoredBlob, decode_image, get_blob_store

# 1x1 transparent PNG
PNG_DATA_URI = (
    "data:image/png;base64,"
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)


class AuthHeaders(dict):
    """Dict subclass that also stores user info."""

    def __init__(self, *args, user_id: int | None = None, email: str | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.user_id = user_id
        self.email = email


class FakeBlobStore:
    """In-memory blob store recording uploads and deletions."""

    def __init__(self):
        self.objects: dict[str, bytes] = {}
        self.deleted: list[str] = []
        self.fail_uploads = False
        self.fail_deletes = False
        self._counter = 0

    def upload(self, data: str, folder: str) -> StoredBlob:
        raw, _ = decode_image(data)
        if self.fail_uploads:
            raise BlobStoreError("Image upload failed: storage unavailable")
        self._counter += 1
        ref = f"{folder}/{self._counter}.png"
        self.objects[ref] = raw
        return StoredBlob(url=f"https://media.test/{ref}", ref=ref)

    def delete(self, ref: str) -> None:
        if self.fail_deletes:
            raise BlobStoreError("Image delete failed: storage unavailable")
        self.objects.pop(ref, None)
        self.deleted.append(ref)


# Use test database - PostgreSQL in Docker, SQLite locally
if os.getenv("DATABASE_URL"):
    # Running in Docker - use PostgreSQL test database
    SQLALCHEMY_DATABASE_URL = os.getenv("DATABASE_URL").replace("/snapshare", "/snapshare_test")
else:
    # Running locally - use SQLite
    SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"

connect_args = {"check_same_thread": False} if "sqlite" in SQLALCHEMY_DATABASE_URL else {}
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args=connect_args)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Create test database schema once at the start of the test session."""
    if "postgresql" in SQLALCHEMY_DATABASE_URL:
        from sqlalchemy_utils import create_database, database_exists

        if not database_exists(SQLALCHEMY_DATABASE_URL):
            create_database(SQLALCHEMY_DATABASE_URL)

    from src import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture(scope="function", autouse=True)
def db():
    """Create a fresh database session for each test with cleanup."""
    session = TestingSessionLocal()

    yield session

    # Clean up all data after test
    session.rollback()
    for table in reversed(Base.metadata.sorted_tables):
        session.execute(table.delete())
    session.commit()
    session.close()


@pytest.fixture
def blob_store():
    """In-memory replacement for the MinIO blob store."""
    return FakeBlobStore()


@pytest.fixture(scope="function")
def client(db, blob_store):
    """Create a test client with database and blob store overrides."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_blob_store] = lambda: blob_store
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def register_and_login(client, email: str, name: str = "Test User", password: str = "testpass123"):
    """Register a user, log in, and return bearer headers."""
    response = client.post(
        "/api/auth/register",
        json={"name": name, "email": email, "password": password},
    )
    assert response.status_code == 201
    user_id = response.json()["id"]

    response = client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200
    token = response.json()["token"]

    return AuthHeaders({"Authorization": f"Bearer {token}"}, user_id=user_id, email=email)


@pytest.fixture
def auth_headers(client):
    """Create a user and return auth headers with user info."""
    return register_and_login(client, "test@example.com")


@pytest.fixture
def other_auth_headers(client):
    """A second, independent user."""
    return register_and_login(client, "other@example.com", name="Other User")


@pytest.fixture
def create_post(client, auth_headers):
    """Factory that creates a post through the API and returns its JSON."""

    def _create(name="Sunrise", location="Bromo", description="Crater at dawn", headers=None):
        response = client.post(
            "/api/posts",
            headers=headers or auth_headers,
            json={
                "name": name,
                "location": location,
                "description": description,
                "image": PNG_DATA_URI,
            },
        )
        assert response.status_code == 201
        return response.json()

    return _create
