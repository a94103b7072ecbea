import os
import sys
import pathlib
import tempfile
import uuid

import pytest

# --- Project root on sys.path and environment set before importing the app ---
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# SQLite file in a temp dir (stable across TestClient threads)
TEST_DIR = tempfile.mkdtemp(prefix="taskmanager_tests_")
DB_PATH = pathlib.Path(TEST_DIR) / "test.db"
os.environ["DATABASE_URL"] = f"sqlite:///{DB_PATH}"
os.environ["JWT_SECRET"] = "test-secret-not-for-production"
os.environ["DB_CREATE_TABLES"] = "false"

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from taskmanager_app.database import Base, SessionLocal, engine
from taskmanager_app import models  # noqa: F401
from taskmanager_app.main import app

DEFAULT_PASSWORD = "secret123"


@pytest.fixture(autouse=True)
def _schema():
    """Fresh schema for every test."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db() -> Session:
    s = SessionLocal()
    try:
        yield s
    finally:
        s.close()


@pytest.fixture()
def client() -> TestClient:
    return TestClient(app)


@pytest.fixture()
def signup(client):
    """
    Register a user through the API and return (token, user_json).
    """
    def _make(email: str | None = None, password: str = DEFAULT_PASSWORD, name: str = "Tester"):
        email = email or f"tester_{uuid.uuid4().hex[:8]}@example.com"
        r = client.post("/api/auth/signup", json={"name": name, "email": email, "password": password})
        assert r.status_code == 201, r.text
        body = r.json()
        return body["token"], body["user"]
    return _make


@pytest.fixture()
def auth_headers(signup):
    token, _ = signup()
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def api_create(client, auth_headers):
    """
    Create a task for the `auth_headers` user and return the task JSON.
    """
    def _make(title: str, description: str = "details", headers: dict | None = None):
        r = client.post(
            "/api/tasks",
            json={"title": title, "description": description},
            headers=headers or auth_headers,
        )
        assert r.status_code == 201, r.text
        return r.json()["task"]
    return _make
