from pathlib import Path
import os
import tempfile
import uuid

import pytest

# Point the app at a throw-away database before `myhome` is imported.
_TMP_DIR = Path(tempfile.mkdtemp(prefix="myhome-tests-"))
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP_DIR / 'test.db'}"
os.environ["ENV"] = "test"
os.environ["JWT_SECRET"] = "test-secret-" + "0123456789abcdef" * 5
os.environ["MAIL_DEV_MODE"] = "true"

from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import SQLModel, Session, create_engine  # noqa: E402


@pytest.fixture
def session():
    """Fresh in-memory database session for service-level tests."""
    from myhome import models  # noqa: F401
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    SQLModel.metadata.create_all(engine)
    with Session(engine) as s:
        yield s


@pytest.fixture(scope="session")
def client():
    from myhome.main import app
    return TestClient(app)


@pytest.fixture
def signup(client):
    """Register a user and log in; returns (user_id, auth headers)."""
    def _signup(name="Test User", password="password123"):
        email = f"{uuid.uuid4().hex[:12]}@example.com"
        r = client.post('/users', json={'name': name, 'email': email, 'password': password})
        assert r.status_code == 201
        user_id = r.json()['userId']
        r2 = client.post('/auth/login', json={'email': email, 'password': password})
        assert r2.status_code == 200
        return user_id, {'Authorization': f"Bearer {r2.headers['token']}"}
    return _signup


@pytest.fixture
def community(client, signup):
    """Create a community owned by a fresh admin; returns (community_id, admin_id, headers)."""
    admin_id, headers = signup(name="Admin")
    r = client.post('/communities', json={'name': 'Green Hill', 'district': 'North'}, headers=headers)
    assert r.status_code == 201
    return r.json()['communityId'], admin_id, headers


@pytest.fixture
def house(client, community):
    """A house inside `community`; returns (house_id, community_id, admin_id, headers)."""
    community_id, admin_id, headers = community
    r = client.post(f'/communities/{community_id}/houses', json={'houses': [{'name': 'House 1'}]}, headers=headers)
    assert r.status_code == 201
    return r.json()['houses'][0], community_id, admin_id, headers


def _tmp_cleanup():
    for p in _TMP_DIR.glob("*"):
        try:
            p.unlink()
        except OSError:
            pass


@pytest.fixture(scope="session", autouse=True)
def reset_db():
    """Remove the temporary SQLite database after the test session."""
    yield
    from myhome.database import engine
    engine.dispose()
    _tmp_cleanup()
