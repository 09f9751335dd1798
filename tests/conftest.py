"""
Pytest configuration and shared fixtures.

The app reads its settings from the environment at import time, so the test
database and secrets are set here before anything from ``app`` is imported.
Every test gets a fresh schema in a temporary sqlite file.
"""

import os
import tempfile

_tmpdir = tempfile.mkdtemp(prefix="social-tests-")
DB_PATH = os.path.join(_tmpdir, "test.db")

os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{DB_PATH}"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine

from app.main import app
from app.models import Base


@pytest.fixture
def client():
    """TestClient with the lifespan running, so tables and the connection registry exist."""
    with TestClient(app) as test_client:
        yield test_client

    engine = create_engine(f"sqlite:///{DB_PATH}")
    Base.metadata.drop_all(engine)
    engine.dispose()


def register(client, username, email=None, password="secret123", role="member"):
    """Register a user and return the {user, token} payload."""
    response = client.post(
        "/api/auth/register",
        json={
            "username": username,
            "email": email or f"{username.lower()}@example.com",
            "password": password,
            "role": role,
        },
    )
    assert response.status_code == 201, response.text
    return response.json()


def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


def join(ws, user_id):
    """Join a realtime group and wait until the server has processed it."""
    ws.send_json({"action": "join", "data": user_id})
    sync(ws)


def sync(ws):
    """Round-trip a ping; every frame sent before it has been handled once the pong arrives."""
    ws.send_json({"action": "ping"})
    assert ws.receive_json() == {"type": "pong"}
