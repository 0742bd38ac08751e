import os

# main.py builds a module-level app on import; keep it off the real database
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient

from config import Settings
from main import create_app

TEST_SETTINGS = Settings(database_url="sqlite://", secret_key="test-secret", log_level="WARNING")


@pytest.fixture()
def app():
    application = create_app(TEST_SETTINGS)
    yield application
    application.state.engine.dispose()


@pytest.fixture()
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def db_session(app):
    session = app.state.session_factory()
    try:
        yield session
    finally:
        session.close()


def register(client, email, password="password123", **extra):
    body = {"name": email.split("@")[0], "email": email, "password": password}
    body.update(extra)
    resp = client.post("/api/register", json=body)
    assert resp.status_code == 200, resp.json()
    return resp.json()["user"]


def login(client, email, password="password123", **extra):
    resp = client.post("/api/login", json={"email": email, "password": password, **extra})
    assert resp.status_code == 200, resp.json()
    return resp.json()


def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def make_user(client):
    """Register a user and return (user, headers)."""

    def _make(email, password="password123", **extra):
        user = register(client, email, password, **extra)
        token = login(client, email, password)["token"]
        return user, auth_headers(token)

    return _make
