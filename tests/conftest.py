"""Pytest fixtures for the API.

Every test gets a fresh app bound to an in-memory SQLite database (one
shared connection) and its own upload folder; all tables are emptied
afterwards so data never leaks between cases.
"""

from __future__ import annotations

import io
import os

# must be set before ``models`` builds the storage singleton
os.environ["DATABASE_URL"] = "sqlite://"

import pytest

from api import create_app
from models import storage
from models.user import User
from utils.security import hash_password
from tests.helpers import bearer

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


@pytest.fixture()
def app(tmp_path):
    """Create a Flask application configured for testing.

    Returns
    -------
    flask.Flask
        Application built from ``TestingConfig`` with uploads written under
        the test's temporary directory.
    """
    app = create_app("testing")
    app.config["UPLOAD_FOLDER"] = str(tmp_path)
    return app


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture(autouse=True)
def _clean_database():
    """Empty every table after each test."""
    yield
    storage.delete_all()
    storage.close()


@pytest.fixture()
def png():
    """Build a fresh in-memory PNG upload tuple for the test client."""

    def _make(name: str = "avatar.png", content_type: str = "image/png"):
        return io.BytesIO(PNG_BYTES), name, content_type

    return _make


@pytest.fixture()
def make_user(app):
    """Insert a user directly through storage and return its id."""

    def _make(username: str = "alice", password: str = "secret") -> str:
        with app.app_context():
            user = User(
                username=username,
                email=f"{username}@example.com",
                password_hash=hash_password(password),
                avatar="public/avatars/default.png",
            )
            storage.new(user)
            storage.save()
            return user.id

    return _make


@pytest.fixture()
def register(client, png):
    """Register a user through the API and return the response."""

    def _register(username: str = "alice", password: str = "secret", email: str | None = None):
        return client.post(
            "/api/v1/users/register",
            data={
                "username": username,
                "password": password,
                "email": email or f"{username}@example.com",
                "avatar": png(),
            },
            content_type="multipart/form-data",
        )

    return _register


@pytest.fixture()
def login(client):
    """Log in through the API and return the token pair JSON."""

    def _login(username: str = "alice", password: str = "secret") -> dict:
        resp = client.post("/api/v1/users/login", json={"username": username, "password": password})
        assert resp.status_code == 200, resp.get_json()
        return resp.get_json()

    return _login


@pytest.fixture()
def auth(register, login):
    """Register and log in ``alice``; return ``(tokens, headers)``."""
    register("alice")
    tokens = login("alice")
    return tokens, bearer(tokens["access_token"])
