"""Shared pytest fixtures for the application tests."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest
from flask import Flask
from flask.testing import FlaskClient

ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from app import create_app  # noqa: E402
from config import TestingConfig  # noqa: E402
from models import db  # noqa: E402
from models.user import User  # noqa: E402
from utils.tokens import create_session_token  # noqa: E402


def build_app(**overrides) -> Flask:
    """Create an application with a fresh in-memory database."""

    class TestConfig(TestingConfig):
        pass

    for key, value in overrides.items():
        setattr(TestConfig, key, value)

    application = create_app(TestConfig)
    with application.app_context():
        db.create_all()
    return application


@pytest.fixture()
def app_factory():
    """Return the factory used to build apps with configuration overrides."""

    return build_app


@pytest.fixture()
def app() -> Flask:
    """Create a Flask application instance for tests."""

    application = build_app()

    yield application

    with application.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app: Flask) -> FlaskClient:
    """Return a test client for the Flask app."""

    return app.test_client()


@pytest.fixture()
def mailer(app: Flask):
    return app.extensions["mailer"]


@pytest.fixture()
def make_user(app: Flask):
    """Return a helper that persists a user and returns its id."""

    def _make_user(
        email: str = "reader@example.com",
        password: str = "ReaderPass123",
        *,
        name: str = "Reader",
        role: str = "user",
        verified: bool = True,
    ) -> int:
        with app.app_context():
            user = User(name=name, email=email, role=role, is_verified=verified)
            user.set_password(password)
            db.session.add(user)
            db.session.commit()
            return user.id

    return _make_user


@pytest.fixture()
def auth_headers(app: Flask):
    """Return a helper that issues a bearer header for a user id."""

    def _auth_headers(user_id: int) -> dict[str, str]:
        with app.app_context():
            token = create_session_token(db.session.get(User, user_id))
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers


@pytest.fixture()
def admin_id(make_user) -> int:
    return make_user("admin@example.com", "AdminPass123", name="Admin", role="admin")


@pytest.fixture()
def user_id(make_user) -> int:
    return make_user()


@pytest.fixture()
def create_post(client: FlaskClient, admin_id: int, auth_headers):
    """Return a helper that creates a post through the API as the admin."""

    def _create_post(**fields) -> dict:
        payload = {"title": "Hello World", "content": "Some content here"}
        payload.update(fields)
        response = client.post("/api/posts", json=payload, headers=auth_headers(admin_id))
        assert response.status_code == 201, response.get_json()
        return response.get_json()["data"]

    return _create_post
