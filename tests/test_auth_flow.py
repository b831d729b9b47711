"""Tests covering registration, verification, login and password reset."""

from __future__ import annotations

from datetime import datetime, timedelta

import jwt
import pytest
from flask.testing import FlaskClient
from flask_jwt_extended import create_access_token, decode_token

from models import db
from models.user import User


def _register(client: FlaskClient, email: str = "new@example.com", password: str = "NewPass123"):
    return client.post(
        "/api/auth/register",
        json={"name": "New User", "email": email, "password": password},
    )


def _login(client: FlaskClient, email: str, password: str):
    return client.post("/api/auth/login", json={"email": email, "password": password})


def test_register_creates_unverified_user_and_sends_link(app, client, mailer):
    response = _register(client)

    assert response.status_code == 201
    data = response.get_json()
    assert data["success"] is True
    assert data["user"]["email"] == "new@example.com"
    assert data["user"]["role"] == "user"
    assert data["user"]["isVerified"] is False
    assert "password" not in data["user"]

    with app.app_context():
        user = User.query.filter_by(email="new@example.com").one()
        assert user.verification_token
        assert user.password_hash != "NewPass123"
        token = user.verification_token

    assert len(mailer.outbox) == 1
    message = mailer.outbox[0]
    assert message.to == "new@example.com"
    assert message.subject == "Verify your email"
    assert f"{app.config['FRONTEND_URL']}/verify-email/{token}" in message.html


def test_register_duplicate_email_conflicts_without_new_row(app, client):
    assert _register(client).status_code == 201

    response = _register(client, password="Different123")

    assert response.status_code == 409
    assert response.get_json() == {
        "success": False,
        "message": "Email already in use",
        "request_id": response.headers["X-Request-ID"],
    }
    with app.app_context():
        assert User.query.filter_by(email="new@example.com").count() == 1


@pytest.mark.parametrize(
    "payload",
    [
        {"email": "a@example.com", "password": "x"},
        {"name": "A", "password": "x"},
        {"name": "A", "email": "a@example.com"},
    ],
)
def test_register_requires_fields(client, payload):
    response = client.post("/api/auth/register", json=payload)

    assert response.status_code == 400
    assert response.get_json()["success"] is False


def test_verify_email_consumes_token(app, client):
    _register(client)
    with app.app_context():
        token = User.query.filter_by(email="new@example.com").one().verification_token

    response = client.get(f"/api/auth/verify-email/{token}")
    assert response.status_code == 200
    assert response.get_json()["message"] == "Email verified successfully"

    with app.app_context():
        user = User.query.filter_by(email="new@example.com").one()
        assert user.is_verified is True
        assert user.verification_token is None

    reused = client.get(f"/api/auth/verify-email/{token}")
    assert reused.status_code == 400


def test_verify_email_unknown_token(client):
    response = client.get("/api/auth/verify-email/not-a-token")

    assert response.status_code == 400
    assert response.get_json()["message"] == "Invalid or expired token"


def test_login_returns_token_usable_on_authenticated_route(client, make_user):
    make_user("j1@example.com", "J1Pass123", name="J One")

    response = _login(client, "j1@example.com", "J1Pass123")

    assert response.status_code == 200
    data = response.get_json()
    assert data["success"] is True
    assert data["token"]
    assert data["user"]["email"] == "j1@example.com"
    assert data["user"]["isVerified"] is True
    assert "password" not in data["user"]
    assert "password_hash" not in data["user"]

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {data['token']}"})
    assert me.status_code == 200
    assert me.get_json()["data"]["email"] == "j1@example.com"


def test_login_email_is_normalized(client, make_user):
    make_user("j1@example.com", "J1Pass123")

    response = _login(client, "  J1@Example.com ", "J1Pass123")

    assert response.status_code == 200


def test_invalid_credentials_are_indistinguishable(client, make_user):
    make_user("j1@example.com", "J1Pass123")

    wrong_password = _login(client, "j1@example.com", "wrong")
    unknown_email = _login(client, "nobody@example.com", "J1Pass123")

    assert wrong_password.status_code == unknown_email.status_code == 400
    first = wrong_password.get_json()
    second = unknown_email.get_json()
    first.pop("request_id")
    second.pop("request_id")
    assert first == second == {"success": False, "message": "Invalid credentials"}


def test_login_requires_verified_account(client, make_user):
    make_user("pending@example.com", "PendingPass1", verified=False)

    response = _login(client, "pending@example.com", "PendingPass1")

    assert response.status_code == 401
    assert "verify your email" in response.get_json()["message"]


def test_me_requires_bearer_token(client):
    missing = client.get("/api/auth/me")
    malformed = client.get("/api/auth/me", headers={"Authorization": "Bearer not.a.jwt"})
    wrong_scheme = client.get("/api/auth/me", headers={"Authorization": "Token abc"})

    assert missing.status_code == 401
    assert missing.get_json()["message"] == "Not authorized, no token"
    assert malformed.status_code == 401
    assert malformed.get_json()["message"] == "Not authorized, token failed"
    assert wrong_scheme.status_code == 401


def test_expired_token_is_rejected(app, client, user_id):
    with app.app_context():
        token = create_access_token(identity=str(user_id), expires_delta=timedelta(seconds=-1))

    response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401


def test_token_signed_with_other_secret_is_rejected(client, user_id):
    tampered = jwt.encode(
        {"sub": str(user_id), "type": "access", "exp": datetime.utcnow() + timedelta(hours=1)},
        "some-other-secret-that-is-long-enough-0123456789",
        algorithm="HS256",
    )

    response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {tampered}"})

    assert response.status_code == 401


def test_token_for_deleted_user_is_rejected(app, client, user_id, auth_headers):
    headers = auth_headers(user_id)
    with app.app_context():
        db.session.delete(db.session.get(User, user_id))
        db.session.commit()

    response = client.get("/api/auth/me", headers=headers)

    assert response.status_code == 401
    assert response.get_json()["message"] == "User not found"


def test_session_token_carries_role_and_verification_claims(app, client, make_user):
    make_user("claims@example.com", "ClaimsPass1", role="admin")
    token = _login(client, "claims@example.com", "ClaimsPass1").get_json()["token"]

    with app.app_context():
        claims = decode_token(token)

    assert claims["role"] == "admin"
    assert claims["isVerified"] is True
    assert claims["sub"]


def test_password_reset_flow_is_single_use(app, client, make_user, mailer):
    make_user("reset@example.com", "OldPass123")

    response = client.post("/api/auth/forgot-password", json={"email": "reset@example.com"})
    assert response.status_code == 200
    assert mailer.outbox[-1].subject == "Password Reset"

    with app.app_context():
        user = User.query.filter_by(email="reset@example.com").one()
        token = user.reset_password_token
        assert user.reset_password_expire > datetime.utcnow() + timedelta(minutes=59)
    assert f"/reset-password/{token}" in mailer.outbox[-1].html

    reset = client.post(f"/api/auth/reset-password/{token}", json={"password": "NewPass456"})
    assert reset.status_code == 200

    with app.app_context():
        user = User.query.filter_by(email="reset@example.com").one()
        assert user.reset_password_token is None
        assert user.reset_password_expire is None

    assert _login(client, "reset@example.com", "OldPass123").status_code == 400
    assert _login(client, "reset@example.com", "NewPass456").status_code == 200

    reused = client.post(f"/api/auth/reset-password/{token}", json={"password": "Again789"})
    assert reused.status_code == 400
    assert reused.get_json()["message"] == "Invalid or expired token"


def test_expired_reset_token_is_rejected(app, client, make_user):
    make_user("late@example.com", "OldPass123")
    client.post("/api/auth/forgot-password", json={"email": "late@example.com"})

    with app.app_context():
        user = User.query.filter_by(email="late@example.com").one()
        user.reset_password_expire = datetime.utcnow() - timedelta(seconds=1)
        token = user.reset_password_token
        db.session.commit()

    response = client.post(f"/api/auth/reset-password/{token}", json={"password": "NewPass456"})

    assert response.status_code == 400
    assert _login(client, "late@example.com", "OldPass123").status_code == 200


def test_forgot_password_unknown_email(client, mailer):
    response = client.post("/api/auth/forgot-password", json={"email": "ghost@example.com"})

    assert response.status_code == 404
    assert mailer.outbox == []


def test_update_profile_changes_only_profile_fields(app, client, user_id, auth_headers):
    response = client.put(
        "/api/auth/profile",
        json={"name": "Renamed", "bio": "Hello", "avatar": "a.png", "role": "admin"},
        headers=auth_headers(user_id),
    )

    assert response.status_code == 200
    data = response.get_json()["data"]
    assert data["name"] == "Renamed"
    assert data["bio"] == "Hello"
    assert data["avatar"] == "a.png"
    assert data["role"] == "user"


def test_update_profile_requires_authentication(client):
    response = client.put("/api/auth/profile", json={"name": "x"})

    assert response.status_code == 401


def test_register_concurrent_duplicate_maps_to_conflict(app, client, monkeypatch):
    real_commit = db.session.commit

    def commit_after_competing_insert():
        db.session.execute(
            User.__table__.insert().values(
                name="Racer", email="new@example.com", password_hash="not-a-hash"
            )
        )
        real_commit()

    monkeypatch.setattr(db.session, "commit", commit_after_competing_insert)

    response = _register(client)

    assert response.status_code == 409
    assert response.get_json()["message"] == "Email already in use"
