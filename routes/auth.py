"""Authentication blueprint: registration, verification, login and profile."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, current_app, jsonify, request
from sqlalchemy.exc import IntegrityError
from werkzeug.exceptions import BadRequest, Conflict, NotFound, Unauthorized

from mail import get_mailer
from models import db
from models.user import User
from utils.auth import auth_required, current_user
from utils.errors import InvalidCredentials
from utils.rate_limits import (
    auth_limit,
    email_verification_limit,
    login_limit,
    password_reset_limit,
    registration_limit,
)
from utils.request_validation import parse_json_request
from utils.tokens import create_session_token, generate_one_time_token

PROFILE_FIELDS = ("name", "avatar", "bio")
auth_bp = Blueprint("auth", __name__)


def _normalize_email(raw_email: str | None) -> str:
    """Normalize an email string by stripping whitespace and lowering case."""
    return (raw_email or "").strip().lower()


def _frontend_link(path: str) -> str:
    return f"{current_app.config['FRONTEND_URL'].rstrip('/')}/{path}"


@auth_bp.route("/register", methods=["POST"])
@registration_limit
def register() -> tuple:
    """Register a new user and send the e-mail verification link."""
    payload = parse_json_request(request, required_keys=("name", "email", "password"))
    name = str(payload["name"]).strip()
    email = _normalize_email(payload.get("email"))
    password = str(payload["password"])

    if not name or not email:
        raise BadRequest("Name, email and password are required.")

    if User.query.filter_by(email=email).first() is not None:
        raise Conflict("Email already in use")

    user = User(name=name, email=email, verification_token=generate_one_time_token())
    user.set_password(password)
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        raise Conflict("Email already in use") from exc

    verify_url = _frontend_link(f"verify-email/{user.verification_token}")
    get_mailer().send(
        to=user.email,
        subject="Verify your email",
        html=(
            f"<p>Hi {user.name},</p>"
            f'<p>Please verify your email by clicking <a href="{verify_url}">here</a>.</p>'
        ),
    )
    current_app.logger.info("Registered user id=%s", user.id)

    return (
        jsonify(
            {
                "success": True,
                "message": "Registration successful. Please check your email for verification.",
                "user": {
                    "id": user.id,
                    "name": user.name,
                    "email": user.email,
                    "role": user.role,
                    "isVerified": user.is_verified,
                },
            }
        ),
        HTTPStatus.CREATED,
    )


@auth_bp.route("/verify-email/<token>", methods=["GET"])
@email_verification_limit
def verify_email(token: str):
    """Consume an e-mail verification token."""
    user = User.query.filter_by(verification_token=token).first()
    if user is None:
        raise BadRequest("Invalid or expired token")

    user.mark_verified()
    db.session.commit()
    return jsonify({"success": True, "message": "Email verified successfully"})


@auth_bp.route("/login", methods=["POST"])
@login_limit
def login():
    """Authenticate a user and return a session token."""
    payload = parse_json_request(request, required_keys=("email", "password"))
    email = _normalize_email(payload.get("email"))
    password = str(payload["password"])

    user = User.query.filter_by(email=email).first()
    if user is None or not user.check_password(password):
        raise InvalidCredentials()

    if not user.is_verified:
        raise Unauthorized("Please verify your email before logging in")

    return jsonify(
        {"success": True, "token": create_session_token(user), "user": user.to_dict()}
    )


@auth_bp.route("/me", methods=["GET"])
@auth_limit
@auth_required
def me():
    return jsonify({"success": True, "data": current_user().to_dict()})


@auth_bp.route("/forgot-password", methods=["POST"])
@password_reset_limit
def forgot_password():
    """Issue a one-hour password reset token and e-mail the reset link."""
    payload = parse_json_request(request, required_keys=("email",))
    user = User.query.filter_by(email=_normalize_email(payload.get("email"))).first()
    if user is None:
        raise NotFound("User not found")

    user.start_password_reset(
        generate_one_time_token(), current_app.config["RESET_TOKEN_EXPIRES"]
    )
    db.session.commit()

    reset_url = _frontend_link(f"reset-password/{user.reset_password_token}")
    get_mailer().send(
        to=user.email,
        subject="Password Reset",
        html=(
            f"<p>Hi {user.name},</p>"
            f'<p>Reset your password by clicking <a href="{reset_url}">here</a>. '
            "This link will expire in 1 hour.</p>"
        ),
    )
    return jsonify({"success": True, "message": "Password reset email sent"})


@auth_bp.route("/reset-password/<token>", methods=["POST"])
@password_reset_limit
def reset_password(token: str):
    """Replace the password of the user holding a valid reset token."""
    payload = parse_json_request(request, required_keys=("password",))

    user = User.query.filter_by(reset_password_token=token).first()
    if user is None or not user.reset_token_valid(token):
        raise BadRequest("Invalid or expired token")

    user.complete_password_reset(str(payload["password"]))
    db.session.commit()
    current_app.logger.info("Password reset for user id=%s", user.id)
    return jsonify({"success": True, "message": "Password reset successful"})


@auth_bp.route("/profile", methods=["PUT"])
@auth_limit
@auth_required
def update_profile():
    """Update the caller's name, avatar and bio."""
    payload = parse_json_request(request)
    user = current_user()

    updates = {
        field: str(payload[field]).strip()
        for field in PROFILE_FIELDS
        if payload.get(field) is not None
    }
    if "name" in updates and not updates["name"]:
        raise BadRequest("Name must not be empty.")

    for field, value in updates.items():
        setattr(user, field, value)

    db.session.commit()
    return jsonify({"success": True, "data": user.to_dict()})
