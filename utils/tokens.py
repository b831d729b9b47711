"""Session and one-time token helpers."""

from __future__ import annotations

import secrets

from flask_jwt_extended import create_access_token

from models.user import User

ONE_TIME_TOKEN_BYTES = 32


def create_session_token(user: User) -> str:
    """Issue a signed session token carrying the user's id, role and verification flag."""

    return create_access_token(
        identity=str(user.id),
        additional_claims={"role": user.role, "isVerified": bool(user.is_verified)},
    )


def generate_one_time_token(nbytes: int = ONE_TIME_TOKEN_BYTES) -> str:
    """Return a random hex token for e-mail verification or password reset."""

    return secrets.token_hex(nbytes)
