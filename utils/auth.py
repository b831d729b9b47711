"""Request authentication and role authorization decorators."""

from __future__ import annotations

from functools import wraps
from typing import Callable, Iterable

from flask import g
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request
from flask_jwt_extended.exceptions import JWTExtendedException, NoAuthorizationError
from jwt.exceptions import PyJWTError
from werkzeug.exceptions import Forbidden, Unauthorized

from models import db
from models.user import User


def authenticate_request() -> User:
    """Verify the bearer token, load its user and attach it to ``g.current_user``."""

    try:
        verify_jwt_in_request()
    except NoAuthorizationError:
        raise Unauthorized("Not authorized, no token")
    except (JWTExtendedException, PyJWTError):
        raise Unauthorized("Not authorized, token failed")

    try:
        user_id = int(get_jwt_identity())
    except (TypeError, ValueError):
        raise Unauthorized("Not authorized, token failed")

    user = db.session.get(User, user_id)
    if user is None:
        raise Unauthorized("User not found")

    g.current_user = user
    return user


def require_roles(roles: Iterable[str]) -> User:
    """Return the attached user if its role is allowed, otherwise raise Forbidden."""

    allowed = set(roles)
    user = g.get("current_user")
    if user is None or (allowed and user.role not in allowed):
        raise Forbidden("Forbidden: insufficient role")
    return user


def current_user() -> User | None:
    return g.get("current_user")


def auth_required(view: Callable) -> Callable:
    """Require a valid bearer token for the decorated view."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        authenticate_request()
        return view(*args, **kwargs)

    return wrapper


def authorize(*roles: str) -> Callable:
    """Restrict the decorated view to users whose role is in ``roles``.

    Must be applied beneath :func:`auth_required` so a user is attached.
    """

    def decorator(view: Callable) -> Callable:
        @wraps(view)
        def wrapper(*args, **kwargs):
            require_roles(roles)
            return view(*args, **kwargs)

        return wrapper

    return decorator
