"""Rate limiters keyed by client IP address."""

from flask import current_app
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address


def _config_limit(key: str):
    return lambda: current_app.config[key]


def _failed_request(response) -> bool:
    return response.status_code >= 400


limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[_config_limit("RATE_LIMIT")],
)

login_limit = limiter.limit(
    _config_limit("LOGIN_RATE_LIMIT"),
    error_message="Too many login attempts. Please try again later.",
    deduct_when=_failed_request,
    override_defaults=False,
)

password_reset_limit = limiter.limit(
    _config_limit("PASSWORD_RESET_RATE_LIMIT"),
    error_message="Too many password reset requests. Please try again later.",
    override_defaults=False,
)

email_verification_limit = limiter.limit(
    _config_limit("EMAIL_VERIFICATION_RATE_LIMIT"),
    error_message="Too many verification attempts. Please try again later.",
    override_defaults=False,
)

registration_limit = limiter.limit(
    _config_limit("REGISTRATION_RATE_LIMIT"),
    error_message="Too many registration attempts. Please try again later.",
    override_defaults=False,
)

auth_limit = limiter.limit(
    _config_limit("AUTH_RATE_LIMIT"),
    error_message="Too many authentication requests. Please try again later.",
    override_defaults=False,
)
