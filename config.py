"""Application configuration module."""

import os
import re
from datetime import timedelta


def parse_duration(value, default: timedelta) -> timedelta:
    """Parse ``7d``/``12h``/``30m``/``45s`` or plain seconds into a timedelta."""

    if value is None or str(value).strip() == "":
        return default
    match = re.fullmatch(r"\s*(\d+)\s*([dhms]?)\s*", str(value).lower())
    if match is None:
        raise ValueError(f"Invalid duration: {value!r}")
    amount, unit = int(match.group(1)), match.group(2) or "s"
    return {
        "d": timedelta(days=amount),
        "h": timedelta(hours=amount),
        "m": timedelta(minutes=amount),
        "s": timedelta(seconds=amount),
    }[unit]


class Config:
    """Base configuration for the Flask application."""

    # Core
    APP_ENV = os.getenv("APP_ENV", "development")
    SECRET_KEY = os.getenv("SECRET_KEY", "change-me")
    PORT = int(os.getenv("PORT", "5000"))
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///blog.db")
    SQLALCHEMY_DATABASE_URI = DATABASE_URL
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JSON_SORT_KEYS = False

    # Session tokens
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", SECRET_KEY)
    JWT_ACCESS_TOKEN_EXPIRES = parse_duration(os.getenv("JWT_EXPIRE"), timedelta(days=7))
    JWT_TOKEN_LOCATION = ["headers"]
    RESET_TOKEN_EXPIRES = timedelta(hours=1)

    # Frontend origin, used for CORS and e-mail links
    FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")
    CORS_ORIGINS = [FRONTEND_URL]

    # Rate limiting
    RATELIMIT_ENABLED = True
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")
    RATELIMIT_HEADERS_ENABLED = True
    RATE_LIMIT = os.getenv("RATE_LIMIT", "100 per 15 minutes")
    LOGIN_RATE_LIMIT = os.getenv("LOGIN_RATE_LIMIT", "5 per 15 minutes")
    PASSWORD_RESET_RATE_LIMIT = os.getenv("PASSWORD_RESET_RATE_LIMIT", "3 per hour")
    EMAIL_VERIFICATION_RATE_LIMIT = os.getenv("EMAIL_VERIFICATION_RATE_LIMIT", "3 per 15 minutes")
    REGISTRATION_RATE_LIMIT = os.getenv("REGISTRATION_RATE_LIMIT", "3 per hour")
    AUTH_RATE_LIMIT = os.getenv("AUTH_RATE_LIMIT", "20 per 15 minutes")

    # Mail
    MAIL_BACKEND = os.getenv("MAIL_BACKEND", "console")
    MAIL_SERVER = os.getenv("MAIL_SERVER", "localhost")
    MAIL_PORT = int(os.getenv("MAIL_PORT", "587"))
    MAIL_USERNAME = os.getenv("MAIL_USERNAME")
    MAIL_PASSWORD = os.getenv("MAIL_PASSWORD")
    MAIL_USE_TLS = os.getenv("MAIL_USE_TLS", "true").lower() in {"1", "true", "yes"}
    MAIL_DEFAULT_SENDER = os.getenv("MAIL_DEFAULT_SENDER", "no-reply@blog.local")

    # Posts
    POSTS_PER_PAGE = 10


class DevelopmentConfig(Config):
    APP_ENV = "development"
    DEBUG = True


class ProductionConfig(Config):
    APP_ENV = "production"
    DEBUG = False
    MAIL_BACKEND = os.getenv("MAIL_BACKEND", "smtp")


class TestingConfig(Config):
    APP_ENV = "testing"
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    RATELIMIT_ENABLED = False
    MAIL_BACKEND = "memory"
    JWT_SECRET_KEY = "testing-secret-key-with-enough-entropy-0123456789"


_CONFIGS = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
}


def get_config(env: str | None = None) -> type[Config]:
    """Return the configuration class for the given environment name."""

    name = (env or os.getenv("APP_ENV") or "development").strip().lower()
    return _CONFIGS.get(name, DevelopmentConfig)
