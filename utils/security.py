"""Security helpers: secret strength checks and error sanitization."""

from __future__ import annotations

import re
import secrets
import traceback
from typing import Mapping

REDACTED = "[REDACTED]"

WEAK_SECRETS = {
    "secret",
    "password",
    "jwt_secret",
    "your_secret_key",
    "changeme",
    "change-me",
    "default",
    "123456",
    "secret123",
}

SENSITIVE_PATTERNS = (
    re.compile(r"[a-z][a-z0-9+.\-]*://[^\s/]*@[^\s/]+", re.IGNORECASE),
    re.compile(r"(?:mongodb|postgres(?:ql)?|mysql|redis)(?:\+\w+)?://[^\s/]+", re.IGNORECASE),
    re.compile(r"jwt\s*[:=]\s*\S+", re.IGNORECASE),
    re.compile(r"authorization:\s*bearer\s+\S+", re.IGNORECASE),
    re.compile(r"password", re.IGNORECASE),
    re.compile(r"secret", re.IGNORECASE),
    re.compile(r"token", re.IGNORECASE),
    re.compile(r"key", re.IGNORECASE),
)

DEV_INDICATORS = ("localhost", "127.0.0.1", "test", "dev", "development")


def secret_strength(secret: str | None) -> str:
    """Classify a secret as ``weak``, ``medium`` or ``strong``."""

    if not secret or len(secret) < 16:
        return "weak"
    if len(secret) < 32:
        return "medium"

    criteria = sum(
        bool(re.search(pattern, secret))
        for pattern in (r"[A-Z]", r"[a-z]", r"[0-9]", r"[!@#$%^&*(),.?\":{}|<>]")
    )
    if criteria >= 3:
        return "strong"
    if criteria >= 2:
        return "medium"
    return "weak"


def validate_jwt_secret(secret: str | None) -> dict:
    """Return ``{"is_valid", "issues", "strength"}`` for a token signing secret."""

    issues: list[str] = []
    if not secret:
        return {"is_valid": False, "issues": ["JWT secret is required"], "strength": "weak"}
    if not isinstance(secret, str):
        return {"is_valid": False, "issues": ["JWT secret must be a string"], "strength": "weak"}

    if len(secret) < 32:
        issues.append("JWT secret should be at least 32 characters long for security")
    if secret.lower() in WEAK_SECRETS:
        issues.append("JWT secret appears to be a common weak secret")
    if len(set(secret.lower())) < 8:
        issues.append("JWT secret appears to have low entropy (not random enough)")

    return {"is_valid": not issues, "issues": issues, "strength": secret_strength(secret)}


def generate_secure_secret(nbytes: int = 32) -> str:
    return secrets.token_hex(nbytes)


def redact(text: str) -> str:
    """Replace known sensitive substrings of ``text`` with a placeholder."""

    for pattern in SENSITIVE_PATTERNS:
        text = pattern.sub(REDACTED, text)
    return text


def sanitize_error(error: BaseException, is_production: bool) -> dict:
    """Return a client-safe ``{"message", "stack"?}`` description of an unexpected error."""

    if is_production:
        return {"message": "Internal server error"}

    message = redact(str(error) or "Internal server error")
    stack = "".join(traceback.format_exception(type(error), error, error.__traceback__))
    return {"message": message, "stack": redact(stack)}


def validate_environment_security(config: Mapping) -> dict:
    """Check configuration for missing or weak security settings."""

    issues: list[str] = []
    warnings: list[str] = []

    for name in ("JWT_SECRET_KEY", "SQLALCHEMY_DATABASE_URI"):
        if not config.get(name):
            issues.append(f"Missing required setting: {name}")

    secret = config.get("JWT_SECRET_KEY")
    if secret:
        result = validate_jwt_secret(secret)
        issues.extend(f"JWT_SECRET_KEY: {issue}" for issue in result["issues"])
        if result["strength"] == "weak":
            warnings.append("JWT_SECRET_KEY strength is weak, consider using a stronger secret")

    if config.get("APP_ENV") == "production":
        for name in ("FRONTEND_URL", "SQLALCHEMY_DATABASE_URI", "MAIL_SERVER"):
            value = str(config.get(name) or "").lower()
            if any(indicator in value for indicator in DEV_INDICATORS):
                warnings.append(f"{name} appears to contain development values in production")

    return {"is_valid": not issues, "issues": issues, "warnings": warnings}
