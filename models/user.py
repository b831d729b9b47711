"""User model definition."""

from datetime import datetime, timedelta
from typing import Optional

from werkzeug.security import check_password_hash, generate_password_hash

from . import db


USER_ROLES = ("user", "admin")


class User(db.Model):
    """Represents a registered blog user."""

    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(
        db.Enum(*USER_ROLES, name="user_role_enum"),
        nullable=False,
        default="user",
        server_default=db.text("'user'"),
    )
    is_verified = db.Column(
        db.Boolean,
        nullable=False,
        default=False,
        server_default=db.text("false"),
    )
    verification_token = db.Column(db.String(128), nullable=True, index=True)
    reset_password_token = db.Column(db.String(128), nullable=True, index=True)
    reset_password_expire = db.Column(db.DateTime, nullable=True)
    avatar = db.Column(db.String(512), nullable=False, default="")
    bio = db.Column(db.Text, nullable=False, default="")
    joined_date = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    def set_password(self, password: str) -> None:
        """Hash and store the password."""

        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        """Verify a password against the stored hash."""

        if not self.password_hash or not password:
            return False
        return check_password_hash(self.password_hash, password)

    def mark_verified(self) -> None:
        """Mark the user as verified and consume the verification token."""

        self.is_verified = True
        self.verification_token = None

    def start_password_reset(self, token: str, lifetime: timedelta, now: Optional[datetime] = None) -> None:
        self.reset_password_token = token
        self.reset_password_expire = (now or datetime.utcnow()) + lifetime

    def reset_token_valid(self, token: str, now: Optional[datetime] = None) -> bool:
        """Return True if ``token`` matches the stored reset token and has not expired."""

        if not token or self.reset_password_token != token:
            return False
        if self.reset_password_expire is None:
            return False
        return self.reset_password_expire > (now or datetime.utcnow())

    def complete_password_reset(self, new_password: str) -> None:
        self.set_password(new_password)
        self.reset_password_token = None
        self.reset_password_expire = None

    def to_dict(self) -> dict:
        """Serialize the public projection of the user (never the password)."""

        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role,
            "avatar": self.avatar,
            "bio": self.bio,
            "isVerified": self.is_verified,
            "joinedDate": self.joined_date.isoformat() if self.joined_date else None,
        }

    def to_author_dict(self, *fields: str) -> dict:
        """Serialize the subset of fields embedded as a post/comment author."""

        data = {"id": self.id, "name": self.name}
        for field in fields:
            if field == "avatar":
                data["avatar"] = self.avatar
            elif field == "bio":
                data["bio"] = self.bio
            elif field == "email":
                data["email"] = self.email
        return data

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"<User {self.email}>"
