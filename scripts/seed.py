"""Seed an administrator and a handful of verified demo users."""

from app import create_app
from models import db
from models.user import User

SEED_USERS = [
    {"name": "Admin User", "email": "admin@example.com", "password": "admin123", "role": "admin"},
    {"name": "Demo User 1", "email": "demo1@example.com", "password": "password123", "role": "user"},
    {"name": "Demo User 2", "email": "demo2@example.com", "password": "password123", "role": "user"},
    {"name": "Demo User 3", "email": "demo3@example.com", "password": "password123", "role": "user"},
    {"name": "Demo User 4", "email": "demo4@example.com", "password": "password123", "role": "user"},
]


def seed_users() -> dict[str, str]:
    """Create or update the seed users; return ``{email: action}``."""

    actions = {}
    for entry in SEED_USERS:
        user = User.query.filter_by(email=entry["email"]).first()
        if user is None:
            user = User(email=entry["email"])
            db.session.add(user)
            actions[entry["email"]] = "created"
        else:
            actions[entry["email"]] = "updated"
        user.name = entry["name"]
        user.role = entry["role"]
        user.is_verified = True
        user.verification_token = None
        user.set_password(entry["password"])
    db.session.commit()
    return actions


def main() -> None:
    app = create_app()
    with app.app_context():
        db.create_all()
        for email, action in seed_users().items():
            print(f"User {action}: {email}")


if __name__ == "__main__":
    main()
