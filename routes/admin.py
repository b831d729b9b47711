"""Admin blueprint: statistics and user management."""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request
from sqlalchemy import func
from werkzeug.exceptions import BadRequest, NotFound

from models import db
from models.comment import Comment
from models.post import Post
from models.user import USER_ROLES, User
from utils.auth import authenticate_request, require_roles
from utils.request_validation import parse_json_request

admin_bp = Blueprint("admin", __name__)


@admin_bp.before_request
def _require_admin() -> None:
    if request.method == "OPTIONS":
        return
    authenticate_request()
    require_roles(("admin",))


def _get_user_or_404(user_id: int) -> User:
    user = db.session.get(User, user_id)
    if user is None:
        raise NotFound("User not found")
    return user


def _count_by_author(model) -> dict[int, int]:
    rows = (
        db.session.query(model.author_id, func.count(model.id))
        .group_by(model.author_id)
        .all()
    )
    return {author_id: count for author_id, count in rows if author_id is not None}


@admin_bp.route("/stats", methods=["GET"])
def stats():
    total_views = db.session.query(func.coalesce(func.sum(Post.views), 0)).scalar()
    return jsonify(
        {
            "success": True,
            "data": {
                "totalUsers": User.query.count(),
                "totalPosts": Post.query.count(),
                "publishedPosts": Post.query.filter_by(status="published").count(),
                "draftPosts": Post.query.filter_by(status="draft").count(),
                "totalViews": int(total_views or 0),
                "totalComments": Comment.query.count(),
            },
        }
    )


@admin_bp.route("/users", methods=["GET"])
def list_users():
    """Return every user with their post and comment counts."""

    post_counts = _count_by_author(Post)
    comment_counts = _count_by_author(Comment)

    payload = []
    for user in User.query.order_by(User.id.asc()).all():
        payload.append(
            {
                "id": user.id,
                "name": user.name,
                "email": user.email,
                "role": user.role,
                "isVerified": user.is_verified,
                "joinedDate": user.joined_date.isoformat() if user.joined_date else None,
                "postsCount": post_counts.get(user.id, 0),
                "commentsCount": comment_counts.get(user.id, 0),
            }
        )
    return jsonify({"success": True, "data": payload})


@admin_bp.route("/users/<int:user_id>/role", methods=["PUT"])
def update_user_role(user_id: int):
    data = parse_json_request(request, required_keys=("role",))
    role = str(data["role"]).strip().lower()
    if role not in USER_ROLES:
        raise BadRequest("Role must be one of: user, admin.")

    user = _get_user_or_404(user_id)
    user.role = role
    db.session.commit()

    current_app.logger.info("User id=%s role changed to %s", user.id, role)
    return jsonify({"success": True, "data": user.to_dict()})


@admin_bp.route("/users/<int:user_id>", methods=["DELETE"])
def delete_user(user_id: int):
    """Delete a user. Their posts and comments are kept without an author."""

    user = _get_user_or_404(user_id)
    db.session.delete(user)
    db.session.commit()

    current_app.logger.info("Deleted user id=%s", user_id)
    return jsonify({"success": True, "message": "User deleted"})


@admin_bp.route("/posts", methods=["GET"])
def list_all_posts():
    """Return every post, drafts included."""

    posts = Post.query.order_by(Post.created_at.desc(), Post.id.desc()).all()
    return jsonify(
        {"success": True, "data": [post.to_dict(author_fields=("email",)) for post in posts]}
    )
