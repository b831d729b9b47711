"""Comments blueprint."""

from __future__ import annotations

from flask import Blueprint, jsonify, request
from werkzeug.exceptions import BadRequest, Forbidden, NotFound

from models import db
from models.comment import Comment
from models.post import Post
from models.user import User
from utils.auth import auth_required, current_user
from utils.request_validation import parse_json_request

comments_bp = Blueprint("comments", __name__)


def _get_comment_or_404(comment_id: int) -> Comment:
    comment = db.session.get(Comment, comment_id)
    if comment is None:
        raise NotFound("Comment not found")
    return comment


def _can_modify_comment(comment: Comment, user: User | None) -> bool:
    if user is None:
        return False
    return user.role == "admin" or comment.is_owned_by(user)


def _parse_content(data: dict) -> str:
    content = str(data.get("content") or "").strip()
    if not content:
        raise BadRequest("content is required")
    return content


@comments_bp.route("/post/<int:post_id>", methods=["GET"])
def list_post_comments(post_id: int):
    """Return a post's comments, oldest first."""

    comments = (
        Comment.query.filter_by(post_id=post_id)
        .order_by(Comment.created_at.asc(), Comment.id.asc())
        .all()
    )
    return jsonify({"success": True, "data": [comment.to_list_dict() for comment in comments]})


@comments_bp.route("", methods=["POST"])
@auth_required
def create_comment():
    data = parse_json_request(request, required_keys=("post",))
    content = _parse_content(data)

    try:
        post_id = int(data["post"])
    except (TypeError, ValueError):
        raise BadRequest("post must be a post id")
    post = db.session.get(Post, post_id)
    if post is None:
        raise NotFound("Post not found")

    comment = Comment(content=content, post=post, author=current_user())
    db.session.add(comment)
    db.session.commit()
    return jsonify({"success": True, "data": comment.to_dict()}), 201


@comments_bp.route("/<int:comment_id>", methods=["PUT"])
@auth_required
def update_comment(comment_id: int):
    """Edit a comment. Authors and admins only."""

    comment = _get_comment_or_404(comment_id)
    if not _can_modify_comment(comment, current_user()):
        raise Forbidden("Not authorized")

    data = parse_json_request(request)
    comment.content = _parse_content(data)
    db.session.commit()
    return jsonify({"success": True, "data": comment.to_dict()})


@comments_bp.route("/<int:comment_id>", methods=["DELETE"])
@auth_required
def delete_comment(comment_id: int):
    """Delete a comment. Authors and admins only."""

    comment = _get_comment_or_404(comment_id)
    if not _can_modify_comment(comment, current_user()):
        raise Forbidden("Not authorized")

    db.session.delete(comment)
    db.session.commit()
    return jsonify({"success": True, "message": "Comment deleted"})


@comments_bp.route("/<int:comment_id>/like", methods=["PUT"])
@auth_required
def like_comment(comment_id: int):
    comment = _get_comment_or_404(comment_id)
    is_liked = comment.toggle_like(current_user())
    db.session.commit()
    return jsonify({"success": True, "isLiked": is_liked, "likesCount": comment.likes_count})
