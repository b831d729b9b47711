"""Posts blueprint with search, CRUD, publishing and likes."""

from __future__ import annotations

import math

from flask import Blueprint, current_app, jsonify, request
from sqlalchemy import or_
from werkzeug.exceptions import BadRequest, NotFound

from models import db
from models.post import EXCERPT_MAX_LENGTH, POST_STATUSES, TITLE_MAX_LENGTH, Post, PostTag
from utils.auth import auth_required, authorize, current_user
from utils.request_validation import parse_json_request, positive_int_arg

posts_bp = Blueprint("posts", __name__)

# JSON key -> model attribute for fields an admin may set directly.
EDITABLE_FIELDS = {
    "title": "title",
    "content": "content",
    "excerpt": "excerpt",
    "featuredImage": "featured_image",
    "status": "status",
}
TEXT_FIELDS = ("title", "content", "excerpt", "featuredImage")


def _get_post_or_404(post_id: int) -> Post:
    post = db.session.get(Post, post_id)
    if post is None:
        raise NotFound("Post not found")
    return post


def _validate_post_payload(data: dict, partial: bool = False) -> None:
    errors = []

    for key in TEXT_FIELDS:
        if data.get(key) is not None and not isinstance(data[key], str):
            errors.append(f"{key} must be a string")
    if errors:
        raise BadRequest("; ".join(errors))

    if not partial:
        for field in ("title", "content"):
            if not str(data.get(field) or "").strip():
                errors.append(f"{field} is required")
    else:
        for field in ("title", "content"):
            if field in data and not str(data.get(field) or "").strip():
                errors.append(f"{field} must not be empty")

    title = data.get("title")
    if title and len(str(title).strip()) > TITLE_MAX_LENGTH:
        errors.append(f"title cannot be more than {TITLE_MAX_LENGTH} characters")

    excerpt = data.get("excerpt")
    if excerpt and len(str(excerpt)) > EXCERPT_MAX_LENGTH:
        errors.append(f"excerpt cannot be more than {EXCERPT_MAX_LENGTH} characters")

    status = data.get("status")
    if status is not None and status not in POST_STATUSES:
        errors.append("status must be one of draft, published")

    tags = data.get("tags")
    if tags is not None and (
        not isinstance(tags, list) or not all(isinstance(tag, str) for tag in tags)
    ):
        errors.append("tags must be a list of strings")

    if errors:
        raise BadRequest("; ".join(errors))


def _apply_post_fields(post: Post, data: dict) -> None:
    for key, attribute in EDITABLE_FIELDS.items():
        if key in data and data[key] is not None:
            value = data[key]
            if key == "title":
                value = str(value).strip()
            setattr(post, attribute, value)
    if "tags" in data and data["tags"] is not None:
        post.set_tags(data["tags"])


@posts_bp.route("", methods=["GET"])
def list_posts():
    """Return published posts, newest first, filtered by tag or search text."""

    page = positive_int_arg("page", 1)
    limit = positive_int_arg("limit", current_app.config.get("POSTS_PER_PAGE", 10))

    query = Post.query.filter(Post.status == "published")

    tag = request.args.get("tag")
    if tag:
        query = query.filter(Post.tag_links.any(PostTag.name == tag))

    search = request.args.get("search")
    if search:
        query = query.filter(
            or_(
                Post.title.icontains(search, autoescape=True),
                Post.content.icontains(search, autoescape=True),
            )
        )

    total = query.count()
    posts = (
        query.order_by(Post.published_at.desc(), Post.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )

    return jsonify(
        {
            "success": True,
            "count": len(posts),
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "pages": math.ceil(total / limit),
            },
            "data": [post.to_summary_dict() for post in posts],
        }
    )


@posts_bp.route("/<slug>", methods=["GET"])
def get_post(slug: str):
    """Return a published post by slug and count the view."""

    post = Post.query.filter_by(slug=slug, status="published").first()
    if post is None:
        raise NotFound("Post not found")

    # Single UPDATE so concurrent reads never lose an increment.
    Post.query.filter_by(id=post.id).update(
        {Post.views: Post.views + 1}, synchronize_session=False
    )
    db.session.commit()
    db.session.refresh(post)

    return jsonify({"success": True, "data": post.to_detail_dict()})


@posts_bp.route("/user/<int:user_id>", methods=["GET"])
def list_user_posts(user_id: int):
    posts = Post.query.filter_by(author_id=user_id).order_by(Post.created_at.desc()).all()
    return jsonify({"success": True, "data": [post.to_dict() for post in posts]})


@posts_bp.route("/<int:post_id>/like", methods=["PUT"])
@auth_required
def like_post(post_id: int):
    """Toggle the caller's like on a post."""

    post = _get_post_or_404(post_id)
    is_liked = post.toggle_like(current_user())
    db.session.commit()
    return jsonify({"success": True, "isLiked": is_liked, "likesCount": post.likes_count})


@posts_bp.route("", methods=["POST"])
@auth_required
@authorize("admin")
def create_post():
    """Create a post authored by the calling admin."""

    data = parse_json_request(request)
    _validate_post_payload(data)

    post = Post(author=current_user())
    _apply_post_fields(post, data)
    db.session.add(post)
    db.session.commit()

    current_app.logger.info("Created post id=%s slug=%s", post.id, post.slug)
    return jsonify({"success": True, "data": post.to_dict()}), 201


@posts_bp.route("/<int:post_id>", methods=["PUT"])
@auth_required
@authorize("admin")
def update_post(post_id: int):
    post = _get_post_or_404(post_id)

    data = parse_json_request(request)
    _validate_post_payload(data, partial=True)
    _apply_post_fields(post, data)
    db.session.commit()

    return jsonify({"success": True, "data": post.to_dict()})


@posts_bp.route("/<int:post_id>", methods=["DELETE"])
@auth_required
@authorize("admin")
def delete_post(post_id: int):
    post = _get_post_or_404(post_id)
    db.session.delete(post)
    db.session.commit()

    current_app.logger.info("Deleted post id=%s", post_id)
    return jsonify({"success": True, "message": "Post deleted"})


@posts_bp.route("/<int:post_id>/publish", methods=["PUT"])
@auth_required
@authorize("admin")
def publish_post(post_id: int):
    """Toggle a post between draft and published."""

    post = _get_post_or_404(post_id)
    post.toggle_status()
    db.session.commit()
    return jsonify({"success": True, "data": post.to_dict()})
