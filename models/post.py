"""Post model definition and save-time derivations."""

import math
import re
import time
from datetime import datetime
from typing import Iterable

from sqlalchemy import event, select
from sqlalchemy.ext.associationproxy import association_proxy

from utils.slugify import slugify

from . import db


POST_STATUSES = ("draft", "published")
TITLE_MAX_LENGTH = 200
EXCERPT_MAX_LENGTH = 300
EXCERPT_SOURCE_LENGTH = 150
WORDS_PER_MINUTE = 200

_TAG_RE = re.compile(r"<[^>]*>")


post_likes = db.Table(
    "post_likes",
    db.Column("post_id", db.Integer, db.ForeignKey("posts.id", ondelete="CASCADE"), primary_key=True),
    db.Column("user_id", db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)


def derive_excerpt(content: str) -> str:
    """Strip markup from ``content`` and truncate it into an excerpt."""

    return _TAG_RE.sub("", content)[:EXCERPT_SOURCE_LENGTH] + "..."


def derive_read_time(content: str) -> int:
    """Return the estimated read time in minutes."""

    word_count = len(content.split(" "))
    return math.ceil(word_count / WORDS_PER_MINUTE)


class PostTag(db.Model):
    """A single tag attached to a post."""

    __tablename__ = "post_tags"
    __table_args__ = (db.UniqueConstraint("post_id", "name", name="uq_post_tags_post_name"),)

    id = db.Column(db.Integer, primary_key=True)
    post_id = db.Column(
        db.Integer,
        db.ForeignKey("posts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = db.Column(db.String(64), nullable=False, index=True)

    def __init__(self, name: str):
        self.name = name


class Post(db.Model):
    """Represents a blog post."""

    __tablename__ = "posts"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(TITLE_MAX_LENGTH), nullable=False)
    content = db.Column(db.Text, nullable=False)
    excerpt = db.Column(db.String(EXCERPT_MAX_LENGTH), nullable=True)
    slug = db.Column(db.String(320), unique=True, nullable=False, index=True)
    author_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True, index=True)
    featured_image = db.Column(db.String(512), nullable=False, default="")
    status = db.Column(
        db.Enum(*POST_STATUSES, name="post_status_enum"),
        nullable=False,
        default="draft",
        server_default=db.text("'draft'"),
    )
    views = db.Column(db.Integer, nullable=False, default=0, server_default=db.text("0"))
    read_time = db.Column(db.Integer, nullable=False, default=1, server_default=db.text("1"))
    published_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(
        db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    author = db.relationship("User", backref=db.backref("posts", lazy="dynamic"))
    tag_links = db.relationship(
        "PostTag",
        cascade="all, delete-orphan",
        order_by="PostTag.id",
    )
    tags = association_proxy("tag_links", "name")
    liked_by = db.relationship(
        "User",
        secondary=post_likes,
        backref=db.backref("liked_posts", lazy="dynamic"),
    )
    comments = db.relationship(
        "Comment",
        back_populates="post",
        cascade="all, delete-orphan",
        lazy="dynamic",
    )

    def set_tags(self, names: Iterable[str]) -> None:
        """Replace the post's tags, trimming whitespace and dropping duplicates."""

        wanted = []
        for raw in names or []:
            name = str(raw).strip()
            if name and name not in wanted:
                wanted.append(name)

        for link in list(self.tag_links):
            if link.name not in wanted:
                self.tag_links.remove(link)
        existing = {link.name for link in self.tag_links}
        for name in wanted:
            if name not in existing:
                self.tag_links.append(PostTag(name))

    def toggle_like(self, user) -> bool:
        """Add or remove ``user``'s like and return whether the post is now liked."""

        if user in self.liked_by:
            self.liked_by.remove(user)
            return False
        self.liked_by.append(user)
        return True

    def toggle_status(self) -> str:
        self.status = "draft" if self.status == "published" else "published"
        return self.status

    @property
    def likes_count(self) -> int:
        return len(self.liked_by)

    def to_summary_dict(self) -> dict:
        """Serialize the listing view of a post."""

        return {
            "id": self.id,
            "title": self.title,
            "excerpt": self.excerpt,
            "slug": self.slug,
            "author": self.author.to_author_dict("avatar") if self.author else None,
            "featuredImage": self.featured_image,
            "tags": list(self.tags),
            "status": self.status,
            "views": self.views,
            "likes": self.likes_count,
            "readTime": self.read_time,
            "publishedAt": _isoformat(self.published_at),
        }

    def to_detail_dict(self) -> dict:
        """Serialize the public single-post view."""

        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "excerpt": self.excerpt,
            "slug": self.slug,
            "author": self.author.to_author_dict("avatar", "bio") if self.author else None,
            "featuredImage": self.featured_image,
            "tags": list(self.tags),
            "views": self.views,
            "likes": self.likes_count,
            "readTime": self.read_time,
            "publishedAt": _isoformat(self.published_at),
        }

    def to_dict(self, author_fields: tuple = ()) -> dict:
        """Serialize the full post record."""

        if author_fields and self.author is not None:
            author = self.author.to_author_dict(*author_fields)
        else:
            author = self.author_id
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "excerpt": self.excerpt,
            "slug": self.slug,
            "author": author,
            "featuredImage": self.featured_image,
            "tags": list(self.tags),
            "status": self.status,
            "views": self.views,
            "likes": [user.id for user in self.liked_by],
            "readTime": self.read_time,
            "publishedAt": _isoformat(self.published_at),
            "createdAt": _isoformat(self.created_at),
            "updatedAt": _isoformat(self.updated_at),
        }

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"<Post id={self.id} slug={self.slug} status={self.status}>"


def _isoformat(value):
    return value.isoformat() if value else None


def _unique_slug(connection, title: str) -> str:
    base = f"{slugify(title)}-{int(time.time() * 1000)}"
    candidate = base
    suffix = 1
    while connection.execute(select(Post.id).where(Post.slug == candidate)).first() is not None:
        suffix += 1
        candidate = f"{base}-{suffix}"
    return candidate


def _apply_derived_fields(target: Post) -> None:
    if not target.excerpt and target.content:
        target.excerpt = derive_excerpt(target.content)
    if target.content:
        target.read_time = derive_read_time(target.content)
    if target.status == "published" and target.published_at is None:
        target.published_at = datetime.utcnow()


@event.listens_for(Post, "before_insert")
def _before_insert(mapper, connection, target: Post) -> None:
    if not target.slug:
        target.slug = _unique_slug(connection, target.title)
    _apply_derived_fields(target)


@event.listens_for(Post, "before_update")
def _before_update(mapper, connection, target: Post) -> None:
    _apply_derived_fields(target)
