"""Comment model definition."""

from datetime import datetime

from . import db


comment_likes = db.Table(
    "comment_likes",
    db.Column(
        "comment_id", db.Integer, db.ForeignKey("comments.id", ondelete="CASCADE"), primary_key=True
    ),
    db.Column("user_id", db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)


class Comment(db.Model):
    """Represents a comment left on a post."""

    __tablename__ = "comments"

    id = db.Column(db.Integer, primary_key=True)
    content = db.Column(db.Text, nullable=False)
    post_id = db.Column(
        db.Integer,
        db.ForeignKey("posts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    author_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True, index=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(
        db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    post = db.relationship("Post", back_populates="comments")
    author = db.relationship("User", backref=db.backref("comments", lazy="dynamic"))
    liked_by = db.relationship(
        "User",
        secondary=comment_likes,
        backref=db.backref("liked_comments", lazy="dynamic"),
    )

    def is_owned_by(self, user) -> bool:
        return user is not None and self.author_id == user.id

    def toggle_like(self, user) -> bool:
        """Add or remove ``user``'s like and return whether the comment is now liked."""

        if user in self.liked_by:
            self.liked_by.remove(user)
            return False
        self.liked_by.append(user)
        return True

    @property
    def likes_count(self) -> int:
        return len(self.liked_by)

    def to_list_dict(self) -> dict:
        return {
            "id": self.id,
            "content": self.content,
            "author": self.author.to_author_dict("avatar") if self.author else None,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "likes": self.likes_count,
        }

    def to_dict(self) -> dict:
        """Serialize the full comment record."""

        return {
            "id": self.id,
            "content": self.content,
            "post": self.post_id,
            "author": self.author_id,
            "likes": [user.id for user in self.liked_by],
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"<Comment id={self.id} post_id={self.post_id}>"
