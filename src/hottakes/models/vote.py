# src/hottakes/models/vote.py
"""Models capturing like/dislike votes on posts."""

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from hottakes.db.session import Base
from hottakes.db.time import utcnow


class PostVote(Base):
    """Per-user vote on a post."""

    __tablename__ = "likes"
    __table_args__ = (
        CheckConstraint("like_type IN ('like', 'dislike')", name="ck_likes_like_type"),
        Index("ix_likes_post_id", "post_id"),
    )

    post_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("posts.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)

    # Composite primary key prevents duplicate votes from the same user.

    like_type: Mapped[str] = mapped_column(String(8), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
