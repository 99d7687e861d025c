# src/hottakes/models/post.py
"""SQLAlchemy model for posts ("hot takes")."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from hottakes.db.session import Base
from hottakes.db.time import utcnow


class Post(Base):
    """Short free-text post.

    Author display fields are a snapshot taken at write time and rewritten by
    the profile fan-out; they are never joined live.
    """

    __tablename__ = "posts"
    __table_args__ = (
        Index("ix_posts_created_at_id", "created_at", "id"),
        Index("ix_posts_author_id", "author_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)

    # Always set, even for anonymous posts; used for ownership checks only.
    author_id: Mapped[str] = mapped_column(String(64), nullable=False)
    is_anonymous: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Null for anonymous posts.
    author_display_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    author_profile_picture_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
