# src/hottakes/schemas/post.py
"""Post-related Pydantic schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from hottakes.db.time import as_utc
from hottakes.schemas.vote import VoteTally

TITLE_PREVIEW_LENGTH = 50


def split_content(content: str) -> tuple[str, str]:
    """Split post content into its title (first line) and description (the rest)."""
    lines = content.split("\n")
    title = lines[0].strip()
    description = "\n".join(lines[1:]).strip()
    return title, description


class PostRecord(BaseModel):
    """A stored post."""

    id: int
    content: str
    author_id: str
    is_anonymous: bool
    author_display_name: str | None = None
    author_profile_picture_url: str | None = None
    created_at: datetime
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)

    @field_validator("created_at", "updated_at")
    @classmethod
    def _assume_utc(cls, value: datetime | None) -> datetime | None:
        return as_utc(value) if value is not None else None

    @property
    def title(self) -> str:
        return split_content(self.content)[0]

    @property
    def description(self) -> str:
        return split_content(self.content)[1]

    @property
    def title_preview(self) -> str:
        """Title cut for compact listings, never empty."""
        title = self.title
        if not title:
            return "Untitled"
        if len(title) > TITLE_PREVIEW_LENGTH:
            return title[:TITLE_PREVIEW_LENGTH] + "..."
        return title


class PostCreate(BaseModel):
    """Schema for creating a new post."""

    content: str = Field(..., max_length=5000, description="First line is the title")
    is_anonymous: bool = False


class PostUpdate(BaseModel):
    """Schema for editing a post's content."""

    content: str = Field(..., max_length=5000)


class PostCard(BaseModel):
    """Post view model.

    Carries no author id: anonymous posts must not be traceable to their
    owner from the rendered feed.
    """

    kind: Literal["post"] = "post"
    id: int
    title: str
    title_preview: str
    description: str
    content: str
    is_anonymous: bool
    author_display_name: str | None
    author_profile_picture_url: str | None
    created_at: datetime
    updated_at: datetime | None = None
    likes: int
    dislikes: int
    viewer_vote: str | None
    can_edit: bool

    @classmethod
    def build(cls, post: PostRecord, tally: VoteTally, *, can_edit: bool) -> PostCard:
        """Assemble a card from a post and its tally."""
        anonymous = post.is_anonymous
        return cls(
            id=post.id,
            title=post.title,
            title_preview=post.title_preview,
            description=post.description,
            content=post.content,
            is_anonymous=anonymous,
            author_display_name=None if anonymous else post.author_display_name,
            author_profile_picture_url=None if anonymous else post.author_profile_picture_url,
            created_at=post.created_at,
            updated_at=post.updated_at,
            likes=tally.likes,
            dislikes=tally.dislikes,
            viewer_vote=tally.viewer_vote.value if tally.viewer_vote else None,
            can_edit=can_edit,
        )
