# src/hottakes/schemas/profile.py
"""Profile-related Pydantic schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from hottakes.db.time import as_utc
from hottakes.schemas.post import PostCard


class ProfileRecord(BaseModel):
    """A stored user profile."""

    user_id: str
    display_name: str
    profile_picture_url: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)

    @field_validator("created_at", "updated_at")
    @classmethod
    def _assume_utc(cls, value: datetime | None) -> datetime | None:
        return as_utc(value) if value is not None else None

    @property
    def initial(self) -> str:
        """Upper-cased first letter used when no picture is set."""
        return self.display_name[:1].upper()


class DisplayNameUpdate(BaseModel):
    """Schema for renaming the current user."""

    display_name: str = Field(..., description="New display name")


class ProfileView(BaseModel):
    """Profile page view model: identity, hotness and the user's own posts."""

    user_id: str
    display_name: str
    profile_picture_url: str | None
    initial: str
    hotness: int
    post_count: int
    posts: list[PostCard]
