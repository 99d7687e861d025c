# src/hottakes/schemas/vote.py
"""Vote-related Pydantic schemas and the vote transition rule."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class VoteType(str, Enum):
    """Kinds of vote a user can cast on a post."""

    LIKE = "like"
    DISLIKE = "dislike"


def next_vote(previous: VoteType | None, requested: VoteType) -> VoteType | None:
    """Return the vote state after ``requested`` is applied to ``previous``.

    Repeating the current vote removes it; any other request replaces it.
    """
    if previous == requested:
        return None
    return requested


class VoteRecord(BaseModel):
    """A stored vote row."""

    post_id: int
    user_id: str
    like_type: VoteType

    model_config = ConfigDict(from_attributes=True)


class VoteTally(BaseModel):
    """Aggregate counts for one post as seen by one viewer."""

    likes: int = 0
    dislikes: int = 0
    viewer_vote: VoteType | None = None


class VoteTransition(BaseModel):
    """Outcome of casting a vote: the state before and after."""

    post_id: int
    previous: VoteType | None
    current: VoteType | None

    @property
    def action(self) -> str:
        """Name the storage operation the transition required."""
        if self.previous is None:
            return "inserted"
        if self.current is None:
            return "deleted"
        return "updated"


class VoteCreate(BaseModel):
    """Schema for casting a vote."""

    post_id: int
    type: VoteType = Field(..., description="'like' or 'dislike'")


class VoteOutcome(BaseModel):
    """Vote result returned by the API after the tally is re-read."""

    post_id: int
    previous: VoteType | None
    current: VoteType | None
    tally: VoteTally
