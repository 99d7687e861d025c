# src/hottakes/schemas/__init__.py
"""Pydantic schemas for the Hot Takes service."""

from .feed import FeedEntry
from .news import NewsCard, NewsItem
from .post import PostCard, PostCreate, PostRecord, PostUpdate
from .profile import DisplayNameUpdate, ProfileRecord, ProfileView
from .vote import VoteCreate, VoteOutcome, VoteRecord, VoteTally, VoteTransition, VoteType

__all__ = [
    "FeedEntry",
    "NewsCard", "NewsItem",
    "PostCard", "PostCreate", "PostRecord", "PostUpdate",
    "DisplayNameUpdate", "ProfileRecord", "ProfileView",
    "VoteCreate", "VoteOutcome", "VoteRecord", "VoteTally", "VoteTransition", "VoteType",
]
