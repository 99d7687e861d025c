# src/hottakes/models/__init__.py
"""SQLAlchemy models for the Hot Takes service."""

from .post import Post
from .profile import Profile
from .vote import PostVote

__all__ = ["Post", "PostVote", "Profile"]
