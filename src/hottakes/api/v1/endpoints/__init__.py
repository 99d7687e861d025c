# src/hottakes/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .feed import router as feed_router
from .posts import router as posts_router
from .profile import router as profile_router
from .votes import router as votes_router

__all__ = ["feed_router", "posts_router", "profile_router", "votes_router"]
