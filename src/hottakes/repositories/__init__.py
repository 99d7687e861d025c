# src/hottakes/repositories/__init__.py
"""Data access layer over the relational data service."""

from .post_repo import PostRepository
from .profile_repo import ProfileRepository
from .vote_ledger import VoteLedger

__all__ = ["PostRepository", "ProfileRepository", "VoteLedger"]
