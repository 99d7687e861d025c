# src/hottakes/services/__init__.py
"""Business logic services for the Hot Takes application."""

from .aggregator import VoteAggregator
from .blob_store import BlobStore, FileSystemBlobStore
from .identity import IdentityProvider, IdentitySession, TokenIdentityProvider
from .news import NewsClient, NewsSource
from .submission_guard import SubmissionGuard

__all__ = [
    "BlobStore",
    "FileSystemBlobStore",
    "IdentityProvider",
    "IdentitySession",
    "NewsClient",
    "NewsSource",
    "SubmissionGuard",
    "TokenIdentityProvider",
    "VoteAggregator",
]
