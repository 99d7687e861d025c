# src/hottakes/services/container.py
"""Service wiring.

All collaborators are constructed once per process (or per test) and passed
explicitly to whatever needs them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from hottakes.core.settings import Settings
from hottakes.db.data_service import DataService, SqlDataService
from hottakes.db.session import create_engine_for
from hottakes.repositories.post_repo import PostRepository
from hottakes.repositories.profile_repo import ProfileRepository
from hottakes.repositories.vote_ledger import VoteLedger
from hottakes.services.aggregator import VoteAggregator
from hottakes.services.blob_store import BlobStore, FileSystemBlobStore
from hottakes.services.feed import FeedComposer
from hottakes.services.identity import TokenIdentityProvider
from hottakes.services.news import NewsClient, NewsSource
from hottakes.services.submission_guard import SubmissionGuard

__all__ = ["Services", "build_services"]

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """Every collaborator the API and client sessions need."""

    settings: Settings
    data: DataService
    blobs: BlobStore
    identity: TokenIdentityProvider
    news: NewsSource | None
    votes: VoteLedger
    profiles: ProfileRepository
    posts: PostRepository
    aggregator: VoteAggregator
    feed: FeedComposer
    guard: SubmissionGuard

    async def close(self) -> None:
        """Release network and database resources."""
        if self.news is not None:
            await self.news.aclose()
        await self.data.close()


def build_services(
    settings: Settings,
    *,
    data: DataService | None = None,
    blobs: BlobStore | None = None,
    identity: TokenIdentityProvider | None = None,
    news: NewsSource | None = None,
    guard: SubmissionGuard | None = None,
) -> Services:
    """Construct the service graph, using real backends for anything not supplied."""
    if data is None:
        data = SqlDataService(create_engine_for(settings.database_url, echo=settings.sql_debug))
    if blobs is None:
        blobs = FileSystemBlobStore(settings.media_root, settings.media_url_prefix)
    if identity is None:
        identity = TokenIdentityProvider(
            settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            audience=settings.jwt_audience,
        )
    if news is None and settings.news_enabled:
        news = NewsClient(
            settings.news_feed_url,
            limit=settings.news_item_limit,
            description_length=settings.news_description_length,
            timeout_seconds=settings.news_timeout_seconds,
        )
    if guard is None:
        guard = SubmissionGuard(settings.submission_min_interval_seconds)

    votes = VoteLedger(data)
    profiles = ProfileRepository(
        data,
        blobs,
        bucket=settings.profile_picture_bucket,
        max_picture_bytes=settings.profile_picture_max_bytes,
        picture_types=settings.profile_picture_types,
        display_name_max_length=settings.display_name_max_length,
    )
    posts = PostRepository(data, profiles)
    aggregator = VoteAggregator()
    feed = FeedComposer(
        posts,
        votes,
        profiles,
        aggregator,
        news,
        filler_every=settings.feed_filler_every,
    )
    logger.debug("Services built (news=%s)", "on" if news else "off")
    return Services(
        settings=settings,
        data=data,
        blobs=blobs,
        identity=identity,
        news=news,
        votes=votes,
        profiles=profiles,
        posts=posts,
        aggregator=aggregator,
        feed=feed,
        guard=guard,
    )
