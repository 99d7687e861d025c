# src/hottakes/services/feed.py
"""Feed composition: posts, vote tallies and news filler in render order."""
from __future__ import annotations

import logging
from collections.abc import Sequence

from hottakes.repositories.post_repo import PostRepository
from hottakes.repositories.profile_repo import ProfileRepository
from hottakes.repositories.vote_ledger import VoteLedger
from hottakes.schemas.feed import FeedEntry
from hottakes.schemas.news import NewsCard, NewsItem
from hottakes.schemas.post import PostCard, PostRecord
from hottakes.schemas.profile import ProfileView
from hottakes.schemas.vote import VoteTally
from hottakes.services.aggregator import VoteAggregator
from hottakes.services.identity import IdentitySession
from hottakes.services.news import NewsSource

__all__ = ["FeedComposer", "interleave"]

logger = logging.getLogger(__name__)


def interleave(
    cards: Sequence[PostCard], filler: Sequence[NewsItem], every: int = 3
) -> list[FeedEntry]:
    """Insert one filler entry after every ``every`` posts.

    No filler follows the final group, and filler stops once ``filler`` runs
    out. Post order is left untouched.
    """
    entries: list[FeedEntry] = []
    remaining = list(filler)
    for index, card in enumerate(cards, start=1):
        entries.append(card)
        if every > 0 and index % every == 0 and index < len(cards) and remaining:
            entries.append(NewsCard.from_item(remaining.pop(0)))
    return entries


class FeedComposer:
    """Orchestrates repositories and the aggregator into view models."""

    def __init__(
        self,
        posts: PostRepository,
        votes: VoteLedger,
        profiles: ProfileRepository,
        aggregator: VoteAggregator,
        news: NewsSource | None = None,
        *,
        filler_every: int = 3,
    ) -> None:
        self.posts = posts
        self.votes = votes
        self.profiles = profiles
        self.aggregator = aggregator
        self.news = news
        self.filler_every = filler_every

    async def tallies(
        self, posts: Sequence[PostRecord], viewer_id: str | None
    ) -> dict[int, VoteTally]:
        """Re-read the votes of ``posts`` and aggregate them for a viewer."""
        post_ids = [post.id for post in posts]
        votes = await self.votes.list_for_posts(post_ids)
        return self.aggregator.compute(votes, viewer_id, post_ids)

    @staticmethod
    def can_edit(post: PostRecord, viewer_id: str | None) -> bool:
        """Outside the profile page only the owner of a named post may edit it."""
        return not post.is_anonymous and post.author_id == viewer_id

    def card(self, post: PostRecord, tally: VoteTally, viewer_id: str | None) -> PostCard:
        return PostCard.build(post, tally, can_edit=self.can_edit(post, viewer_id))

    async def cards(self, posts: Sequence[PostRecord], viewer_id: str | None) -> list[PostCard]:
        """Cards for ``posts`` with freshly aggregated tallies."""
        tallies = await self.tallies(posts, viewer_id)
        return [self.card(post, tallies[post.id], viewer_id) for post in posts]

    async def compose_feed(
        self,
        viewer: IdentitySession | None,
        *,
        limit: int | None = None,
        before: int | None = None,
    ) -> list[FeedEntry]:
        """Return the feed for ``viewer`` (None when signed out).

        Anonymous posts are never editable from the feed, even by their owner.
        """
        posts = await self.posts.list_recent(limit=limit, before=before)
        viewer_id = viewer.user_id if viewer else None
        tallies = await self.tallies(posts, viewer_id)
        if viewer is not None:
            # The viewer needs a profile before they can author a post.
            await self.profiles.get_or_create(viewer.user_id, viewer.email)

        cards = [self.card(post, tallies[post.id], viewer_id) for post in posts]
        filler = await self._fetch_news()
        return interleave(cards, filler, self.filler_every)

    async def compose_profile(self, viewer: IdentitySession) -> ProfileView:
        """Return the profile page for the signed-in user.

        Lists all of the user's posts, anonymous ones included; the owner may
        edit every one of them here.
        """
        profile = await self.profiles.get_or_create(viewer.user_id, viewer.email)
        posts = await self.posts.list_by_author(viewer.user_id)
        post_ids = [post.id for post in posts]
        votes = await self.votes.list_for_posts(post_ids)
        tallies = self.aggregator.compute(votes, viewer.user_id, post_ids)
        return ProfileView(
            user_id=profile.user_id,
            display_name=profile.display_name,
            profile_picture_url=profile.profile_picture_url,
            initial=profile.initial,
            hotness=self.aggregator.hotness(votes),
            post_count=len(posts),
            posts=[PostCard.build(post, tallies[post.id], can_edit=True) for post in posts],
        )

    async def tally_for(self, post_id: int, viewer_id: str | None) -> VoteTally:
        """Re-read one post's votes and aggregate them."""
        votes = await self.votes.list_for_posts([post_id])
        return self.aggregator.compute(votes, viewer_id, [post_id])[post_id]

    async def hotness(self, user_id: str) -> int:
        """Total likes received across every post the user authored."""
        posts = await self.posts.list_by_author(user_id)
        votes = await self.votes.list_for_posts(post.id for post in posts)
        return self.aggregator.hotness(votes)

    async def _fetch_news(self) -> list[NewsItem]:
        if self.news is None:
            return []
        try:
            return await self.news.fetch_items()
        except Exception:  # noqa: BLE001
            logger.warning("News source failed; composing feed without filler", exc_info=True)
            return []
