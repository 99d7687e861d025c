# src/hottakes/services/aggregator.py
"""Folding vote rows into per-post tallies and per-author hotness."""
from __future__ import annotations

from collections.abc import Iterable

from hottakes.schemas.vote import VoteRecord, VoteTally, VoteType

__all__ = ["VoteAggregator"]


class VoteAggregator:
    """Stateless vote aggregation.

    Callers recompute from the full vote set after every mutation; nothing
    here is cached or persisted. At most one row per (post, user) is assumed.
    """

    def compute(
        self,
        votes: Iterable[VoteRecord],
        viewer_id: str | None,
        post_ids: Iterable[int] = (),
    ) -> dict[int, VoteTally]:
        """Return a tally per post.

        Every id in ``post_ids`` is present in the result, with zero counts
        when it has no votes; posts that only appear in ``votes`` are included
        as well.
        """
        tallies = {post_id: VoteTally() for post_id in post_ids}
        for vote in votes:
            tally = tallies.setdefault(vote.post_id, VoteTally())
            if vote.like_type == VoteType.LIKE:
                tally.likes += 1
            else:
                tally.dislikes += 1
            if viewer_id is not None and vote.user_id == viewer_id:
                tally.viewer_vote = vote.like_type
        return tallies

    def hotness(self, votes: Iterable[VoteRecord]) -> int:
        """Count the likes in ``votes``; dislikes never subtract."""
        return sum(1 for vote in votes if vote.like_type == VoteType.LIKE)
