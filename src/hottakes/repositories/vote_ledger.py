# src/hottakes/repositories/vote_ledger.py
"""Read/write access to individual vote rows."""
from __future__ import annotations

from collections.abc import Iterable

from hottakes.core.errors import DataServiceError
from hottakes.db.data_service import DataService, eq, in_
from hottakes.models import PostVote
from hottakes.schemas.vote import VoteRecord, VoteTransition, VoteType

__all__ = ["VoteLedger"]

VOTES = PostVote.__tablename__


class VoteLedger:
    """Thin wrapper around vote rows; performs no aggregation."""

    def __init__(self, data: DataService) -> None:
        self.data = data

    async def get(self, post_id: int, user_id: str) -> VoteRecord | None:
        """Return the user's vote on a post, if any."""
        try:
            row = await self.data.select_one(
                VOTES, filters=[eq("post_id", post_id), eq("user_id", user_id)]
            )
        except DataServiceError as exc:
            if exc.is_not_found:
                return None
            raise
        return VoteRecord.model_validate(row)

    async def list_for_posts(self, post_ids: Iterable[int]) -> list[VoteRecord]:
        """Return every vote cast on the given posts."""
        ids = list(dict.fromkeys(post_ids))
        if not ids:
            return []
        rows = await self.data.select(VOTES, filters=[in_("post_id", ids)])
        return [VoteRecord.model_validate(row) for row in rows]

    async def cast(self, post_id: int, user_id: str, vote_type: VoteType) -> VoteTransition:
        """Apply a like/dislike action.

        Each step is one conditional statement in the backend, so concurrent
        casts behave as some serial order: repeating the current vote deletes
        the row, the opposite vote flips its type in place, and a first vote
        inserts a row.
        """
        result = await self.data.rpc(
            "toggle_vote",
            {"post_id": post_id, "user_id": user_id, "like_type": VoteType(vote_type).value},
        )
        return VoteTransition.model_validate(result)
