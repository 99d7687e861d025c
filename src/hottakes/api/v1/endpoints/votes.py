# src/hottakes/api/v1/endpoints/votes.py
"""Vote-related endpoints for the Hot Takes API."""

from fastapi import APIRouter

from hottakes.api.v1.dependencies import CurrentViewerDep, ServicesDep
from hottakes.schemas.vote import VoteCreate, VoteOutcome

router = APIRouter(prefix="/votes", tags=["votes"])


@router.post("", response_model=VoteOutcome)
async def cast_vote(
    vote_data: VoteCreate,
    services: ServicesDep,
    viewer: CurrentViewerDep,
) -> VoteOutcome:
    """Like or dislike a post; repeating the same vote removes it."""
    transition = await services.votes.cast(vote_data.post_id, viewer.user_id, vote_data.type)
    tally = await services.feed.tally_for(vote_data.post_id, viewer.user_id)
    return VoteOutcome(
        post_id=transition.post_id,
        previous=transition.previous,
        current=transition.current,
        tally=tally,
    )


@router.get("/{post_id}/mine")
async def get_my_vote(
    post_id: int,
    services: ServicesDep,
    viewer: CurrentViewerDep,
) -> dict[str, str | None]:
    """Get the current user's vote on a specific post."""
    vote = await services.votes.get(post_id, viewer.user_id)
    return {"type": vote.like_type.value if vote else None}
