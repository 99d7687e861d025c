# src/hottakes/api/v1/endpoints/feed.py
"""Feed endpoint for the Hot Takes API."""

from fastapi import APIRouter, Query

from hottakes.api.v1.dependencies import OptionalViewerDep, ServicesDep
from hottakes.schemas.feed import FeedEntry

router = APIRouter(prefix="/feed", tags=["feed"])


@router.get("", response_model=list[FeedEntry])
async def get_feed(
    services: ServicesDep,
    viewer: OptionalViewerDep,
    limit: int | None = Query(None, ge=1, le=100, description="Maximum number of posts"),
    before: int | None = Query(None, description="Return posts older than this post id"),
) -> list[FeedEntry]:
    """Return posts newest first with vote tallies, interleaved with news filler."""
    return await services.feed.compose_feed(
        viewer,
        limit=limit or services.settings.feed_default_limit,
        before=before,
    )
