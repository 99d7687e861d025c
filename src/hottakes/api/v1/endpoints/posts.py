# src/hottakes/api/v1/endpoints/posts.py
"""Post-related endpoints for the Hot Takes API."""

from fastapi import APIRouter, HTTPException, Query, Response, status

from hottakes.api.v1.dependencies import CurrentViewerDep, OptionalViewerDep, ServicesDep
from hottakes.schemas.post import PostCard, PostCreate, PostUpdate
from hottakes.schemas.vote import VoteTally

router = APIRouter(prefix="/posts", tags=["posts"])


@router.get("", response_model=list[PostCard])
async def list_posts(
    services: ServicesDep,
    viewer: OptionalViewerDep,
    limit: int = Query(50, ge=1, le=100, description="Maximum number of posts to return"),
    before: int | None = Query(None, description="Return posts older than this post id"),
) -> list[PostCard]:
    """List posts newest first, without news filler."""
    posts = await services.posts.list_recent(limit=limit, before=before)
    return await services.feed.cards(posts, viewer.user_id if viewer else None)


@router.get("/{post_id}", response_model=PostCard)
async def get_post(post_id: int, services: ServicesDep, viewer: OptionalViewerDep) -> PostCard:
    """Get a single post with its tally."""
    post = await services.posts.get(post_id)
    if post is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")
    viewer_id = viewer.user_id if viewer else None
    tally = await services.feed.tally_for(post_id, viewer_id)
    return services.feed.card(post, tally, viewer_id)


@router.post("", response_model=PostCard, status_code=status.HTTP_201_CREATED)
async def create_post(
    post_data: PostCreate,
    services: ServicesDep,
    viewer: CurrentViewerDep,
) -> PostCard:
    """Create a post; rapid repeat submissions are refused with 429."""
    post = await services.guard.run(
        viewer.user_id,
        lambda: services.posts.create(
            content=post_data.content,
            is_anonymous=post_data.is_anonymous,
            author_id=viewer.user_id,
            author_email=viewer.email,
        ),
    )
    return services.feed.card(post, VoteTally(), viewer.user_id)


@router.patch("/{post_id}", response_model=PostCard)
async def update_post(
    post_id: int,
    post_data: PostUpdate,
    services: ServicesDep,
    viewer: CurrentViewerDep,
) -> PostCard:
    """Edit a post the caller owns."""
    post = await services.posts.update(post_id, post_data.content, viewer.user_id)
    tally = await services.feed.tally_for(post_id, viewer.user_id)
    return services.feed.card(post, tally, viewer.user_id)


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_post(post_id: int, services: ServicesDep, viewer: CurrentViewerDep) -> Response:
    """Delete a post the caller owns."""
    await services.posts.delete(post_id, viewer.user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
