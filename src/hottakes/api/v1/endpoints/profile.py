# src/hottakes/api/v1/endpoints/profile.py
"""Profile endpoints for the signed-in user."""

from fastapi import APIRouter, Request

from hottakes.api.v1.dependencies import CurrentViewerDep, ServicesDep
from hottakes.schemas.profile import DisplayNameUpdate, ProfileRecord, ProfileView

router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("/me", response_model=ProfileView)
async def get_my_profile(services: ServicesDep, viewer: CurrentViewerDep) -> ProfileView:
    """Return the caller's profile, hotness score and posts.

    The profile is created with default values on first access.
    """
    return await services.feed.compose_profile(viewer)


@router.put("/me/display-name", response_model=ProfileRecord)
async def rename(
    update: DisplayNameUpdate,
    services: ServicesDep,
    viewer: CurrentViewerDep,
) -> ProfileRecord:
    """Change the caller's display name and update their existing posts."""
    return await services.profiles.rename(
        viewer.user_id, update.display_name, fallback_email=viewer.email
    )


@router.put("/me/picture", response_model=ProfileRecord)
async def set_picture(
    request: Request,
    services: ServicesDep,
    viewer: CurrentViewerDep,
) -> ProfileRecord:
    """Upload a profile picture sent as the raw request body."""
    data = await request.body()
    content_type = request.headers.get("content-type", "")
    return await services.profiles.set_picture(
        viewer.user_id, data, content_type, fallback_email=viewer.email
    )
