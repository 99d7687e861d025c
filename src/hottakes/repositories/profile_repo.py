# src/hottakes/repositories/profile_repo.py
"""Data access helpers for user profiles and their fan-out onto posts."""
from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from hottakes.core.errors import DataServiceError, ValidationError
from hottakes.db.data_service import DataService, eq
from hottakes.db.time import utcnow
from hottakes.models import Post, Profile
from hottakes.schemas.profile import ProfileRecord
from hottakes.services.blob_store import BlobStore

__all__ = ["ProfileRepository", "local_part"]

logger = logging.getLogger(__name__)

PROFILES = Profile.__tablename__
POSTS = Post.__tablename__
DEFAULT_DISPLAY_NAME = "user"
PICTURE_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
}


def local_part(email: str | None) -> str:
    """Return the part of an email address before ``@``."""
    return (email or "").partition("@")[0].strip() or DEFAULT_DISPLAY_NAME


class ProfileRepository:
    """CRUD over profiles.

    Profiles are created lazily on first read. Renames and picture changes
    are written to the profile first; copying them onto the author's existing
    posts is best effort and never fails the primary operation.
    """

    def __init__(
        self,
        data: DataService,
        blobs: BlobStore,
        *,
        bucket: str = "DPs",
        max_picture_bytes: int = 5 * 1024 * 1024,
        picture_types: Iterable[str] = tuple(PICTURE_EXTENSIONS),
        display_name_max_length: int = 100,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.data = data
        self.blobs = blobs
        self.bucket = bucket
        self.max_picture_bytes = max_picture_bytes
        self.picture_types = frozenset(t.lower() for t in picture_types)
        self.display_name_max_length = display_name_max_length
        self._clock = clock

    async def get(self, user_id: str) -> ProfileRecord | None:
        """Return a profile, or None if the user has none yet."""
        try:
            row = await self.data.select_one(PROFILES, filters=[eq("user_id", user_id)])
        except DataServiceError as exc:
            if exc.is_not_found:
                return None
            raise
        return ProfileRecord.model_validate(row)

    async def get_or_create(self, user_id: str, fallback_email: str | None) -> ProfileRecord:
        """Return the user's profile, creating a default one on first access.

        The default display name is the local part of ``fallback_email``. When
        a concurrent caller creates the row first, the unique key rejects our
        insert and the winner's row is returned instead.
        """
        profile = await self.get(user_id)
        if profile is not None:
            return profile

        try:
            rows = await self.data.insert(
                PROFILES,
                [{"user_id": user_id, "display_name": local_part(fallback_email)}],
            )
        except DataServiceError as exc:
            if not exc.is_unique_violation:
                raise
            logger.info("Profile for %s was created concurrently; re-reading", user_id)
            return await self._require(user_id)

        logger.info("Created default profile for %s", user_id)
        return ProfileRecord.model_validate(rows[0])

    async def rename(
        self, user_id: str, new_display_name: str, *, fallback_email: str | None = None
    ) -> ProfileRecord:
        """Change the display name and copy it onto the user's non-anonymous posts."""
        name = new_display_name.strip()
        if not name:
            raise ValidationError("Display name cannot be empty")
        if len(name) > self.display_name_max_length:
            raise ValidationError(
                f"Display name must be at most {self.display_name_max_length} characters"
            )

        profile = await self._upsert(user_id, {"display_name": name}, fallback_email)
        await self._fan_out(user_id, {"author_display_name": name})
        return profile

    async def set_picture(
        self,
        user_id: str,
        image_bytes: bytes,
        content_type: str,
        *,
        fallback_email: str | None = None,
    ) -> ProfileRecord:
        """Store a new profile picture and point the profile (and posts) at it.

        Raises:
            ValidationError: If the type is not an allowed image type or the
                file exceeds the size limit. Nothing is uploaded in that case.
        """
        media_type = content_type.split(";")[0].strip().lower()
        if media_type not in self.picture_types:
            raise ValidationError("Please select a valid image file (JPEG, PNG, GIF, or WebP)")
        if len(image_bytes) > self.max_picture_bytes:
            limit_mb = round(self.max_picture_bytes / (1024 * 1024))
            raise ValidationError(f"File size must be less than {limit_mb}MB")
        if not image_bytes:
            raise ValidationError("Image file is empty")

        extension = PICTURE_EXTENSIONS.get(media_type, media_type.rpartition("/")[2])
        stamp = int(self._clock() * 1000)
        path = f"{user_id}/{user_id}_{stamp}.{extension}"
        await self.blobs.upload(
            self.bucket, path, image_bytes, content_type=media_type, overwrite=True
        )
        url = self.blobs.get_public_url(self.bucket, path)

        profile = await self._upsert(user_id, {"profile_picture_url": url}, fallback_email)
        await self._fan_out(user_id, {"author_profile_picture_url": url})
        return profile

    async def _require(self, user_id: str) -> ProfileRecord:
        row = await self.data.select_one(PROFILES, filters=[eq("user_id", user_id)])
        return ProfileRecord.model_validate(row)

    async def _upsert(
        self, user_id: str, patch: Mapping[str, Any], fallback_email: str | None
    ) -> ProfileRecord:
        values = {**patch, "updated_at": utcnow()}
        changed = await self.data.update(PROFILES, values, filters=[eq("user_id", user_id)])
        if not changed:
            row = {"user_id": user_id, "display_name": local_part(fallback_email), **patch}
            try:
                await self.data.insert(PROFILES, [row])
            except DataServiceError as exc:
                if not exc.is_unique_violation:
                    raise
                await self.data.update(PROFILES, values, filters=[eq("user_id", user_id)])
        return await self._require(user_id)

    async def _fan_out(self, user_id: str, patch: Mapping[str, Any]) -> int | None:
        """Rewrite the author snapshot on the user's non-anonymous posts."""
        try:
            count = await self.data.update(
                POSTS, patch, filters=[eq("author_id", user_id), eq("is_anonymous", False)]
            )
        except DataServiceError as exc:
            logger.warning(
                "Could not propagate %s to posts by %s: %s", ", ".join(patch), user_id, exc
            )
            return None
        logger.debug("Propagated %s to %d posts by %s", ", ".join(patch), count, user_id)
        return count
