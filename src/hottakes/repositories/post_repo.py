# src/hottakes/repositories/post_repo.py
"""Data access helpers for working with posts."""
from __future__ import annotations

import logging

from hottakes.core.errors import AuthorizationError, DataServiceError, ValidationError
from hottakes.db.data_service import DataService, Order, all_of, any_of, eq, lt
from hottakes.db.time import utcnow
from hottakes.models import Post
from hottakes.repositories.profile_repo import ProfileRepository
from hottakes.schemas.post import PostRecord

__all__ = ["PostRepository"]

logger = logging.getLogger(__name__)

POSTS = Post.__tablename__
NEWEST_FIRST = (Order("created_at", descending=True), Order("id", descending=True))


class PostRepository:
    """CRUD over posts.

    Posts carry a snapshot of their author's display name and picture taken
    at creation time. Aggregates are never computed here.
    """

    def __init__(self, data: DataService, profiles: ProfileRepository) -> None:
        self.data = data
        self.profiles = profiles

    async def get(self, post_id: int) -> PostRecord | None:
        """Return a post by identifier."""
        try:
            row = await self.data.select_one(POSTS, filters=[eq("id", post_id)])
        except DataServiceError as exc:
            if exc.is_not_found:
                return None
            raise
        return PostRecord.model_validate(row)

    async def create(
        self,
        *,
        content: str,
        is_anonymous: bool,
        author_id: str,
        author_email: str | None = None,
    ) -> PostRecord:
        """Insert a new post and return it as stored.

        Args:
            content: Raw text; the first line becomes the title.
            is_anonymous: Hide the author's identity on this post forever.
            author_id: Identity provider user id of the author.
            author_email: Used to bootstrap the author's profile if missing.

        Raises:
            ValidationError: If the content is blank.
        """
        text = content.strip()
        if not text:
            raise ValidationError("Please enter your hot take!")

        display_name: str | None = None
        picture_url: str | None = None
        if not is_anonymous:
            profile = await self.profiles.get_or_create(author_id, author_email)
            display_name = profile.display_name
            picture_url = profile.profile_picture_url

        rows = await self.data.insert(
            POSTS,
            [
                {
                    "content": text,
                    "author_id": author_id,
                    "is_anonymous": is_anonymous,
                    "author_display_name": display_name,
                    "author_profile_picture_url": picture_url,
                }
            ],
        )
        post = PostRecord.model_validate(rows[0])
        logger.info("Post %s created (anonymous=%s)", post.id, is_anonymous)
        return post

    async def list_recent(
        self, limit: int | None = None, before: int | None = None
    ) -> list[PostRecord]:
        """Return posts newest first.

        Args:
            limit: Maximum number of posts to return.
            before: Id of the last post already seen; only older posts are returned.

        Raises:
            ValidationError: If ``before`` does not name an existing post.
        """
        filters = []
        if before is not None:
            cursor = await self.get(before)
            if cursor is None:
                raise ValidationError("Unknown feed cursor")
            filters.append(
                any_of(
                    lt("created_at", cursor.created_at),
                    all_of(eq("created_at", cursor.created_at), lt("id", cursor.id)),
                )
            )
        rows = await self.data.select(POSTS, filters=filters, order=NEWEST_FIRST, limit=limit)
        return [PostRecord.model_validate(row) for row in rows]

    async def list_by_author(self, author_id: str) -> list[PostRecord]:
        """Return every post by one author, newest first, anonymous ones included."""
        rows = await self.data.select(
            POSTS, filters=[eq("author_id", author_id)], order=NEWEST_FIRST
        )
        return [PostRecord.model_validate(row) for row in rows]

    async def update(self, post_id: int, new_content: str, requesting_user_id: str) -> PostRecord:
        """Replace a post's content on behalf of its owner."""
        text = new_content.strip()
        if not text:
            raise ValidationError("Post content cannot be empty")

        await self._owned(post_id, requesting_user_id)
        changed = await self.data.update(
            POSTS,
            {"content": text, "updated_at": utcnow()},
            filters=[eq("id", post_id), eq("author_id", requesting_user_id)],
        )
        updated = await self.get(post_id) if changed else None
        if updated is None:
            raise AuthorizationError()
        return updated

    async def delete(self, post_id: int, requesting_user_id: str) -> None:
        """Delete a post (and, by cascade, its votes) on behalf of its owner."""
        await self._owned(post_id, requesting_user_id)
        removed = await self.data.delete(
            POSTS, filters=[eq("id", post_id), eq("author_id", requesting_user_id)]
        )
        if not removed:
            raise AuthorizationError()
        logger.info("Post %s deleted", post_id)

    async def _owned(self, post_id: int, requesting_user_id: str) -> PostRecord:
        # Missing and foreign posts are rejected identically.
        post = await self.get(post_id)
        if post is None or post.author_id != requesting_user_id:
            raise AuthorizationError()
        return post
