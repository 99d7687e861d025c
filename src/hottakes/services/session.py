# src/hottakes/services/session.py
"""Session-scoped client state.

A ``FeedSession`` belongs to one signed-in browser/app session. It holds the
rendered feed and rebuilds it from scratch after every mutation it issues and
whenever the identity changes; it never patches the cached feed in place.
"""
from __future__ import annotations

import inspect
import logging
from collections.abc import Callable

from hottakes.core.errors import AuthenticationError
from hottakes.schemas.feed import FeedEntry
from hottakes.schemas.post import PostRecord
from hottakes.schemas.profile import ProfileRecord, ProfileView
from hottakes.schemas.vote import VoteTransition, VoteType
from hottakes.services.container import Services
from hottakes.services.identity import IdentitySession, SessionHandler

__all__ = ["FeedSession"]

logger = logging.getLogger(__name__)


class FeedSession:
    """Client facade over the services for one viewer."""

    def __init__(self, services: Services) -> None:
        self.services = services
        self.entries: list[FeedEntry] = []
        self._handlers: list[SessionHandler] = []
        self._unsubscribe = services.identity.on_session_change(self._handle_session_change)

    @property
    def viewer(self) -> IdentitySession | None:
        return self.services.identity.get_current_session()

    def on_identity_change(self, handler: SessionHandler) -> Callable[[], None]:
        """Subscribe a UI-layer handler; it runs after the feed was rebuilt or cleared."""
        self._handlers.append(handler)

        def unsubscribe() -> None:
            if handler in self._handlers:
                self._handlers.remove(handler)

        return unsubscribe

    async def start(self) -> list[FeedEntry]:
        """Load the feed for whoever is signed in right now."""
        if self.viewer is None:
            self.entries = []
            return self.entries
        return await self.refresh()

    def close(self) -> None:
        self._unsubscribe()
        self._handlers.clear()

    async def refresh(self) -> list[FeedEntry]:
        """Rebuild the feed from the backend."""
        self.entries = await self.services.feed.compose_feed(
            self.viewer, limit=self.services.settings.feed_default_limit
        )
        return self.entries

    async def _handle_session_change(self, session: IdentitySession | None) -> None:
        if session is None:
            self.entries = []
        else:
            await self.refresh()
        for handler in list(self._handlers):
            result = handler(session)
            if inspect.isawaitable(result):
                await result

    def _require_viewer(self) -> IdentitySession:
        viewer = self.viewer
        if viewer is None:
            raise AuthenticationError("Sign in to continue")
        return viewer

    # --- mutations: each one is followed by a full refresh ------------------------------
    async def submit_post(self, content: str, *, anonymous: bool = False) -> PostRecord:
        """Create a post through the submission guard."""
        viewer = self._require_viewer()
        post = await self.services.guard.run(
            viewer.user_id,
            lambda: self.services.posts.create(
                content=content,
                is_anonymous=anonymous,
                author_id=viewer.user_id,
                author_email=viewer.email,
            ),
        )
        await self.refresh()
        return post

    async def vote(self, post_id: int, vote_type: VoteType) -> VoteTransition:
        viewer = self._require_viewer()
        transition = await self.services.votes.cast(post_id, viewer.user_id, vote_type)
        await self.refresh()
        return transition

    async def edit_post(self, post_id: int, content: str) -> PostRecord:
        viewer = self._require_viewer()
        post = await self.services.posts.update(post_id, content, viewer.user_id)
        await self.refresh()
        return post

    async def delete_post(self, post_id: int) -> None:
        viewer = self._require_viewer()
        await self.services.posts.delete(post_id, viewer.user_id)
        await self.refresh()

    async def rename(self, display_name: str) -> ProfileRecord:
        viewer = self._require_viewer()
        profile = await self.services.profiles.rename(
            viewer.user_id, display_name, fallback_email=viewer.email
        )
        await self.refresh()
        return profile

    async def set_picture(self, image_bytes: bytes, content_type: str) -> ProfileRecord:
        viewer = self._require_viewer()
        profile = await self.services.profiles.set_picture(
            viewer.user_id, image_bytes, content_type, fallback_email=viewer.email
        )
        await self.refresh()
        return profile

    async def profile(self) -> ProfileView:
        """Return the signed-in user's profile page."""
        return await self.services.feed.compose_profile(self._require_viewer())
