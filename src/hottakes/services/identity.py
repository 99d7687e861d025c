# src/hottakes/services/identity.py
"""Identity provider adapter.

Sessions come from JWTs issued by the hosted identity service (``sub`` is the
user id, ``email`` the account email). The provider keeps the current
session for in-process clients and notifies subscribers when it changes.
"""

from __future__ import annotations

import inspect
import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from jose import JWTError, jwt

from hottakes.core.errors import AuthenticationError

__all__ = ["IdentityProvider", "IdentitySession", "SessionHandler", "TokenIdentityProvider"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IdentitySession:
    """The signed-in account."""

    user_id: str
    email: str | None = None


SessionHandler = Callable[[IdentitySession | None], Awaitable[None] | None]


class IdentityProvider(ABC):
    """Contract of the external identity provider."""

    @abstractmethod
    def get_current_session(self) -> IdentitySession | None:
        """Return the current session, or None when signed out."""

    @abstractmethod
    def on_session_change(self, handler: SessionHandler) -> Callable[[], None]:
        """Subscribe to sign-in/sign-out; returns an unsubscribe callable."""


class TokenIdentityProvider(IdentityProvider):
    """Verifies identity-provider JWTs with ``python-jose``."""

    def __init__(
        self,
        secret: str,
        *,
        algorithm: str = "HS256",
        audience: str | None = None,
    ) -> None:
        self._secret = secret
        self._algorithm = algorithm
        self._audience = audience
        self._current: IdentitySession | None = None
        self._handlers: list[SessionHandler] = []

    def session_from_token(self, token: str) -> IdentitySession | None:
        """Decode a bearer token into a session, or None if it is not valid."""
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                audience=self._audience,
                options={"verify_aud": self._audience is not None},
            )
        except JWTError as exc:
            logger.debug("Rejected identity token: %s", exc)
            return None

        subject = payload.get("sub")
        if not subject:
            return None
        email = payload.get("email")
        return IdentitySession(user_id=str(subject), email=str(email) if email else None)

    def get_current_session(self) -> IdentitySession | None:
        return self._current

    def on_session_change(self, handler: SessionHandler) -> Callable[[], None]:
        self._handlers.append(handler)

        def unsubscribe() -> None:
            if handler in self._handlers:
                self._handlers.remove(handler)

        return unsubscribe

    async def sign_in(self, token: str) -> IdentitySession:
        """Adopt the session carried by ``token`` and notify subscribers.

        Raises:
            AuthenticationError: If the token is invalid or expired.
        """
        session = self.session_from_token(token)
        if session is None:
            raise AuthenticationError("Could not validate credentials")
        await self._set(session)
        return session

    async def sign_out(self) -> None:
        """Forget the current session and notify subscribers."""
        await self._set(None)

    async def _set(self, session: IdentitySession | None) -> None:
        if session == self._current:
            return
        self._current = session
        logger.info("Identity changed: %s", session.user_id if session else "signed out")
        for handler in list(self._handlers):
            result = handler(session)
            if inspect.isawaitable(result):
                await result
