# src/hottakes/api/v1/dependencies.py
"""Shared API dependencies for authentication and service access."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from hottakes.services.container import Services
from hottakes.services.identity import IdentitySession

# HTTP Bearer scheme for identity-provider tokens; the feed is readable without one.
bearer_scheme = HTTPBearer(auto_error=False)


def get_services(request: Request) -> Services:
    """Return the service container attached to the application."""
    return request.app.state.services


ServicesDep = Annotated[Services, Depends(get_services)]


def get_optional_viewer(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    services: ServicesDep,
) -> IdentitySession | None:
    """Resolve the caller's session, or None when no token was sent.

    Raises:
        HTTPException: If a token was sent but cannot be verified.
    """
    if credentials is None:
        return None
    session = services.identity.session_from_token(credentials.credentials)
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return session


OptionalViewerDep = Annotated[IdentitySession | None, Depends(get_optional_viewer)]


def get_current_viewer(viewer: OptionalViewerDep) -> IdentitySession:
    """Require an authenticated caller."""
    if viewer is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return viewer


CurrentViewerDep = Annotated[IdentitySession, Depends(get_current_viewer)]
