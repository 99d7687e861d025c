# src/hottakes/core/errors.py
"""Error taxonomy shared by repositories, services and the HTTP layer."""

from __future__ import annotations

# Codes reported by the relational data service.
NO_ROWS = "PGRST116"
UNIQUE_VIOLATION = "23505"
INTEGRITY_VIOLATION = "23000"
UNKNOWN_PROCEDURE = "PGRST202"
UNDEFINED_TABLE = "42P01"
UNDEFINED_COLUMN = "42703"
INVALID_INPUT = "22P02"
MISSING_FILTER = "21000"
BACKEND_FAILURE = "XX000"
STORAGE_FAILURE = "STORAGE"


class HotTakesError(RuntimeError):
    """Base exception for all Hot Takes failures."""


class AuthenticationError(HotTakesError):
    """Raised when a bearer token cannot be verified."""


class ValidationError(HotTakesError):
    """Raised when user input is rejected (empty content, bad upload, ...)."""


class AuthorizationError(HotTakesError):
    """Raised when a user acts on a post they do not own.

    The message never distinguishes a missing post from a foreign one.
    """

    def __init__(self, message: str = "You are not allowed to modify this post") -> None:
        super().__init__(message)


class ThrottledError(HotTakesError):
    """Raised by the submission guard when an attempt comes too soon."""


class DataServiceError(HotTakesError):
    """Backend read/write failure carrying the backend's error code."""

    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message

    @property
    def is_not_found(self) -> bool:
        return self.code == NO_ROWS

    @property
    def is_unique_violation(self) -> bool:
        return self.code == UNIQUE_VIOLATION

    def __repr__(self) -> str:
        return f"DataServiceError(code={self.code!r}, message={self.message!r})"
