# src/hottakes/services/submission_guard.py
"""Client-side guard against duplicate rapid submissions."""
from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable, Hashable
from dataclasses import dataclass
from typing import TypeVar

from hottakes.core.errors import ThrottledError

__all__ = ["SubmissionGuard"]

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class _GuardState:
    in_flight: bool = False
    last_started: float | None = None


class SubmissionGuard:
    """Rejects re-entrant or too-frequent runs of one logical action.

    State is kept per key (typically the submitting user's id). A new attempt
    is refused while a previous one is still running, and for
    ``min_interval`` seconds after the previous accepted attempt started.
    Refused attempts never reach the backend.
    """

    def __init__(
        self,
        min_interval: float = 1.0,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.min_interval = min_interval
        self._clock = clock
        self._states: dict[Hashable, _GuardState] = {}

    def is_busy(self, key: Hashable) -> bool:
        state = self._states.get(key)
        return bool(state and state.in_flight)

    async def run(self, key: Hashable, action: Callable[[], Awaitable[T]]) -> T:
        """Run ``action`` unless the guard for ``key`` is closed.

        Raises:
            ThrottledError: If a previous attempt is in flight or too recent.
        """
        now = self._clock()
        self._prune(now)
        state = self._states.setdefault(key, _GuardState())
        if state.in_flight:
            logger.info("Submission for %s rejected: previous attempt still running", key)
            raise ThrottledError("Your previous submission is still being processed")
        if state.last_started is not None and now - state.last_started < self.min_interval:
            logger.info("Submission for %s rejected: too soon after the last one", key)
            raise ThrottledError("Please wait a moment before submitting again")

        state.in_flight = True
        state.last_started = now
        try:
            return await action()
        finally:
            state.in_flight = False

    def _prune(self, now: float) -> None:
        # Idle keys whose interval has passed behave exactly like unseen keys.
        stale = [
            key
            for key, state in self._states.items()
            if not state.in_flight
            and (state.last_started is None or now - state.last_started >= self.min_interval)
        ]
        for key in stale:
            del self._states[key]
