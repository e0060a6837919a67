"""
event_bus.py — Session lifecycle notifications.
Any number of subscribers can listen for finished sessions (dashboard cache
invalidation, history refresh, ...) without replacing one another.
"""

import logging
from typing import Callable

from pydantic import BaseModel

logger = logging.getLogger(__name__)


class SessionFinished(BaseModel):
    user_id: str
    session_id: str | None = None
    duration_seconds: int
    resumed: bool = False


class SessionEvents:
    """Publish/subscribe channel for SessionFinished events."""

    def __init__(self):
        self._subscribers: list[Callable[[SessionFinished], None]] = []

    def subscribe(self, callback: Callable[[SessionFinished], None]) -> Callable[[], None]:
        """Register a callback; returns a function that unsubscribes it."""
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def publish(self, event: SessionFinished):
        # A failing subscriber must not stop the others or the caller's finish()
        for callback in list(self._subscribers):
            try:
                callback(event)
            except Exception:
                logger.exception(f"Session event subscriber {callback!r} failed")

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)
