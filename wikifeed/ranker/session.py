"""In-memory window of recently viewed categories."""

from collections import deque
from datetime import datetime, timedelta

from wikifeed.data_model import Clock, utc_now


class SessionWindow:
    """Recent categories of the current reading session.

    The window restarts when it is touched after ``inactivity`` without any
    activity. Nothing here is persisted.
    """

    def __init__(
        self,
        size: int = 20,
        inactivity: timedelta = timedelta(minutes=30),
        clock: Clock = utc_now,
    ) -> None:
        """Initialize the window.

        Args:
            size: Number of categories remembered.
            inactivity: Idle gap after which the session restarts.
            clock: Source of the current time.
        """
        self._inactivity = inactivity
        self._clock = clock
        self._categories: deque[str] = deque(maxlen=size)
        self._started_at = clock()
        self._last_activity = self._started_at

    @property
    def started_at(self) -> datetime:
        """Get the session start time."""
        self._expire_if_idle()
        return self._started_at

    def push(self, category: str) -> None:
        """Record a viewed category.

        Args:
            category: Category key of the viewed article.
        """
        self._expire_if_idle()
        self._categories.append(category)
        self._last_activity = self._clock()

    def recent(self, n: int) -> list[str]:
        """Get up to ``n`` most recent categories, oldest first."""
        self._expire_if_idle()
        if n <= 0:
            return []
        return list(self._categories)[-n:]

    def reset(self) -> None:
        """Start a new session."""
        self._categories.clear()
        self._started_at = self._clock()
        self._last_activity = self._started_at

    def _expire_if_idle(self) -> None:
        if self._clock() - self._last_activity > self._inactivity:
            self.reset()

    def __len__(self) -> int:
        self._expire_if_idle()
        return len(self._categories)
