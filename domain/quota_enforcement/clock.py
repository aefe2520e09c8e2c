"""
Clock abstraction so evaluations can be pinned to a known instant.
"""

import threading
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Optional


class IClock(ABC):
    """Source of the current instant."""

    @abstractmethod
    def now(self) -> datetime:
        ...


class SystemClock(IClock):
    """Wall clock in timezone-aware UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock(IClock):
    """
    Manually driven clock for tests and replays.

    Thread-safe; ``advance`` moves time forward by a delta.
    """

    def __init__(self, instant: Optional[datetime] = None):
        self._instant = instant or datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)
        self._lock = threading.Lock()

    def now(self) -> datetime:
        with self._lock:
            return self._instant

    def set(self, instant: datetime) -> None:
        with self._lock:
            self._instant = instant

    def advance(self, delta: timedelta) -> datetime:
        with self._lock:
            self._instant = self._instant + delta
            return self._instant
