"""
In-Memory Activity Repository

Process-local implementation of IActivityRepository for development
and tests. Not shared between workers.
"""

import logging
import threading
from datetime import datetime
from typing import List, Optional

from domain.quota_enforcement.normalization import fold_case
from domain.quota_enforcement.repositories import IActivityRepository
from domain.quota_enforcement.value_objects import ActionKind, ActivityEvent, TimeWindow

logger = logging.getLogger(__name__)


class InMemoryActivityRepository(IActivityRepository):
    """Thread-safe list-backed activity store."""

    def __init__(self):
        self._events: List[ActivityEvent] = []
        self._lock = threading.Lock()

    def count(
        self,
        action_kind: ActionKind,
        user_id: str,
        window: TimeWindow,
        scope: Optional[str] = None,
        content_equals: Optional[str] = None,
    ) -> int:
        user_key = fold_case(user_id.strip())
        scope_key = fold_case(scope) if scope else None
        content_key = fold_case(content_equals) if content_equals else None

        with self._lock:
            snapshot = list(self._events)

        return sum(
            1
            for event in snapshot
            if event.action_kind is action_kind
            and fold_case(event.user_id.strip()) == user_key
            and window.contains(event.occurred_at)
            and (scope_key is None or (event.scope and fold_case(event.scope) == scope_key))
            and (content_key is None or (event.content and fold_case(event.content) == content_key))
        )

    def record(self, event: ActivityEvent) -> None:
        with self._lock:
            self._events.append(event)

    def prune(self, older_than: datetime) -> int:
        with self._lock:
            kept = [e for e in self._events if e.occurred_at >= older_than]
            removed = len(self._events) - len(kept)
            self._events = kept
        if removed:
            logger.debug(f"Pruned {removed} in-memory activity events")
        return removed

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)
