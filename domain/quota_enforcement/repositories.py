"""
Quota Enforcement Repositories

Interfaces for counting and recording user activity.
Concrete implementations are in the infrastructure layer.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from .value_objects import ActionKind, ActivityEvent, TimeWindow


class IEventCounter(ABC):
    """Counts historical activity events matching a set of filters."""

    @abstractmethod
    def count(
        self,
        action_kind: ActionKind,
        user_id: str,
        window: TimeWindow,
        scope: Optional[str] = None,
        content_equals: Optional[str] = None,
    ) -> int:
        """
        Count events for a user inside an inclusive time window.

        User id, scope and content all match case-insensitively. A later
        query over the same or a later window end never returns fewer
        events than an earlier one while events are append-only.

        Args:
            action_kind: Kind of action to count
            user_id: Acting user
            window: Inclusive ``[start, end]`` range
            scope: Restrict to one subverse when given
            content_equals: Restrict to events with this content when given

        Returns:
            Non-negative event count

        Raises:
            QuotaUnavailableError: If the backing store cannot be reached
            QuotaCancelledError: If the query was cancelled
        """
        ...


class IActivityRepository(IEventCounter):
    """Event counter that can also persist and expire activity."""

    @abstractmethod
    def record(self, event: ActivityEvent) -> None:
        """
        Append an event to the store.

        Raises:
            QuotaUnavailableError: If the backing store cannot be reached
        """
        ...

    @abstractmethod
    def prune(self, older_than: datetime) -> int:
        """
        Remove events that occurred strictly before ``older_than``.

        Returns:
            Number of removed index entries
        """
        ...
