"""
Domain Events

Immutable records of significant outcomes in the quota domain.
Events decouple side effects (logging, auditing) from core business logic.
"""

from abc import ABC
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class DomainEvent(ABC):
    """
    Base class for all domain events.

    Attributes:
        aggregate_id: ID of the aggregate that generated the event (the user id)
        occurred_at: Timestamp when the event occurred
    """
    aggregate_id: str
    occurred_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert event to dictionary for serialization.

        Returns:
            Dictionary representation of the event
        """
        return {
            "event_type": self.__class__.__name__,
            "aggregate_id": self.aggregate_id,
            "occurred_at": self.occurred_at.isoformat(),
        }


@dataclass(frozen=True)
class QuotaDeniedEvent(DomainEvent):
    """
    Event emitted when an action is rejected by a quota policy.

    Attributes:
        action_kind: Action that was attempted
        policy_name: First violated policy
        threshold: Threshold of that policy
        observed_count: Count seen at evaluation time
        scope: Target subverse, if any
    """
    action_kind: str
    policy_name: str
    threshold: int
    observed_count: int
    scope: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization."""
        base_dict = super().to_dict()
        base_dict.update({
            "action_kind": self.action_kind,
            "policy_name": self.policy_name,
            "threshold": self.threshold,
            "observed_count": self.observed_count,
            "scope": self.scope,
        })
        return base_dict


@dataclass(frozen=True)
class QuotaCheckFailedEvent(DomainEvent):
    """
    Event emitted when a quota check could not reach a decision.

    Attributes:
        action_kind: Action that was attempted
        reason: Error category value (service_unavailable, request_cancelled)
        error_message: Technical error message
    """
    action_kind: str
    reason: str
    error_message: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization."""
        base_dict = super().to_dict()
        base_dict.update({
            "action_kind": self.action_kind,
            "reason": self.reason,
            "error_message": self.error_message,
        })
        return base_dict


@dataclass(frozen=True)
class ActivityRecordedEvent(DomainEvent):
    """
    Event emitted after a submission or comment is recorded for counting.

    Attributes:
        event_id: Stored activity id
        action_kind: Recorded action
        scope: Target subverse, if any
    """
    event_id: str
    action_kind: str
    scope: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization."""
        base_dict = super().to_dict()
        base_dict.update({
            "event_id": self.event_id,
            "action_kind": self.action_kind,
            "scope": self.scope,
        })
        return base_dict
