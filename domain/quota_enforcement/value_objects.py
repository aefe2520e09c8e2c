"""
Quota Enforcement Value Objects

Immutable value objects for quota enforcement with zero external dependencies.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable, Optional

from ..errors import QuotaConfigurationError


class ActionKind(Enum):
    """User actions that are subject to posting quotas."""

    SUBMISSION = "submission"
    COMMENT = "comment"

    @classmethod
    def parse(cls, value: str) -> "ActionKind":
        """
        Parse an action kind from its wire value (case-insensitive).

        Raises:
            ValueError: If the value names no known action
        """
        try:
            return cls(str(value).strip().lower())
        except ValueError as e:
            raise ValueError(f"Unknown action kind: {value}") from e


class ScopeMode(Enum):
    """Whether a policy counts across all subverses or within one."""

    GLOBAL = "global"
    PER_SCOPE = "per_scope"


@dataclass(frozen=True)
class Subject:
    """
    The acting user.

    Attributes:
        user_id: User name; compared case-insensitively
        registered_at: Account registration instant
        submission_points: Cumulative submission point score
        comment_points: Cumulative comment point score
    """
    user_id: str
    registered_at: datetime
    submission_points: int = 0
    comment_points: int = 0

    def __post_init__(self):
        if not self.user_id or not self.user_id.strip():
            raise ValueError("User id is required")

    def account_age(self, as_of: datetime) -> timedelta:
        """Age of the account at the given instant."""
        return as_of - self.registered_at


@dataclass(frozen=True)
class TimeWindow:
    """
    Closed time range ``[start, end]`` used for counting events.

    Both bounds are inclusive.
    """
    start: datetime
    end: datetime

    def __post_init__(self):
        if self.start > self.end:
            raise ValueError(
                f"Window start {self.start.isoformat()} is after end {self.end.isoformat()}"
            )

    @classmethod
    def ending_at(cls, as_of: datetime, duration: timedelta) -> "TimeWindow":
        """Build the sliding window ``[as_of - duration, as_of]``."""
        return cls(start=as_of - duration, end=as_of)

    def contains(self, instant: datetime) -> bool:
        return self.start <= instant <= self.end


# Exemption rules receive the subject and the evaluation instant.
ExemptionRule = Callable[[Subject, datetime], bool]


@dataclass(frozen=True)
class QuotaPolicy:
    """
    Immutable configuration of a single posting quota.

    The policy is violated when the number of matching events inside
    ``[as_of - window, as_of]`` is greater than or equal to ``threshold``.

    Attributes:
        name: Unique policy name, reported back to the user on denial
        action_kind: Action the policy counts
        window: Sliding lookback duration
        threshold: Event count at which the policy is violated
        scope_mode: Count within the target subverse or across all of them
        exemption: Optional rule that skips the policy for a subject
        content_filter: Count only events whose content equals the content key
        description: Human-readable summary for listings
    """
    name: str
    action_kind: ActionKind
    window: timedelta
    threshold: int
    scope_mode: ScopeMode = ScopeMode.GLOBAL
    exemption: Optional[ExemptionRule] = field(default=None, compare=False)
    content_filter: bool = False
    description: str = ""

    def __post_init__(self):
        """Validate policy values."""
        if not self.name:
            raise QuotaConfigurationError("Policy name is required")
        if not isinstance(self.action_kind, ActionKind):
            raise QuotaConfigurationError(
                f"Policy {self.name}: action kind must be an ActionKind, got {self.action_kind!r}"
            )
        if not isinstance(self.scope_mode, ScopeMode):
            raise QuotaConfigurationError(
                f"Policy {self.name}: scope mode must be a ScopeMode, got {self.scope_mode!r}"
            )
        if not isinstance(self.window, timedelta) or self.window <= timedelta(0):
            raise QuotaConfigurationError(
                f"Policy {self.name}: window must be positive, got {self.window!r}"
            )
        if isinstance(self.threshold, bool) or not isinstance(self.threshold, int) or self.threshold < 1:
            raise QuotaConfigurationError(
                f"Policy {self.name}: threshold must be at least 1, got {self.threshold!r}"
            )
        if self.exemption is not None and not callable(self.exemption):
            raise QuotaConfigurationError(
                f"Policy {self.name}: exemption must be callable"
            )

    @property
    def is_per_scope(self) -> bool:
        return self.scope_mode is ScopeMode.PER_SCOPE

    def is_exempt(self, subject: Subject, as_of: datetime) -> bool:
        """
        Check whether the policy should be skipped for the subject.

        Args:
            subject: Acting user
            as_of: Evaluation instant

        Returns:
            True if an exemption rule is configured and matches
        """
        return self.exemption is not None and bool(self.exemption(subject, as_of))

    def window_at(self, as_of: datetime) -> TimeWindow:
        return TimeWindow.ending_at(as_of, self.window)

    def to_dict(self) -> dict:
        """Serialise the policy for listings (exemption rule excluded)."""
        return {
            "name": self.name,
            "action_kind": self.action_kind.value,
            "window_seconds": int(self.window.total_seconds()),
            "threshold": self.threshold,
            "scope_mode": self.scope_mode.value,
            "content_filter": self.content_filter,
            "has_exemption": self.exemption is not None,
            "description": self.description,
        }


@dataclass(frozen=True)
class ActivityEvent:
    """
    A recorded user action, as stored by the event counter backend.

    Attributes:
        event_id: Unique event identifier
        action_kind: Kind of action
        user_id: Acting user name
        occurred_at: When the action happened
        scope: Target subverse, if any
        content: Content key (e.g. submitted URL), if any
    """
    event_id: str
    action_kind: ActionKind
    user_id: str
    occurred_at: datetime
    scope: Optional[str] = None
    content: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "event_id": self.event_id,
            "action_kind": self.action_kind.value,
            "user_id": self.user_id,
            "occurred_at": self.occurred_at.isoformat(),
            "scope": self.scope,
            "content": self.content,
        }
