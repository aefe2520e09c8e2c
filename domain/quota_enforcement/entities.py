"""
Quota Enforcement Entities

Evaluation results for quota enforcement with zero external dependencies.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from .value_objects import QuotaPolicy, TimeWindow


@dataclass(frozen=True)
class QuotaViolation:
    """
    A policy that was found violated during an evaluation.

    Attributes:
        policy: The violated policy
        observed_count: Event count seen at evaluation time
        window: Window the count was taken over
    """
    policy: QuotaPolicy
    observed_count: int
    window: TimeWindow

    def to_dict(self) -> Dict[str, Any]:
        return {
            "policy": self.policy.name,
            "action_kind": self.policy.action_kind.value,
            "threshold": self.policy.threshold,
            "observed_count": self.observed_count,
            "window_start": self.window.start.isoformat(),
            "window_end": self.window.end.isoformat(),
        }


@dataclass(frozen=True)
class QuotaDecision:
    """
    Outcome of evaluating a policy set for one action.

    A denial is a normal result, never an exception.
    """
    allowed: bool
    as_of: datetime
    violation: Optional[QuotaViolation] = None

    def __post_init__(self):
        if self.allowed and self.violation is not None:
            raise ValueError("An allowed decision cannot carry a violation")
        if not self.allowed and self.violation is None:
            raise ValueError("A denied decision requires a violation")

    @classmethod
    def allow(cls, as_of: datetime) -> "QuotaDecision":
        return cls(allowed=True, as_of=as_of)

    @classmethod
    def deny(cls, violation: QuotaViolation, as_of: datetime) -> "QuotaDecision":
        return cls(allowed=False, as_of=as_of, violation=violation)

    @property
    def denied(self) -> bool:
        return not self.allowed

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert decision to dictionary for API responses.

        Returns:
            Dictionary with the decision and, when denied, the violation
        """
        payload: Dict[str, Any] = {
            "allowed": self.allowed,
            "as_of": self.as_of.isoformat(),
        }
        if self.violation is not None:
            payload["violation"] = self.violation.to_dict()
        return payload
