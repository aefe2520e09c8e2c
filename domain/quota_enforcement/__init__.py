"""
Quota Enforcement Domain

Posting quotas for submissions and comments: sliding time windows,
per-subverse counters and exemptions for established members.
"""

from .clock import FixedClock, IClock, SystemClock
from .entities import QuotaDecision, QuotaViolation
from .policy_set import QuotaPolicySet
from .repositories import IActivityRepository, IEventCounter
from .services import QuotaEngine
from .value_objects import (
    ActionKind,
    ActivityEvent,
    QuotaPolicy,
    ScopeMode,
    Subject,
    TimeWindow,
)

__all__ = [
    'ActionKind',
    'ActivityEvent',
    'FixedClock',
    'IActivityRepository',
    'IClock',
    'IEventCounter',
    'QuotaDecision',
    'QuotaEngine',
    'QuotaPolicy',
    'QuotaPolicySet',
    'QuotaViolation',
    'ScopeMode',
    'Subject',
    'SystemClock',
    'TimeWindow',
]
