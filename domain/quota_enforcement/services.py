"""
Quota Enforcement Domain Services

Evaluates an ordered policy set against a subject and returns an
allow/deny decision. Stateless apart from the injected collaborators.
"""

from datetime import datetime
from typing import Optional, Protocol

from ..errors import (
    DomainError,
    QuotaCancelledError,
    QuotaConfigurationError,
    QuotaUnavailableError,
)
from .clock import IClock, SystemClock
from .entities import QuotaDecision, QuotaViolation
from .policy_set import QuotaPolicySet
from .repositories import IEventCounter
from .value_objects import ActionKind, QuotaPolicy, Subject, TimeWindow


class CancellationSignal(Protocol):
    """Anything exposing ``is_set()``, e.g. ``threading.Event``."""

    def is_set(self) -> bool:
        ...


class QuotaEngine:
    """
    Domain service for quota evaluation.

    Holds no mutable state: the policy set is read-only and every call
    works against a single ``as_of`` instant, so the engine can be shared
    by concurrent request handlers without coordination.
    """

    def __init__(
        self,
        policy_set: QuotaPolicySet,
        counter: IEventCounter,
        clock: Optional[IClock] = None,
    ):
        """
        Initialize with policies and collaborators.

        Args:
            policy_set: Policies to enforce
            counter: Event counter implementation
            clock: Clock used when no ``as_of`` is supplied
        """
        self.policy_set = policy_set
        self.counter = counter
        self.clock = clock or SystemClock()

    def evaluate(
        self,
        action_kind: ActionKind,
        subject: Subject,
        scope: Optional[str] = None,
        content_key: Optional[str] = None,
        as_of: Optional[datetime] = None,
        cancel_event: Optional[CancellationSignal] = None,
    ) -> QuotaDecision:
        """
        Evaluate every policy for the action and stop at the first violation.

        For each policy in declaration order: exempt subjects skip the policy
        without a counter call; otherwise the events inside
        ``[as_of - window, as_of]`` are counted and the policy is violated
        when ``count >= threshold``.

        Args:
            action_kind: Action being attempted
            subject: Acting user
            scope: Target subverse, required by per-scope policies
            content_key: Content to match, required by content-filter policies
            as_of: Evaluation instant; the clock is read once when omitted
            cancel_event: Checked before each counter call

        Returns:
            QuotaDecision, denied with the first violated policy

        Raises:
            QuotaConfigurationError: If a policy needs a scope or content key
                that was not supplied
            QuotaUnavailableError: If the counter fails
            QuotaCancelledError: If the evaluation was cancelled
        """
        if as_of is None:
            as_of = self.clock.now()

        for policy in self.policy_set.for_action(action_kind):
            if policy.is_exempt(subject, as_of):
                continue

            window = policy.window_at(as_of)
            count = self._count(policy, subject, window, scope, content_key, cancel_event)

            if count >= policy.threshold:
                violation = QuotaViolation(policy=policy, observed_count=count, window=window)
                return QuotaDecision.deny(violation, as_of)

        return QuotaDecision.allow(as_of)

    def _count(
        self,
        policy: QuotaPolicy,
        subject: Subject,
        window: TimeWindow,
        scope: Optional[str],
        content_key: Optional[str],
        cancel_event: Optional[CancellationSignal],
    ) -> int:
        """
        Issue the counter query for one policy.

        Raises:
            QuotaConfigurationError: Missing scope or content key
            QuotaUnavailableError: Counter failure, original error attached
            QuotaCancelledError: Cancellation requested before the call
        """
        scope_filter = None
        if policy.is_per_scope:
            if not scope:
                raise QuotaConfigurationError(
                    f"Policy {policy.name} is per-scope but no scope was supplied"
                )
            scope_filter = scope

        content_filter = None
        if policy.content_filter:
            if not content_key:
                raise QuotaConfigurationError(
                    f"Policy {policy.name} filters on content but no content key was supplied"
                )
            content_filter = content_key

        if cancel_event is not None and cancel_event.is_set():
            raise QuotaCancelledError(f"Evaluation cancelled before policy {policy.name}")

        try:
            count = self.counter.count(
                policy.action_kind,
                subject.user_id,
                window,
                scope=scope_filter,
                content_equals=content_filter,
            )
        except DomainError:
            raise
        except Exception as e:
            raise QuotaUnavailableError(
                f"Event counter failed for policy {policy.name}: {e}",
                original_error=e,
            ) from e

        if count < 0:
            raise QuotaUnavailableError(
                f"Event counter returned a negative count for policy {policy.name}"
            )
        return count
