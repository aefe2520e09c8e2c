"""
Quota Application Service

Coordinates quota checks for submissions and comments: normalises input,
applies the enforcement switch, records accepted activity and publishes
domain events for denials and failed checks.
"""

import logging
import uuid
from datetime import datetime, timedelta
from typing import Optional, Tuple

from domain.errors import ErrorCategory, QuotaCancelledError, QuotaUnavailableError
from domain.events import ActivityRecordedEvent, QuotaCheckFailedEvent, QuotaDeniedEvent
from domain.quota_enforcement import (
    ActionKind,
    ActivityEvent,
    IActivityRepository,
    IClock,
    QuotaDecision,
    QuotaEngine,
    QuotaPolicy,
    Subject,
    SystemClock,
)
from domain.quota_enforcement.normalization import normalize_content, normalize_key
from domain.quota_enforcement.services import CancellationSignal
from infrastructure.quota_config import QuotaConfig

from .event_publisher import EventPublisher
from .pagination import PaginatedList

logger = logging.getLogger(__name__)


class QuotaService:
    """
    Application service for posting-quota orchestration.

    The engine decides; this service owns the enforcement switch, the
    activity store and the side effects around a decision.
    """

    def __init__(
        self,
        engine: QuotaEngine,
        repository: IActivityRepository,
        config: QuotaConfig,
        event_publisher: Optional[EventPublisher] = None,
        clock: Optional[IClock] = None,
    ):
        """
        Initialize with domain engine and collaborators.

        Args:
            engine: Quota evaluation engine
            repository: Activity store used for recording
            config: Quota configuration
            event_publisher: Optional publisher for domain events
            clock: Clock shared with the engine
        """
        self.engine = engine
        self.repository = repository
        self.config = config
        self.event_publisher = event_publisher
        self.clock = clock or engine.clock or SystemClock()

    def check(
        self,
        action_kind: ActionKind,
        subject: Subject,
        scope: Optional[str] = None,
        content: Optional[str] = None,
        cancel_event: Optional[CancellationSignal] = None,
    ) -> QuotaDecision:
        """
        Check whether the subject may perform the action now.

        Args:
            action_kind: Submission or comment
            subject: Acting user
            scope: Target subverse
            content: Submitted URL or other content key
            cancel_event: Optional cancellation signal

        Returns:
            QuotaDecision; always allowed when enforcement is switched off

        Raises:
            QuotaConfigurationError: If a policy needs a missing scope or content
            QuotaUnavailableError: If the activity store is unavailable
            QuotaCancelledError: If the check was cancelled
        """
        as_of = self.clock.now()
        if not self.config.should_enforce():
            logger.debug(f"Quota enforcement disabled, allowing {action_kind.value}")
            return QuotaDecision.allow(as_of)

        scope = normalize_key(scope)
        content = normalize_content(content)

        try:
            decision = self.engine.evaluate(
                action_kind,
                subject,
                scope=scope,
                content_key=content,
                as_of=as_of,
                cancel_event=cancel_event,
            )
        except QuotaUnavailableError as e:
            self._publish_failure(action_kind, subject, as_of, ErrorCategory.SERVICE_UNAVAILABLE, e)
            raise
        except QuotaCancelledError as e:
            self._publish_failure(action_kind, subject, as_of, ErrorCategory.REQUEST_CANCELLED, e)
            raise

        if decision.denied:
            violation = decision.violation
            self._publish(QuotaDeniedEvent(
                aggregate_id=subject.user_id,
                occurred_at=as_of,
                action_kind=action_kind.value,
                policy_name=violation.policy.name,
                threshold=violation.policy.threshold,
                observed_count=violation.observed_count,
                scope=scope,
            ))

        return decision

    def record(
        self,
        action_kind: ActionKind,
        user_id: str,
        scope: Optional[str] = None,
        content: Optional[str] = None,
        occurred_at: Optional[datetime] = None,
    ) -> ActivityEvent:
        """
        Record an accepted submission or comment so later checks count it.

        Args:
            action_kind: Submission or comment
            user_id: Acting user
            scope: Target subverse
            content: Content key
            occurred_at: Event time, defaults to now

        Returns:
            The stored ActivityEvent

        Raises:
            QuotaUnavailableError: If the activity store is unavailable
        """
        event = ActivityEvent(
            event_id=uuid.uuid4().hex,
            action_kind=action_kind,
            user_id=user_id,
            occurred_at=occurred_at or self.clock.now(),
            scope=normalize_key(scope),
            content=normalize_content(content),
        )
        self.repository.record(event)
        self._publish(ActivityRecordedEvent(
            aggregate_id=user_id,
            occurred_at=event.occurred_at,
            event_id=event.event_id,
            action_kind=action_kind.value,
            scope=event.scope,
        ))
        return event

    def check_and_record(
        self,
        action_kind: ActionKind,
        subject: Subject,
        scope: Optional[str] = None,
        content: Optional[str] = None,
        cancel_event: Optional[CancellationSignal] = None,
    ) -> Tuple[QuotaDecision, Optional[ActivityEvent]]:
        """
        Check the quota and record the action only when it is allowed.

        Count-then-record is not atomic: two concurrent requests may both
        observe ``threshold - 1`` and both be recorded.

        Returns:
            Tuple of (decision, recorded event or None when denied)
        """
        decision = self.check(action_kind, subject, scope, content, cancel_event)
        if decision.denied:
            return decision, None
        event = self.record(
            action_kind,
            subject.user_id,
            scope=scope,
            content=content,
            occurred_at=decision.as_of,
        )
        return decision, event

    def list_policies(
        self,
        page_index: int = 0,
        page_size: int = 20,
        action_kind: Optional[ActionKind] = None,
    ) -> PaginatedList[QuotaPolicy]:
        """
        Page through the configured policies in evaluation order.

        Args:
            page_index: Zero-based page number
            page_size: Policies per page
            action_kind: Restrict the listing to one action

        Returns:
            PaginatedList of QuotaPolicy
        """
        if action_kind is None:
            policies = list(self.engine.policy_set)
        else:
            policies = list(self.engine.policy_set.for_action(action_kind))
        return PaginatedList.from_sequence(policies, page_index, page_size)

    def prune_activity(self) -> int:
        """
        Remove activity older than the configured retention.

        Returns:
            Number of removed entries
        """
        cutoff = self.clock.now() - timedelta(hours=self.config.activity_retention_hours)
        removed = self.repository.prune(cutoff)
        logger.info(f"Pruned {removed} activity entries older than {cutoff.isoformat()}")
        return removed

    def _publish_failure(
        self,
        action_kind: ActionKind,
        subject: Subject,
        as_of: datetime,
        category: ErrorCategory,
        error: Exception,
    ) -> None:
        self._publish(QuotaCheckFailedEvent(
            aggregate_id=subject.user_id,
            occurred_at=as_of,
            action_kind=action_kind.value,
            reason=category.value,
            error_message=str(error),
        ))

    def _publish(self, event) -> None:
        if self.event_publisher is not None:
            self.event_publisher.publish(event)
