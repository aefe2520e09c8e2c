"""
Logging Event Handler

Infrastructure event handler that writes quota domain events to the log.
The domain layer remains unaware of logging infrastructure.
"""

import logging

from domain.events import (
    ActivityRecordedEvent,
    DomainEvent,
    QuotaCheckFailedEvent,
    QuotaDeniedEvent,
)


class LoggingEventHandler:
    """Logs quota denials, failed checks and recorded activity."""

    def __init__(self, logger: logging.Logger):
        """
        Initialize with logger instance.

        Args:
            logger: Python logging.Logger instance
        """
        self.logger = logger

    def handle(self, event: DomainEvent) -> None:
        """
        Handle domain event by logging it.

        Args:
            event: Domain event to log
        """
        if isinstance(event, QuotaDeniedEvent):
            self.logger.info(
                f"Quota denied for {event.aggregate_id}: {event.policy_name} "
                f"({event.observed_count}/{event.threshold} {event.action_kind}"
                f"{' in ' + event.scope if event.scope else ''})"
            )
        elif isinstance(event, QuotaCheckFailedEvent):
            self.logger.warning(
                f"Quota check for {event.aggregate_id} ({event.action_kind}) "
                f"failed with {event.reason}: {event.error_message}"
            )
        elif isinstance(event, ActivityRecordedEvent):
            self.logger.debug(
                f"Recorded {event.action_kind} {event.event_id} for {event.aggregate_id}"
                f"{' in ' + event.scope if event.scope else ''}"
            )
        else:
            self.logger.debug(
                f"Unhandled event: {event.__class__.__name__} "
                f"(aggregate_id={event.aggregate_id})"
            )

