"""
Unit tests for LoggingEventHandler.
"""

import logging

from datetime import datetime, timezone

from domain.events import ActivityRecordedEvent, QuotaCheckFailedEvent, QuotaDeniedEvent
from infrastructure.event_handlers import LoggingEventHandler

NOW = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


class TestLoggingEventHandler:

    def test_denial_logged_at_info(self, caplog):
        handler = LoggingEventHandler(logging.getLogger("quota.test"))
        event = QuotaDeniedEvent("alice", NOW, "submission", "hourly_posting_per_subverse", 3, 3, "news")

        with caplog.at_level(logging.DEBUG, logger="quota.test"):
            handler.handle(event)

        assert caplog.records[0].levelno == logging.INFO
        assert "hourly_posting_per_subverse" in caplog.text
        assert "in news" in caplog.text

    def test_failed_check_logged_at_warning(self, caplog):
        handler = LoggingEventHandler(logging.getLogger("quota.test"))
        event = QuotaCheckFailedEvent("alice", NOW, "comment", "service_unavailable", "refused")

        with caplog.at_level(logging.DEBUG, logger="quota.test"):
            handler.handle(event)

        assert caplog.records[0].levelno == logging.WARNING

    def test_recorded_activity_logged_at_debug(self, caplog):
        handler = LoggingEventHandler(logging.getLogger("quota.test"))

        with caplog.at_level(logging.DEBUG, logger="quota.test"):
            handler.handle(ActivityRecordedEvent("alice", NOW, "abc123", "comment"))

        assert caplog.records[0].levelno == logging.DEBUG
        assert "abc123" in caplog.text
