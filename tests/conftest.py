"""
Shared pytest fixtures and configuration for the quota service test suite.

This module provides:
- Hypothesis configuration for property-based testing
- Shared fixtures for subjects, clocks and policies
- Fake event counters and activity repositories
"""

import pytest
from datetime import datetime, timedelta, timezone

# Hypothesis configuration
from hypothesis import settings, HealthCheck, Phase

from domain.quota_enforcement import (
    ActionKind,
    FixedClock,
    QuotaPolicy,
    ScopeMode,
    Subject,
)
from infrastructure.in_memory_activity_repository import InMemoryActivityRepository
from infrastructure.quota_config import QuotaConfig
from tests.fixtures.fake_counters import RecordingEventCounter

# Register Hypothesis profiles
settings.register_profile(
    "default",
    max_examples=100,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.target, Phase.shrink],
)
settings.register_profile(
    "ci",
    max_examples=200,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
)
settings.register_profile(
    "dev",
    max_examples=10,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
)
settings.load_profile("default")


NOW = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


# =============================================================================
# Clock and Subject Fixtures
# =============================================================================

@pytest.fixture
def now() -> datetime:
    """Fixed evaluation instant used across tests."""
    return NOW


@pytest.fixture
def clock() -> FixedClock:
    """Provide a FixedClock pinned at NOW."""
    return FixedClock(NOW)


@pytest.fixture
def new_user() -> Subject:
    """A one-day-old account with no points."""
    return Subject(user_id="alice", registered_at=NOW - timedelta(days=1))


@pytest.fixture
def veteran_user() -> Subject:
    """An account registered a year ago."""
    return Subject(user_id="bob", registered_at=NOW - timedelta(days=365), submission_points=10)


# =============================================================================
# Policy Fixtures
# =============================================================================

@pytest.fixture
def make_policy():
    """
    Factory for QuotaPolicy with sensible defaults.

    Usage:
        policy = make_policy("hourly", threshold=3)
    """
    def _make(
        name: str = "test_policy",
        action_kind: ActionKind = ActionKind.SUBMISSION,
        window: timedelta = timedelta(hours=1),
        threshold: int = 3,
        scope_mode: ScopeMode = ScopeMode.GLOBAL,
        exemption=None,
        content_filter: bool = False,
    ) -> QuotaPolicy:
        return QuotaPolicy(
            name=name,
            action_kind=action_kind,
            window=window,
            threshold=threshold,
            scope_mode=scope_mode,
            exemption=exemption,
            content_filter=content_filter,
        )

    return _make


# =============================================================================
# Repository Fixtures
# =============================================================================

@pytest.fixture
def recording_counter() -> RecordingEventCounter:
    """Event counter returning zero with call history."""
    return RecordingEventCounter()


@pytest.fixture
def activity_repository() -> InMemoryActivityRepository:
    """Empty in-memory activity store."""
    return InMemoryActivityRepository()


@pytest.fixture
def enforcing_config() -> QuotaConfig:
    """QuotaConfig with enforcement switched on and default thresholds."""
    return QuotaConfig(enabled=True, is_production=True)


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, no external dependencies)"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests (require external services)"
    )
    config.addinivalue_line(
        "markers", "property: Property-based tests using Hypothesis"
    )


def pytest_collection_modifyitems(config, items):
    """Mark tests by the directory they live in."""
    for item in items:
        path = str(item.fspath)
        if "/unit/" in path:
            item.add_marker(pytest.mark.unit)
        elif "/integration/" in path:
            item.add_marker(pytest.mark.integration)
        elif "/property/" in path:
            item.add_marker(pytest.mark.property)
