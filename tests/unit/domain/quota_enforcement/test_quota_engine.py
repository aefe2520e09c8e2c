"""
Unit tests for QuotaEngine.

Covers the sliding-window threshold rule, exemptions, first-violation
ordering and the error contract of evaluate().
"""

import threading

import pytest
from datetime import datetime, timedelta, timezone

from domain.errors import QuotaCancelledError, QuotaConfigurationError, QuotaUnavailableError
from domain.quota_enforcement import (
    ActionKind,
    FixedClock,
    QuotaEngine,
    QuotaPolicySet,
    ScopeMode,
    Subject,
)
from domain.quota_enforcement.exemptions import established_member
from tests.fixtures.fake_counters import (
    CallbackEventCounter,
    FailingEventCounter,
    RecordingEventCounter,
)

NOW = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def per_scope_daily(make_policy):
    return make_policy(
        "daily_posting_per_subverse",
        window=timedelta(hours=24),
        threshold=5,
        scope_mode=ScopeMode.PER_SCOPE,
    )


# =============================================================================
# Reference scenarios
# =============================================================================

class TestScenarios:
    """End-to-end behaviour of single policies."""

    def test_per_scope_at_threshold_is_denied(self, per_scope_daily, new_user):
        counter = RecordingEventCounter()
        counter.set_count(5, scope="news")
        engine = QuotaEngine(QuotaPolicySet([per_scope_daily]), counter, FixedClock(NOW))

        decision = engine.evaluate(ActionKind.SUBMISSION, new_user, scope="news")

        assert decision.denied
        assert decision.violation.policy is per_scope_daily
        assert decision.violation.observed_count == 5

    def test_per_scope_below_threshold_is_allowed(self, per_scope_daily, new_user):
        counter = RecordingEventCounter()
        counter.set_count(4, scope="news")
        engine = QuotaEngine(QuotaPolicySet([per_scope_daily]), counter, FixedClock(NOW))

        decision = engine.evaluate(ActionKind.SUBMISSION, new_user, scope="news")

        assert decision.allowed
        assert decision.violation is None

    def test_exempt_subject_skips_counter(self, make_policy):
        policy = make_policy(
            "hourly_global_posting",
            threshold=1,
            exemption=established_member(min_age_days=30, min_points=50),
        )
        counter = RecordingEventCounter(default=1000)
        engine = QuotaEngine(QuotaPolicySet([policy]), counter, FixedClock(NOW))
        subject = Subject("carol", NOW - timedelta(days=45))

        decision = engine.evaluate(ActionKind.SUBMISSION, subject)

        assert decision.allowed
        assert counter.call_count() == 0

    def test_cross_post_denied_at_one(self, make_policy, new_user):
        policy = make_policy(
            "daily_cross_posting",
            window=timedelta(hours=24),
            threshold=1,
            content_filter=True,
        )
        url = "https://example.com/story"
        counter = RecordingEventCounter()
        counter.set_count(1, content=url)
        engine = QuotaEngine(QuotaPolicySet([policy]), counter, FixedClock(NOW))

        decision = engine.evaluate(ActionKind.SUBMISSION, new_user, content_key=url)

        assert decision.denied
        assert decision.violation.observed_count == 1
        assert counter.get_call_history()[0]["args"]["content_equals"] == url

    def test_counter_unavailable_propagates(self, make_policy, new_user):
        error = QuotaUnavailableError("redis down")
        engine = QuotaEngine(
            QuotaPolicySet([make_policy()]), FailingEventCounter(error), FixedClock(NOW)
        )

        with pytest.raises(QuotaUnavailableError) as exc_info:
            engine.evaluate(ActionKind.SUBMISSION, new_user)

        assert exc_info.value is error


# =============================================================================
# Evaluation semantics
# =============================================================================

class TestEvaluation:

    def test_no_policies_for_action_allows(self, make_policy, new_user):
        counter = RecordingEventCounter(default=99)
        engine = QuotaEngine(QuotaPolicySet([make_policy()]), counter, FixedClock(NOW))

        decision = engine.evaluate(ActionKind.COMMENT, new_user)

        assert decision.allowed
        assert counter.call_count() == 0

    @pytest.mark.parametrize("count,allowed", [(0, True), (2, True), (3, False), (10, False)])
    def test_threshold_boundary(self, make_policy, new_user, count, allowed):
        counter = RecordingEventCounter(default=count)
        engine = QuotaEngine(QuotaPolicySet([make_policy(threshold=3)]), counter, FixedClock(NOW))

        assert engine.evaluate(ActionKind.SUBMISSION, new_user).allowed is allowed

    def test_first_violation_wins(self, make_policy, new_user):
        first = make_policy("first", threshold=2)
        second = make_policy("second", threshold=1)
        counter = RecordingEventCounter(default=5)
        engine = QuotaEngine(QuotaPolicySet([first, second]), counter, FixedClock(NOW))

        decision = engine.evaluate(ActionKind.SUBMISSION, new_user)

        assert decision.violation.policy.name == "first"
        assert counter.call_count() == 1

    def test_later_policy_reported_when_earlier_passes(self, make_policy, new_user):
        hourly = make_policy("hourly", threshold=3)
        daily = make_policy("daily", window=timedelta(hours=24), threshold=3, scope_mode=ScopeMode.PER_SCOPE)
        counter = RecordingEventCounter()
        counter.set_count(1)
        counter.set_count(3, scope="news")
        engine = QuotaEngine(QuotaPolicySet([hourly, daily]), counter, FixedClock(NOW))

        decision = engine.evaluate(ActionKind.SUBMISSION, new_user, scope="news")

        assert decision.violation.policy.name == "daily"
        assert counter.call_count() == 2

    def test_window_ends_at_as_of(self, make_policy, new_user):
        counter = RecordingEventCounter()
        policy = make_policy(window=timedelta(minutes=59))
        engine = QuotaEngine(QuotaPolicySet([policy]), counter, FixedClock(NOW))
        as_of = NOW + timedelta(minutes=7)

        decision = engine.evaluate(ActionKind.SUBMISSION, new_user, as_of=as_of)

        window = counter.windows()[0]
        assert window.end == as_of
        assert window.start == as_of - timedelta(minutes=59)
        assert decision.as_of == as_of

    def test_clock_read_once_per_evaluation(self, make_policy, new_user):
        clock = FixedClock(NOW)
        reads = []
        original_now = clock.now

        def counting_now():
            reads.append(1)
            return original_now()

        clock.now = counting_now
        policies = [make_policy("a"), make_policy("b", window=timedelta(hours=24))]
        counter = RecordingEventCounter()
        engine = QuotaEngine(QuotaPolicySet(policies), counter, clock)

        engine.evaluate(ActionKind.SUBMISSION, new_user)

        assert len(reads) == 1
        assert {w.end for w in counter.windows()} == {NOW}

    def test_evaluation_is_idempotent(self, make_policy, new_user):
        counter = RecordingEventCounter(default=3)
        engine = QuotaEngine(QuotaPolicySet([make_policy()]), counter, FixedClock(NOW))

        first = engine.evaluate(ActionKind.SUBMISSION, new_user)
        second = engine.evaluate(ActionKind.SUBMISSION, new_user)

        assert first == second

    def test_global_policy_ignores_supplied_scope(self, make_policy, new_user):
        counter = RecordingEventCounter()
        engine = QuotaEngine(QuotaPolicySet([make_policy()]), counter, FixedClock(NOW))

        engine.evaluate(ActionKind.SUBMISSION, new_user, scope="news", content_key="x")

        args = counter.get_call_history()[0]["args"]
        assert args["scope"] is None
        assert args["content_equals"] is None
        assert args["user_id"] == "alice"

    def test_exemption_receives_as_of(self, make_policy, new_user):
        seen = []

        def rule(subject, as_of):
            seen.append(as_of)
            return False

        engine = QuotaEngine(
            QuotaPolicySet([make_policy(exemption=rule)]), RecordingEventCounter(), FixedClock(NOW)
        )
        engine.evaluate(ActionKind.SUBMISSION, new_user)

        assert seen == [NOW]


# =============================================================================
# Error contract
# =============================================================================

class TestErrors:

    def test_per_scope_without_scope_is_configuration_error(self, per_scope_daily, new_user):
        counter = RecordingEventCounter()
        engine = QuotaEngine(QuotaPolicySet([per_scope_daily]), counter, FixedClock(NOW))

        with pytest.raises(QuotaConfigurationError):
            engine.evaluate(ActionKind.SUBMISSION, new_user)
        assert counter.call_count() == 0

    def test_content_filter_without_key_is_configuration_error(self, make_policy, new_user):
        engine = QuotaEngine(
            QuotaPolicySet([make_policy(content_filter=True)]),
            RecordingEventCounter(),
            FixedClock(NOW),
        )

        with pytest.raises(QuotaConfigurationError):
            engine.evaluate(ActionKind.SUBMISSION, new_user)

    def test_exempt_subject_never_needs_scope(self, make_policy, new_user):
        policy = make_policy(
            "exempt_per_scope",
            scope_mode=ScopeMode.PER_SCOPE,
            exemption=lambda subject, as_of: True,
        )
        engine = QuotaEngine(QuotaPolicySet([policy]), RecordingEventCounter(), FixedClock(NOW))

        assert engine.evaluate(ActionKind.SUBMISSION, new_user).allowed

    def test_unexpected_counter_error_wrapped_as_unavailable(self, make_policy, new_user):
        original = TimeoutError("read timed out")
        engine = QuotaEngine(
            QuotaPolicySet([make_policy()]), FailingEventCounter(original), FixedClock(NOW)
        )

        with pytest.raises(QuotaUnavailableError) as exc_info:
            engine.evaluate(ActionKind.SUBMISSION, new_user)

        assert exc_info.value.original_error is original
        assert exc_info.value.__cause__ is original

    def test_negative_count_is_unavailable(self, make_policy, new_user):
        engine = QuotaEngine(
            QuotaPolicySet([make_policy()]), RecordingEventCounter(default=-1), FixedClock(NOW)
        )

        with pytest.raises(QuotaUnavailableError):
            engine.evaluate(ActionKind.SUBMISSION, new_user)

    def test_cancelled_before_counter_call(self, make_policy, new_user):
        counter = RecordingEventCounter()
        engine = QuotaEngine(QuotaPolicySet([make_policy()]), counter, FixedClock(NOW))
        cancel = threading.Event()
        cancel.set()

        with pytest.raises(QuotaCancelledError):
            engine.evaluate(ActionKind.SUBMISSION, new_user, cancel_event=cancel)
        assert counter.call_count() == 0

    def test_cancelled_between_policies(self, make_policy, new_user):
        cancel = threading.Event()

        def count_then_cancel(action_kind, user_id, window, scope, content):
            cancel.set()
            return 0

        engine = QuotaEngine(
            QuotaPolicySet([make_policy("a"), make_policy("b")]),
            CallbackEventCounter(count_then_cancel),
            FixedClock(NOW),
        )

        with pytest.raises(QuotaCancelledError, match="before policy b"):
            engine.evaluate(ActionKind.SUBMISSION, new_user, cancel_event=cancel)
