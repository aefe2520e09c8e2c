"""
Unit tests for RedisActivityRepository with a mocked Redis client.
"""

import hashlib

import pytest
import redis
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock, Mock

from domain.errors import QuotaUnavailableError
from domain.quota_enforcement import ActionKind, ActivityEvent, TimeWindow
from infrastructure.redis_activity_repository import RedisActivityRepository

NOW = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)
NOW_US = 1_705_320_000_000_000


@pytest.fixture
def mock_redis():
    client = MagicMock()
    client.zcount.return_value = 4
    return client


@pytest.fixture
def repository(mock_redis):
    return RedisActivityRepository(mock_redis, key_ttl_seconds=3600)


class TestKeys:

    def test_user_key_is_case_folded(self, repository):
        assert repository._make_key(ActionKind.SUBMISSION, " Alice ") == "quota:submission:alice"

    def test_scope_and_content_key(self, repository):
        digest = hashlib.sha256(b"https://example.com/a").hexdigest()[:16]

        key = repository._make_key(
            ActionKind.COMMENT, "alice", scope="News", content="HTTPS://example.com/A"
        )

        assert key == f"quota:comment:alice:s:news:c:{digest}"


class TestCount:

    def test_zcount_over_window_in_microseconds(self, repository, mock_redis):
        window = TimeWindow.ending_at(NOW, timedelta(hours=1))

        result = repository.count(ActionKind.SUBMISSION, "alice", window, scope="news")

        assert result == 4
        mock_redis.zcount.assert_called_once_with(
            "quota:submission:alice:s:news", NOW_US - 3_600_000_000, NOW_US
        )

    def test_sub_millisecond_window_start_is_not_truncated(self, repository, mock_redis):
        start = NOW - timedelta(hours=1, microseconds=-500)
        window = TimeWindow(start=start, end=NOW)

        repository.count(ActionKind.COMMENT, "alice", window)

        low, high = mock_redis.zcount.call_args.args[1:]
        assert low == NOW_US - 3_600_000_000 + 500
        assert high == NOW_US

        pipe = Mock()
        mock_redis.pipeline.return_value = pipe
        early = start - timedelta(microseconds=500)
        repository.record(ActivityEvent("early", ActionKind.COMMENT, "alice", early))

        score = pipe.zadd.call_args.args[1]["early"]
        assert score < low

    def test_missing_key_counts_zero(self, repository, mock_redis):
        mock_redis.zcount.return_value = 0
        window = TimeWindow.ending_at(NOW, timedelta(hours=1))

        assert repository.count(ActionKind.COMMENT, "nobody", window) == 0

    @pytest.mark.parametrize("error", [
        redis.ConnectionError("refused"),
        redis.TimeoutError("timed out"),
    ])
    def test_redis_failure_is_unavailable(self, repository, mock_redis, error):
        mock_redis.zcount.side_effect = error
        window = TimeWindow.ending_at(NOW, timedelta(hours=1))

        with pytest.raises(QuotaUnavailableError) as exc_info:
            repository.count(ActionKind.SUBMISSION, "alice", window)

        assert exc_info.value.original_error is error


class TestRecord:

    def test_indexes_every_filter_combination(self, repository, mock_redis):
        pipe = Mock()
        mock_redis.pipeline.return_value = pipe
        event = ActivityEvent("e1", ActionKind.SUBMISSION, "alice", NOW, scope="news", content="x")

        repository.record(event)

        keys = [call.args[0] for call in pipe.zadd.call_args_list]
        assert len(keys) == 4
        assert keys[0] == "quota:submission:alice"
        assert keys[1] == "quota:submission:alice:s:news"
        assert keys[2].startswith("quota:submission:alice:c:")
        assert keys[3].startswith("quota:submission:alice:s:news:c:")
        assert all(call.args[1] == {"e1": NOW_US} for call in pipe.zadd.call_args_list)
        assert pipe.expire.call_count == 4
        pipe.sadd.assert_called_once_with(RedisActivityRepository.INDEX_KEY, *keys)
        pipe.execute.assert_called_once()

    def test_global_only_event_has_single_key(self, repository, mock_redis):
        pipe = Mock()
        mock_redis.pipeline.return_value = pipe

        repository.record(ActivityEvent("e2", ActionKind.COMMENT, "alice", NOW))

        assert pipe.zadd.call_count == 1

    def test_pipeline_failure_is_unavailable(self, repository, mock_redis):
        pipe = Mock()
        pipe.execute.side_effect = redis.ConnectionError("refused")
        mock_redis.pipeline.return_value = pipe

        with pytest.raises(QuotaUnavailableError):
            repository.record(ActivityEvent("e3", ActionKind.COMMENT, "alice", NOW))


class TestPrune:

    def test_removes_old_members_and_empty_keys(self, repository, mock_redis):
        mock_redis.sscan_iter.return_value = iter([b"quota:comment:alice", "quota:comment:bob"])
        mock_redis.zremrangebyscore.side_effect = [2, 1]
        mock_redis.zcard.side_effect = [0, 3]

        removed = repository.prune(NOW)

        assert removed == 3
        mock_redis.zremrangebyscore.assert_any_call("quota:comment:alice", "-inf", f"({NOW_US}")
        mock_redis.srem.assert_called_once_with(
            RedisActivityRepository.INDEX_KEY, "quota:comment:alice"
        )
