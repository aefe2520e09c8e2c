"""
Redis Activity Repository Implementation

Concrete Redis-based implementation of IActivityRepository.
Each recorded event is indexed in sorted sets scored by epoch microseconds,
so a sliding-window count is a single ZCOUNT.
"""

import hashlib
import logging
from datetime import datetime
from typing import List, Optional

import redis

from domain.errors import QuotaUnavailableError
from domain.quota_enforcement.normalization import fold_case
from domain.quota_enforcement.repositories import IActivityRepository
from domain.quota_enforcement.value_objects import ActionKind, ActivityEvent, TimeWindow

logger = logging.getLogger(__name__)


class RedisActivityRepository(IActivityRepository):
    """
    Redis-based activity store.

    Key layout, all sorted sets of ``event_id -> occurred_at_us``:

    - ``quota:{action}:{user}``
    - ``quota:{action}:{user}:s:{scope}``
    - ``quota:{action}:{user}:c:{content_hash}``
    - ``quota:{action}:{user}:s:{scope}:c:{content_hash}``

    User, scope and content are case-folded before they become keys.
    Connection and timeout failures raise QuotaUnavailableError; counts are
    never faked when Redis is down.
    """

    KEY_PREFIX = "quota"
    # Registry of every index key, used by prune()
    INDEX_KEY = "quota:index"

    def __init__(
        self,
        redis_client: redis.Redis,
        key_ttl_seconds: Optional[int] = 172800,
    ):
        """
        Initialize with Redis client.

        Args:
            redis_client: Redis client instance
            key_ttl_seconds: Expiry refreshed on every write, None to disable
        """
        self.redis = redis_client
        self.key_ttl_seconds = key_ttl_seconds

    def count(
        self,
        action_kind: ActionKind,
        user_id: str,
        window: TimeWindow,
        scope: Optional[str] = None,
        content_equals: Optional[str] = None,
    ) -> int:
        """
        Count events in ``[window.start, window.end]`` with ZCOUNT.

        Raises:
            QuotaUnavailableError: If Redis is unreachable or times out
        """
        key = self._make_key(action_kind, user_id, scope, content_equals)
        try:
            result = self.redis.zcount(
                key,
                self._to_score(window.start),
                self._to_score(window.end),
            )
        except (redis.ConnectionError, redis.TimeoutError) as e:
            logger.error(f"Redis error in count: {e}")
            raise QuotaUnavailableError(f"Activity store unavailable: {e}", original_error=e) from e
        return int(result or 0)

    def record(self, event: ActivityEvent) -> None:
        """
        Index an event under every key that a quota may query.

        Raises:
            QuotaUnavailableError: If Redis is unreachable or times out
        """
        score = self._to_score(event.occurred_at)
        keys = self._index_keys(event)
        try:
            pipe = self.redis.pipeline(transaction=True)
            for key in keys:
                pipe.zadd(key, {event.event_id: score})
                if self.key_ttl_seconds:
                    pipe.expire(key, self.key_ttl_seconds)
            pipe.sadd(self.INDEX_KEY, *keys)
            pipe.execute()
        except (redis.ConnectionError, redis.TimeoutError) as e:
            logger.error(f"Redis error in record: {e}")
            raise QuotaUnavailableError(f"Activity store unavailable: {e}", original_error=e) from e

    def prune(self, older_than: datetime) -> int:
        """
        Drop index entries that occurred before ``older_than``.

        Keys emptied by the prune are also removed from the key registry.

        Returns:
            Number of removed sorted-set members
        """
        cutoff = self._to_score(older_than)
        removed = 0
        try:
            for key in self.redis.sscan_iter(self.INDEX_KEY):
                key = key.decode() if isinstance(key, bytes) else key
                removed += int(self.redis.zremrangebyscore(key, "-inf", f"({cutoff}"))
                if self.redis.zcard(key) == 0:
                    self.redis.srem(self.INDEX_KEY, key)
        except (redis.ConnectionError, redis.TimeoutError) as e:
            logger.error(f"Redis error in prune: {e}")
            raise QuotaUnavailableError(f"Activity store unavailable: {e}", original_error=e) from e
        return removed

    def _index_keys(self, event: ActivityEvent) -> List[str]:
        keys = [self._make_key(event.action_kind, event.user_id)]
        if event.scope:
            keys.append(self._make_key(event.action_kind, event.user_id, scope=event.scope))
        if event.content:
            keys.append(self._make_key(event.action_kind, event.user_id, content=event.content))
        if event.scope and event.content:
            keys.append(
                self._make_key(event.action_kind, event.user_id, event.scope, event.content)
            )
        return keys

    def _make_key(
        self,
        action_kind: ActionKind,
        user_id: str,
        scope: Optional[str] = None,
        content: Optional[str] = None,
    ) -> str:
        """
        Generate the sorted-set key for a filter combination.

        Format: quota:{action}:{user}[:s:{scope}][:c:{content_hash}]
        Example: quota:submission:alice:s:news

        Returns:
            Redis key string
        """
        key = f"{self.KEY_PREFIX}:{action_kind.value}:{fold_case(user_id.strip())}"
        if scope:
            key += f":s:{fold_case(scope)}"
        if content:
            key += f":c:{self._hash_content(content)}"
        return key

    @staticmethod
    def _hash_content(content: str) -> str:
        """Key-safe hash of case-folded content, truncated to 16 characters."""
        return hashlib.sha256(fold_case(content).encode()).hexdigest()[:16]

    @staticmethod
    def _to_score(instant: datetime) -> int:
        return round(instant.timestamp() * 1_000_000)
