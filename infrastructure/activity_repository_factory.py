"""
Activity Repository Factory

Selects the activity store implementation from the environment so the
application layer only depends on IActivityRepository.
"""

import logging
import os
from typing import Optional

from domain.quota_enforcement.repositories import IActivityRepository
from infrastructure.in_memory_activity_repository import InMemoryActivityRepository

logger = logging.getLogger(__name__)


class ActivityRepositoryFactory:
    """
    Factory for creating activity repository implementations.

    Selection Logic:
    - ACTIVITY_BACKEND=redis (default): RedisActivityRepository on the shared client
    - ACTIVITY_BACKEND=memory: InMemoryActivityRepository, single process only
    """

    @staticmethod
    def create(retention_hours: int = 48, backend: Optional[str] = None) -> IActivityRepository:
        """
        Create activity repository based on environment configuration.

        Args:
            retention_hours: Key expiry for the Redis backend
            backend: Override for ACTIVITY_BACKEND

        Returns:
            IActivityRepository implementation

        Raises:
            ValueError: If the backend name is unknown
            RuntimeError: If Redis has not been initialized
        """
        backend = (backend or os.getenv("ACTIVITY_BACKEND", "redis")).strip().lower()

        if backend == "memory":
            logger.warning("Activity factory: using in-memory store, counts are per process")
            return InMemoryActivityRepository()

        if backend == "redis":
            return ActivityRepositoryFactory._create_redis(retention_hours)

        raise ValueError(f"Unknown ACTIVITY_BACKEND: {backend}")

    @staticmethod
    def _create_redis(retention_hours: int) -> IActivityRepository:
        from config.redis_config import get_redis_client
        from infrastructure.redis_activity_repository import RedisActivityRepository

        repository = RedisActivityRepository(
            get_redis_client(),
            key_ttl_seconds=retention_hours * 3600,
        )
        logger.info("Activity factory: using Redis activity store")
        return repository
