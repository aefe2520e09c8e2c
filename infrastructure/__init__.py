"""Infrastructure layer: Redis activity store, configuration and event handlers."""

from .activity_repository_factory import ActivityRepositoryFactory
from .in_memory_activity_repository import InMemoryActivityRepository
from .quota_config import QuotaConfig

__all__ = [
    'ActivityRepositoryFactory',
    'InMemoryActivityRepository',
    'QuotaConfig',
]
