"""
Application Services Layer

Orchestrates the quota domain and coordinates use cases.
"""

from .dependency_container import DependencyContainer, DependencyNotFoundError
from .event_publisher import EventPublisher
from .pagination import PaginatedList
from .quota_policies import build_policy_set
from .quota_service import QuotaService

__all__ = [
    'DependencyContainer',
    'DependencyNotFoundError',
    'EventPublisher',
    'PaginatedList',
    'QuotaService',
    'build_policy_set',
]
