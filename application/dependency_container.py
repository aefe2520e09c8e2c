"""
Dependency Injection Container

Holds the process-wide services (engine, activity store, quota service)
that the API handlers and Celery tasks resolve from ``app.container``.
"""

import logging
import threading
from typing import Any, Dict, Type, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')


class DependencyNotFoundError(Exception):
    """Raised when attempting to resolve an unregistered dependency."""
    pass


class DependencyContainer:
    """Registry of shared service instances keyed by type."""

    def __init__(self):
        self._singletons: Dict[Type, Any] = {}
        self._lock = threading.Lock()

    def register_singleton(self, interface: Type[T], implementation: T) -> None:
        """
        Register one shared instance for a type.

        Registering the same type again replaces the instance.

        Example:
            container.register_singleton(QuotaEngine, engine)
        """
        with self._lock:
            self._singletons[interface] = implementation
        logger.debug(f"Registered singleton: {interface.__name__}")

    def resolve(self, interface: Type[T]) -> T:
        """
        Resolve a registered service.

        Raises:
            DependencyNotFoundError: If the type is not registered
        """
        with self._lock:
            if interface in self._singletons:
                return self._singletons[interface]
        raise DependencyNotFoundError(
            f"No registration found for type: {interface.__name__}"
        )
