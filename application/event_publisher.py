"""
Event Publisher

Application service for publishing domain events to registered handlers.
Keeps logging and auditing out of the quota evaluation path.
"""

import logging
from threading import Lock
from typing import Callable, Dict, Iterable, List, Type

from domain.events import DomainEvent

logger = logging.getLogger(__name__)

EventHandler = Callable[[DomainEvent], None]


class EventPublisher:
    """
    Dispatches domain events to handlers registered for their type.

    A handler subscribed to a base class (e.g. DomainEvent) receives every
    subclass event. Handler exceptions are logged and never reach the
    publisher's caller. Thread-safe.
    """

    def __init__(self):
        self._handlers: Dict[Type[DomainEvent], List[EventHandler]] = {}
        self._lock = Lock()

    def subscribe(self, event_type: Type[DomainEvent], handler: EventHandler) -> None:
        """
        Register a handler for an event type and its subclasses.

        Args:
            event_type: The type of domain event to handle
            handler: Callable that accepts the event
        """
        with self._lock:
            self._handlers.setdefault(event_type, []).append(handler)
        logger.debug(
            f"Registered handler {getattr(handler, '__name__', repr(handler))} "
            f"for {event_type.__name__}"
        )

    def subscribe_many(
        self,
        event_types: Iterable[Type[DomainEvent]],
        handler: EventHandler,
    ) -> None:
        for event_type in event_types:
            self.subscribe(event_type, handler)

    def handlers_for(self, event_type: Type[DomainEvent]) -> List[EventHandler]:
        """Handlers matching the event type, most specific type first."""
        with self._lock:
            matched: List[EventHandler] = []
            for klass in event_type.__mro__:
                matched.extend(self._handlers.get(klass, []))
            return matched

    def publish(self, event: DomainEvent) -> None:
        """
        Publish an event to all matching handlers synchronously.

        Args:
            event: The domain event to publish
        """
        event_type = type(event)
        handlers = self.handlers_for(event_type)

        if not handlers:
            logger.debug(f"No handlers registered for {event_type.__name__}")
            return

        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                # Side effects must not break quota checks
                logger.error(
                    f"Error in handler {getattr(handler, '__name__', repr(handler))} "
                    f"for {event_type.__name__}: {e}",
                    exc_info=True,
                )
