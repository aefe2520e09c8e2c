"""Infrastructure event handlers for quota domain events."""

from .logging_handler import LoggingEventHandler

__all__ = ['LoggingEventHandler']
