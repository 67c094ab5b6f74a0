"""
Message Bus

Routes commands to the single handler that owns them and fans events
out to every subscriber. Commands carry the booking engine's writes;
events feed collaborators such as notification delivery.
"""

from collections import defaultdict
from typing import Any, Callable, DefaultDict, Dict, Iterable, List, Type
import logging

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)


class MessageBus:
    """
    Commands: exactly one handler, its errors propagate to the caller.
    Events: any number of handlers, each failure is logged and dropped.
    """

    def __init__(self):
        self._command_handlers: Dict[Type, Callable[[Any], Any]] = {}
        self._subscribers: DefaultDict[Type[DomainEvent], List[Callable]] = defaultdict(list)

    def register_command_handler(self, command_type: Type, handler: Callable[[Any], Any]):
        if command_type in self._command_handlers:
            raise ValueError(f"{command_type.__name__} already has a handler")
        self._command_handlers[command_type] = handler
        logger.debug(f"{command_type.__name__} -> {type(handler).__name__}")

    def has_command_handler(self, command_type: Type) -> bool:
        return command_type in self._command_handlers

    def register_event_handler(self, event_type: Type[DomainEvent], handler: Callable[[DomainEvent], None]):
        """Subscribe ``handler``; subscribing the same callable twice is a no-op."""
        subscribers = self._subscribers[event_type]
        if handler in subscribers:
            return
        subscribers.append(handler)
        logger.debug(f"Subscribed {getattr(handler, '__name__', handler)} to {event_type.__name__}")

    def handle_command(self, command: Any) -> Any:
        """Run the command's handler and return its result."""
        name = type(command).__name__
        try:
            handler = self._command_handlers[type(command)]
        except KeyError:
            raise ValueError(f"No handler registered for command {name}") from None

        logger.info(f"Handling command: {name}")
        try:
            return handler(command)
        except Exception as e:
            logger.info(f"Command {name} failed: {e.__class__.__name__}: {e}")
            raise

    def publish_events(self, events: Iterable[DomainEvent]):
        """
        Deliver each event to its subscribers.

        A broken subscriber never blocks the others and never reaches the
        code that raised the event.
        """
        for event in events:
            subscribers = self._subscribers.get(type(event), [])
            if not subscribers:
                logger.warning(f"Nobody listens to {event.event_type}")
                continue

            logger.info(f"Publishing event: {event.event_type} (ID: {event.event_id})")
            for subscriber in subscribers:
                try:
                    subscriber(event)
                except Exception as e:
                    logger.error(
                        f"Subscriber {getattr(subscriber, '__name__', subscriber)} "
                        f"failed on {event.event_type}: {e}",
                        exc_info=True,
                    )


# Process-wide bus; apps register their handlers in AppConfig.ready()
message_bus = MessageBus()
