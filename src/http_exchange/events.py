"""
Lifecycle notifications for requests and clients.

A minimal publish/subscribe channel: handlers are plain callables
registered per event name and invoked in registration order with a
RequestEvent. Notifications are best effort: a failing handler is
logged and never interrupts the exchange it observes.
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional

if TYPE_CHECKING:
    from .request import Request
    from .response import Response

logger = logging.getLogger(__name__)

EVENT_BEFORE_SEND = "before_send"
EVENT_AFTER_SEND = "after_send"


@dataclass
class RequestEvent:
    """
    Event payload for request lifecycle notifications.

    ``response`` is only filled once a response has been received,
    i.e. for ``after_send``. Setting ``handled`` stops the remaining
    handlers from being called.
    """

    request: Optional["Request"] = None
    response: Optional["Response"] = None
    name: str = ""
    sender: Any = None
    handled: bool = False


EventHandler = Callable[[RequestEvent], Any]


class EventEmitter:
    """Mixin providing ``on``/``off``/``trigger``."""

    def __init__(self) -> None:
        self._event_handlers: Dict[str, List[EventHandler]] = {}

    def on(self, name: str, handler: EventHandler) -> None:
        """Register a handler for an event."""
        self._event_handlers.setdefault(name, []).append(handler)

    def off(self, name: str, handler: Optional[EventHandler] = None) -> bool:
        """
        Detach handlers from an event.

        Args:
            name: Event name
            handler: Handler to detach; all handlers if None

        Returns:
            True if at least one handler was detached
        """
        handlers = self._event_handlers.get(name)
        if not handlers:
            return False
        if handler is None:
            del self._event_handlers[name]
            return True
        remaining = [h for h in handlers if h != handler]
        self._event_handlers[name] = remaining
        return len(remaining) != len(handlers)

    def has_event_handlers(self, name: str) -> bool:
        return bool(self._event_handlers.get(name))

    def trigger(self, name: str, event: Optional[RequestEvent] = None) -> RequestEvent:
        """Invoke every handler registered for ``name``."""
        if event is None:
            event = RequestEvent()
        event.name = name
        event.sender = self

        for handler in list(self._event_handlers.get(name, ())):
            try:
                handler(event)
            except Exception:
                logger.exception(f"Handler for '{name}' event failed")
            if event.handled:
                break

        return event
