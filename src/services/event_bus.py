"""
Event Bus - scene engine notifications

Pub-sub between the timeline, the audio engine and whoever hosts them
(renderer, exporter, UI bridge):
- Publishers: await publish(event)
- Subscribers: subscribe(event_type, handler, priority, filter_fn)
- Middleware: add_middleware(middleware_fn)
"""

import inspect
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from models.events import Event, EventType
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.EVENT)


@dataclass
class EventHandler:
    """Event handler registration"""
    handler: Callable[[Event], None]
    priority: int
    filter_fn: Optional[Callable[[Event], bool]]


class EventBus:
    """
    Central event bus

    - Handlers run by priority (high first)
    - Optional per-handler filter
    - Middleware pipeline (can rewrite or drop events)
    - Sync and async handlers (auto-detected)
    - One failing handler doesn't stop the others

    Example:
        bus = EventBus()
        bus.subscribe(
            EventType.SCENE_STATE_CHANGED,
            on_state,
            priority=10,
            filter_fn=lambda e: e.scene_id == "intro"
        )
        await bus.publish(SceneStateChangedEvent("intro", SceneState.IDLE, SceneState.LOADING))
    """

    def __init__(self, history_limit: int = 100):
        self._handlers: Dict[EventType, List[EventHandler]] = {}
        self._middleware: List[Callable[[Event], Optional[Event]]] = []

        # Bounded history, newest last
        self._event_history: List[Event] = []
        self._history_limit = history_limit

    def subscribe(
        self,
        event_type: EventType,
        handler: Callable[[Event], None],
        priority: int = 0,
        filter_fn: Optional[Callable[[Event], bool]] = None
    ) -> None:
        """
        Subscribe to an event type

        Args:
            event_type: Which events to listen for
            handler: Function to call (async or sync)
            priority: Higher runs first (default 0)
            filter_fn: Return False to skip an event
        """
        entries = self._handlers.setdefault(event_type, [])
        entries.append(EventHandler(handler, priority, filter_fn))
        entries.sort(key=lambda h: h.priority, reverse=True)

        log.debug(
            "Event handler subscribed",
            event_type=event_type.name,
            handler=getattr(handler, "__name__", repr(handler)),
            priority=priority
        )

    def unsubscribe(self, event_type: EventType, handler: Callable[[Event], None]) -> bool:
        """Remove a handler; returns False if it was not subscribed"""
        entries = self._handlers.get(event_type, [])
        for entry in entries:
            if entry.handler == handler:
                entries.remove(entry)
                return True
        return False

    def add_middleware(self, middleware: Callable[[Event], Optional[Event]]) -> None:
        """
        Add a middleware function (runs in registration order)

        Middleware returns the (possibly modified) event, or None to drop it.
        """
        self._middleware.append(middleware)
        log.debug("Middleware registered", middleware=middleware.__name__)

    async def publish(self, event: Event) -> None:
        """
        Publish an event to all subscribers

        Middleware first, then history, then handlers by priority with
        filters applied. Handler exceptions are logged and skipped.
        """
        for middleware in self._middleware:
            processed = middleware(event)
            if processed is None:
                return
            event = processed

        self._event_history.append(event)
        if len(self._event_history) > self._history_limit:
            self._event_history.pop(0)

        handlers = self._handlers.get(event.type, [])
        if not handlers:
            return

        # Copy: handlers may unsubscribe while we iterate
        for entry in list(handlers):
            if entry.filter_fn and not entry.filter_fn(event):
                continue

            try:
                if inspect.iscoroutinefunction(entry.handler):
                    await entry.handler(event)
                else:
                    result = entry.handler(event)
                    if inspect.isawaitable(result):
                        await result
            except Exception as e:
                log.error(
                    f"Event handler failed: {getattr(entry.handler, '__name__', entry.handler)} for {event.type.name}",
                    exception=e
                )

    def get_event_history(self, limit: int = 10) -> List[Event]:
        """Most recent events (newest last)"""
        return self._event_history[-limit:]

    def clear_history(self) -> None:
        self._event_history.clear()
