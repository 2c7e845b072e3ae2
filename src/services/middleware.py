"""
Middleware for EventBus

Pipeline functions that see every event before handlers. Return the event
to pass it on, or None to drop it.
"""

from typing import Callable, Iterable, Optional

from models.events import Event, EventType
from utils.enum_helper import EnumHelper
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.EVENT)


def log_middleware(event: Event) -> Event:
    """
    Log every event at DEBUG

    Usage:
        event_bus.add_middleware(log_middleware)
    """
    source = EnumHelper.to_string(event.source) if event.source else "-"
    log.debug(f"Event: {event.type.name} from {source}", **event.to_data())
    return event


def drop_types(types: Iterable[EventType]) -> Callable[[Event], Optional[Event]]:
    """
    Middleware that drops the given event types

    Handy for muting high-rate events such as MOUTH_SHAPE_CHANGED:
        event_bus.add_middleware(drop_types([EventType.MOUTH_SHAPE_CHANGED]))
    """
    blocked = frozenset(types)

    def drop_middleware(event: Event) -> Optional[Event]:
        return None if event.type in blocked else event

    return drop_middleware
