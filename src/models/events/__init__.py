"""
Event system for the scene engine

Timeline and audio engine publish specific events on the EventBus.
"""

# Event type, base class, and sources
from models.events.types import EventType
from models.events.base import Event
from models.events.sources import EventSource

# Timeline events
from models.events.timeline_events import (
    SceneLoadedEvent,
    SceneStateChangedEvent,
    SceneFinishedEvent,
)

# Audio events
from models.events.audio_events import (
    AudioSettingsChangedEvent,
    MusicStartedEvent,
    MusicStoppedEvent,
    SFXTriggeredEvent,
    AmbientChangedEvent,
    NarrationStartedEvent,
    NarrationFinishedEvent,
    MouthShapeChangedEvent,
)

__all__ = [
    # Type, base, and sources
    "EventType",
    "Event",
    "EventSource",

    # Timeline
    "SceneLoadedEvent",
    "SceneStateChangedEvent",
    "SceneFinishedEvent",

    # Audio
    "AudioSettingsChangedEvent",
    "MusicStartedEvent",
    "MusicStoppedEvent",
    "SFXTriggeredEvent",
    "AmbientChangedEvent",
    "NarrationStartedEvent",
    "NarrationFinishedEvent",
    "MouthShapeChangedEvent",
]
