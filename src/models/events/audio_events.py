from dataclasses import dataclass
from typing import Any, Dict, Optional

from models.events.base import Event
from models.events.types import EventType
from models.events.sources import EventSource
from models.enums import AmbientType, Mood, MouthShape, SFXType


@dataclass(init=False)
class AudioSettingsChangedEvent(Event):
    changes: Dict[str, Any]

    def __init__(self, changes: Dict[str, Any]):
        super().__init__(type=EventType.AUDIO_SETTINGS_CHANGED, source=EventSource.AUDIO_ENGINE)
        self.changes = changes


@dataclass(init=False)
class MusicStartedEvent(Event):
    mood: Mood
    tempo: int

    def __init__(self, mood: Mood, tempo: int):
        super().__init__(type=EventType.MUSIC_STARTED, source=EventSource.AUDIO_ENGINE)
        self.mood = mood
        self.tempo = tempo


@dataclass(init=False)
class MusicStoppedEvent(Event):
    oscillators: int

    def __init__(self, oscillators: int):
        super().__init__(type=EventType.MUSIC_STOPPED, source=EventSource.AUDIO_ENGINE)
        self.oscillators = oscillators


@dataclass(init=False)
class SFXTriggeredEvent(Event):
    action: str
    sfx: SFXType

    def __init__(self, action: str, sfx: SFXType):
        super().__init__(type=EventType.SFX_TRIGGERED, source=EventSource.AUDIO_ENGINE)
        self.action = action
        self.sfx = sfx


@dataclass(init=False)
class AmbientChangedEvent(Event):
    ambient: Optional[AmbientType]

    def __init__(self, ambient: Optional[AmbientType]):
        super().__init__(type=EventType.AMBIENT_CHANGED, source=EventSource.AUDIO_ENGINE)
        self.ambient = ambient


@dataclass(init=False)
class NarrationStartedEvent(Event):
    text: str
    duration_ms: float

    def __init__(self, text: str, duration_ms: float):
        super().__init__(type=EventType.NARRATION_STARTED, source=EventSource.NARRATION)
        self.text = text
        self.duration_ms = duration_ms


@dataclass(init=False)
class NarrationFinishedEvent(Event):
    interrupted: bool
    error: Optional[str]

    def __init__(self, interrupted: bool = False, error: Optional[str] = None):
        super().__init__(type=EventType.NARRATION_FINISHED, source=EventSource.NARRATION)
        self.interrupted = interrupted
        self.error = error


@dataclass(init=False)
class MouthShapeChangedEvent(Event):
    shape: MouthShape

    def __init__(self, shape: MouthShape):
        super().__init__(type=EventType.MOUTH_SHAPE_CHANGED, source=EventSource.NARRATION)
        self.shape = shape
