from dataclasses import dataclass
from typing import Optional

from models.events.base import Event
from models.events.types import EventType
from models.events.sources import EventSource
from models.enums import SceneState


@dataclass(init=False)
class SceneLoadedEvent(Event):
    scene_id: str
    duration_ms: float

    def __init__(self, scene_id: str, duration_ms: float):
        super().__init__(type=EventType.SCENE_LOADED, source=EventSource.TIMELINE)
        self.scene_id = scene_id
        self.duration_ms = duration_ms


@dataclass(init=False)
class SceneStateChangedEvent(Event):
    scene_id: Optional[str]
    old: SceneState
    new: SceneState

    def __init__(self, scene_id: Optional[str], old: SceneState, new: SceneState):
        super().__init__(type=EventType.SCENE_STATE_CHANGED, source=EventSource.TIMELINE)
        self.scene_id = scene_id
        self.old = old
        self.new = new


@dataclass(init=False)
class SceneFinishedEvent(Event):
    scene_id: str
    elapsed_ms: float

    def __init__(self, scene_id: str, elapsed_ms: float):
        super().__init__(type=EventType.SCENE_FINISHED, source=EventSource.TIMELINE)
        self.scene_id = scene_id
        self.elapsed_ms = elapsed_ms
