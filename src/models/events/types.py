from enum import Enum, auto


class EventType(Enum):
    # Scene / timeline
    SCENE_LOADED = auto()
    SCENE_STATE_CHANGED = auto()
    SCENE_FINISHED = auto()

    # Audio mixing & synthesis
    AUDIO_SETTINGS_CHANGED = auto()
    MUSIC_STARTED = auto()
    MUSIC_STOPPED = auto()
    SFX_TRIGGERED = auto()
    AMBIENT_CHANGED = auto()

    # Narration
    NARRATION_STARTED = auto()
    NARRATION_FINISHED = auto()
    MOUTH_SHAPE_CHANGED = auto()
