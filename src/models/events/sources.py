from enum import Enum, auto


class EventSource(Enum):
    """Event source identifiers for engine events"""
    TIMELINE = auto()       # Timeline coordinator (scene state machine)
    AUDIO_ENGINE = auto()   # Mixing graph, music, sfx, ambient
    NARRATION = auto()      # Speech playback and lip sync
    APPLICATION = auto()    # Generic application events
