"""
Scene domain models

Scene data comes from the editor (validated by schemas.scene) and is only
read by the engine. Suggestions produced by the narration mapper are applied
through explicit calls that return new objects.
"""

from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, List, Mapping, Optional

from models.enums import Mood, MusicKey, MusicStyle, SceneTransitionType
from models.keyframe import CameraKeyframe


@dataclass(frozen=True)
class SceneCharacter:
    """
    A rig placed in a scene, with per-scene overrides layered on the rig
    """
    id: str
    rig_id: str
    x: float = 50.0                   # percent of stage width
    y: float = 70.0                   # percent of stage height
    scale: float = 1.0
    flip: bool = False
    animation: str = "idle"
    expression: str = "neutral"
    is_talking: bool = False


@dataclass(frozen=True)
class SceneTransition:
    type: SceneTransitionType = SceneTransitionType.FADE
    duration: float = 500.0           # ms
    direction: Optional[str] = None


@dataclass(frozen=True)
class Scene:
    id: str
    narration: str = ""
    background: str = "meadow"
    mood: Mood = Mood.NEUTRAL
    characters: List[SceneCharacter] = field(default_factory=list)
    duration: Optional[float] = None  # ms; explicit override of computed duration
    camera_keyframes: Optional[List[CameraKeyframe]] = None
    transition: Optional[SceneTransition] = None

    def with_changes(self, **changes) -> 'Scene':
        return replace(self, **changes)


@dataclass(frozen=True)
class ActingSuggestion:
    """Acting choice derived from one narration string"""
    suggested_action: str
    suggested_expression: str
    is_talking: bool


# === Audio ===

@dataclass(frozen=True)
class MoodMusicConfig:
    tempo: int                        # BPM
    key: MusicKey
    style: MusicStyle


@dataclass(frozen=True)
class SceneAudioConfig:
    narration: str
    mood: Mood = Mood.NEUTRAL
    background: str = "meadow"
    dialogue: Optional[List[str]] = None


@dataclass
class AudioSettings:
    """
    Process-wide mixing state

    Volumes are multiplicative gains in [0,1].
    """
    master_volume: float = 0.8
    narration_volume: float = 1.0
    music_volume: float = 0.3
    sfx_volume: float = 0.5
    auto_narration: bool = True
    narrator_voice: Optional[str] = None

    VOLUME_FIELDS = ("master_volume", "narration_volume", "music_volume", "sfx_volume")

    def merge(self, changes: Mapping[str, Any]) -> List[str]:
        """
        Apply a partial update in place

        Unspecified fields are left untouched. Volumes are clamped to [0,1].

        Returns:
            Names of the fields that were present in the update

        Raises:
            ValueError: for unknown field names
        """
        known = {f.name for f in fields(self)}
        unknown = set(changes) - known
        if unknown:
            raise ValueError(f"Unknown audio settings: {sorted(unknown)}")

        for name, value in changes.items():
            if name in self.VOLUME_FIELDS:
                value = max(0.0, min(1.0, float(value)))
            setattr(self, name, value)
        return list(changes)

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}
