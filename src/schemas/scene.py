"""
Scene schemas - Pydantic models for editor-supplied scene data

The editor sends camelCase JSON; both camelCase and snake_case field names
are accepted. Domain objects are only built from validated input via
to_domain().
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from models.enums import CameraEasing, Mood, SceneTransitionType
from models.keyframe import CameraKeyframe
from models.scene import AudioSettings, Scene, SceneCharacter, SceneTransition
from utils.enum_helper import EnumHelper


class _EditorModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class SceneCharacterSchema(_EditorModel):
    """A character placed in a scene"""
    id: str = Field(description="Character instance id, unique within the scene")
    rig_id: str = Field(alias="characterId", description="Rig id or display name")
    x: float = Field(50.0, description="Horizontal position, percent of stage width")
    y: float = Field(70.0, description="Vertical position, percent of stage height")
    scale: float = Field(1.0, gt=0, description="Uniform scale")
    flip: bool = Field(False, description="Mirror horizontally")
    animation: str = Field("idle", description="Action name (walk, jump, talk, ...)")
    expression: str = Field("neutral", description="Facial expression")
    is_talking: bool = Field(False, alias="isTalking", description="Mouth animates while narration plays")

    def to_domain(self) -> SceneCharacter:
        return SceneCharacter(
            id=self.id,
            rig_id=self.rig_id,
            x=self.x,
            y=self.y,
            scale=self.scale,
            flip=self.flip,
            animation=self.animation,
            expression=self.expression,
            is_talking=self.is_talking,
        )


class CameraKeyframeSchema(_EditorModel):
    time: float = Field(ge=0, description="Scene-relative time in ms")
    zoom: float = Field(1.0, gt=0, description="Zoom factor (1 = no zoom)")
    pan_x: float = Field(0.0, alias="panX", description="Horizontal pan, percent")
    pan_y: float = Field(0.0, alias="panY", description="Vertical pan, percent")
    rotation: float = Field(0.0, description="Camera roll in degrees")
    easing: CameraEasing = Field(CameraEasing.EASE_IN_OUT, description="Easing into this keyframe")

    def to_domain(self) -> CameraKeyframe:
        return CameraKeyframe(self.time, self.zoom, self.pan_x, self.pan_y, self.rotation, self.easing)


class SceneTransitionSchema(_EditorModel):
    type: SceneTransitionType = Field(SceneTransitionType.FADE, description="Transition kind")
    duration: float = Field(500.0, ge=0, description="Transition length in ms")
    direction: Optional[str] = Field(None, description="Slide direction (left, right, up, down)")

    def to_domain(self) -> SceneTransition:
        return SceneTransition(self.type, self.duration, self.direction)


class SceneSchema(_EditorModel):
    """
    One scene as edited in the UI

    Unknown moods are accepted and become neutral.
    """
    id: str = Field(description="Scene id")
    narration: str = Field("", description="Narration text read over the scene")
    background: str = Field("meadow", description="Background id (selects the ambient bed)")
    mood: Optional[str] = Field(None, description="Scene mood; detected from narration when neutral")
    characters: List[SceneCharacterSchema] = Field(default_factory=list)
    duration: Optional[float] = Field(None, gt=0, description="Explicit duration in ms; computed when omitted")
    camera_keyframes: Optional[List[CameraKeyframeSchema]] = Field(None, alias="cameraKeyframes")
    transition: Optional[SceneTransitionSchema] = None

    @field_validator("characters")
    @classmethod
    def unique_character_ids(cls, characters: List[SceneCharacterSchema]) -> List[SceneCharacterSchema]:
        ids = [c.id for c in characters]
        if len(ids) != len(set(ids)):
            raise ValueError("character ids must be unique within a scene")
        return characters

    def to_domain(self) -> Scene:
        return Scene(
            id=self.id,
            narration=self.narration,
            background=self.background,
            mood=EnumHelper.from_string(Mood, self.mood, default=Mood.NEUTRAL) if self.mood else Mood.NEUTRAL,
            characters=[c.to_domain() for c in self.characters],
            duration=self.duration,
            camera_keyframes=(
                [k.to_domain() for k in self.camera_keyframes] if self.camera_keyframes is not None else None
            ),
            transition=self.transition.to_domain() if self.transition else None,
        )


class AudioSettingsUpdate(_EditorModel):
    """Partial audio settings change; omitted fields are left untouched"""
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    master_volume: Optional[float] = Field(None, ge=0, le=1, alias="masterVolume")
    narration_volume: Optional[float] = Field(None, ge=0, le=1, alias="narrationVolume")
    music_volume: Optional[float] = Field(None, ge=0, le=1, alias="musicVolume")
    sfx_volume: Optional[float] = Field(None, ge=0, le=1, alias="sfxVolume")
    auto_narration: Optional[bool] = Field(None, alias="autoNarration")
    narrator_voice: Optional[str] = Field(None, alias="narratorVoice")

    def to_changes(self) -> dict:
        """Only the fields the caller actually sent"""
        return self.model_dump(exclude_unset=True, by_alias=False)

    def apply_to(self, settings: AudioSettings) -> List[str]:
        return settings.merge(self.to_changes())
