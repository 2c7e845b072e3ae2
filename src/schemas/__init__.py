"""Pydantic schemas for editor-supplied data"""

from .scene import AudioSettingsUpdate, CameraKeyframeSchema, SceneCharacterSchema, SceneSchema, SceneTransitionSchema

__all__ = [
    "AudioSettingsUpdate",
    "CameraKeyframeSchema",
    "SceneCharacterSchema",
    "SceneSchema",
    "SceneTransitionSchema",
]
