"""
Models package - Data models for the scene animation and audio engine
"""

from .enums import LogLevel, LogCategory, CurveType, Mood, SceneState
from .vector import Vector2, Transform
from .rig import CharacterRig, SpritePart, RigColors, RigValidationError
from .keyframe import MotionCurve, ScalarKeyframe, VectorKeyframe, InbetweenFrame
from .scene import Scene, SceneCharacter, ActingSuggestion, AudioSettings

__all__ = [
    'LogLevel',
    'LogCategory',
    'CurveType',
    'Mood',
    'SceneState',
    'Vector2',
    'Transform',
    'CharacterRig',
    'SpritePart',
    'RigColors',
    'RigValidationError',
    'MotionCurve',
    'ScalarKeyframe',
    'VectorKeyframe',
    'InbetweenFrame',
    'Scene',
    'SceneCharacter',
    'ActingSuggestion',
    'AudioSettings',
]
