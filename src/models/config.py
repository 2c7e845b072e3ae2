"""
Configuration models

Typed views of the YAML sections loaded by ConfigManager.
"""

from dataclasses import dataclass, field
from typing import Optional

from models.enums import LogLevel
from models.scene import AudioSettings


@dataclass
class SpeechConfig:
    rate: float = 0.9
    pitch: float = 1.1


@dataclass
class AudioConfig:
    settings: AudioSettings = field(default_factory=AudioSettings)
    sample_rate: int = 44100
    speech: SpeechConfig = field(default_factory=SpeechConfig)


@dataclass
class TimelineConfig:
    """
    Scene clock settings

    default_rig None means the first child rig.
    """
    fps: int = 60
    min_scene_duration_ms: float = 4000
    words_per_minute: float = 130
    duration_buffer_ms: float = 2000
    default_rig: Optional[str] = None
    sfx_lead_ms: float = 250


@dataclass
class MotionConfig:
    inbetweens_per_keyframe: int = 6
    squash_max_deformation: float = 0.3


@dataclass
class LoggingConfig:
    level: LogLevel = LogLevel.INFO
    colors: bool = True
    file: Optional[str] = None
