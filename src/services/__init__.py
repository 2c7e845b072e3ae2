"""Services layer"""

from .event_bus import EventBus
from .middleware import log_middleware
from .narration_mapper import (
    analyze_narration_for_actions,
    auto_enhance_scene,
    apply_auto_durations,
    calculate_scene_duration,
    detect_actions_for_sfx,
    detect_mood,
    generate_transition,
    scene_character_from_story,
)

__all__ = [
    "EventBus",
    "log_middleware",
    "analyze_narration_for_actions",
    "auto_enhance_scene",
    "apply_auto_durations",
    "calculate_scene_duration",
    "detect_actions_for_sfx",
    "detect_mood",
    "generate_transition",
    "scene_character_from_story",
]
