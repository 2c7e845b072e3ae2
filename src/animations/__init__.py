"""
Motion layer

- easing: easing functions and curve lookup
- interpolation: inbetweens, squash/stretch, keyframe sampling, frame-rate retargeting
- camera: camera keyframes and presets
- clips: per-action clips sampled into rig part transforms
"""

from .easing import apply_curve, get_ease_function
from .interpolation import (
    ACTION_CURVES,
    MOTION_PRESETS,
    convert_frame_rate,
    generate_inbetweens,
    get_motion_curve_for_action,
    sample_keyframes,
)
from .camera import CAMERA_PRESETS, create_camera_animation, get_camera_at_time, suggest_camera_animation
from .clips import CLIPS, AnimationClip, ClipTrack, get_clip_for_action, sample_action, sample_clip, talk_mouth_shape

__all__ = [
    "apply_curve",
    "get_ease_function",
    "ACTION_CURVES",
    "MOTION_PRESETS",
    "convert_frame_rate",
    "generate_inbetweens",
    "get_motion_curve_for_action",
    "sample_keyframes",
    "CAMERA_PRESETS",
    "create_camera_animation",
    "get_camera_at_time",
    "suggest_camera_animation",
    "CLIPS",
    "AnimationClip",
    "ClipTrack",
    "get_clip_for_action",
    "sample_action",
    "sample_clip",
    "talk_mouth_shape",
]
